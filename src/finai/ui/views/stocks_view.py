from typing import Callable
import flet as ft

from finai.services.firestore_service import FirestoreServiceError
from finai.state.app_state import AppState


def build_stocks_view(page: ft.Page, app_state: AppState, on_back: Callable[[], None]) -> ft.View:
    fs = app_state.outcome.store.with_id_token(app_state.session.id_token)

    symbol = ft.TextField(label="Symbol (e.g. 2330.TW)", width=220)
    shares = ft.TextField(label="Shares", width=160)
    avg_cost = ft.TextField(label="Average Cost", width=180)
    status = ft.Text(color=ft.Colors.RED_400)
    holding_list = ft.Column(spacing=8)

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def refresh_holdings() -> None:
        uid = app_state.session.uid
        if not uid:
            set_status("No active session.")
            page.update()
            return

        holding_list.controls.clear()
        holdings = fs.list_holdings(uid)

        if not holdings:
            holding_list.controls.append(ft.Text("No holdings added yet."))
            page.update()
            return

        for holding in holdings:
            price = f"{holding.current_price:,.2f}" if holding.current_price is not None else "-"

            def make_delete_handler(holding_id: str):
                def handler(_):
                    fs.delete_holding(uid, holding_id)
                    refresh_holdings()
                    page.update()

                return handler

            holding_list.controls.append(
                ft.Card(
                    content=ft.Container(
                        padding=12,
                        content=ft.Column(
                            controls=[
                                ft.Text(holding.symbol, weight=ft.FontWeight.BOLD),
                                ft.Text(f"Shares: {holding.shares:g}, Cost: {holding.avg_cost:,.2f}, Price: {price}"),
                                ft.Row(controls=[ft.TextButton("Delete", on_click=make_delete_handler(holding.id))]),
                            ]
                        ),
                    )
                )
            )

        page.update()

    def on_add(_):
        uid = app_state.session.uid
        if not uid:
            set_status("No active session.")
            page.update()
            return

        try:
            fs.create_holding(
                uid,
                symbol=symbol.value or "",
                shares=float((shares.value or "").strip()),
                avg_cost=float((avg_cost.value or "").strip()),
            )
            symbol.value = ""
            shares.value = ""
            avg_cost.value = ""
            set_status("Holding added.", is_error=False)
            refresh_holdings()
        except ValueError:
            set_status("Shares and average cost must be numbers.")
            page.update()
        except FirestoreServiceError as exc:
            set_status(str(exc))
            page.update()

    try:
        refresh_holdings()
    except Exception as exc:
        set_status(f"Could not load holdings: {exc}")

    return ft.View(
        route="/stocks",
        controls=[
            ft.AppBar(title=ft.Text("FinAI - Stocks")),
            ft.Container(
                padding=20,
                content=ft.Column(
                    scroll=ft.ScrollMode.AUTO,
                    controls=[
                        ft.Row(controls=[ft.Button("Back to Dashboard", on_click=lambda _: on_back())]),
                        ft.Text("Add Holding", size=22, weight=ft.FontWeight.BOLD),
                        ft.Row(controls=[symbol, shares, avg_cost]),
                        ft.Button("Add Holding", on_click=on_add),
                        status,
                        ft.Divider(),
                        ft.Text("Your Holdings", size=20, weight=ft.FontWeight.BOLD),
                        holding_list,
                    ],
                ),
            ),
        ],
    )
