from typing import Callable
import flet as ft

from finai.core.models import ACCOUNT_TYPES
from finai.services.firestore_service import FirestoreServiceError
from finai.state.app_state import AppState


def build_accounts_view(page: ft.Page, app_state: AppState, on_back: Callable[[], None]) -> ft.View:
    fs = app_state.outcome.store.with_id_token(app_state.session.id_token)

    name = ft.TextField(label="Account Name", width=320)
    account_type = ft.Dropdown(
        width=200,
        label="Type",
        value=ACCOUNT_TYPES[0],
        options=[ft.dropdown.Option(value) for value in ACCOUNT_TYPES],
    )
    balance = ft.TextField(label="Opening Balance", width=200, value="0")
    currency = ft.TextField(label="Currency", width=120, value="TWD")
    status = ft.Text(color=ft.Colors.RED_400)
    account_list = ft.Column(spacing=8)

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def refresh_accounts() -> None:
        uid = app_state.session.uid
        if not uid:
            set_status("No active session.")
            page.update()
            return

        account_list.controls.clear()
        accounts = fs.list_accounts(uid)

        if not accounts:
            account_list.controls.append(ft.Text("No accounts added yet."))
            page.update()
            return

        for account in accounts:
            new_balance = ft.TextField(label="New Balance", width=180, value=f"{account.balance:.2f}")

            def make_balance_handler(account_id: str, field: ft.TextField):
                def handler(_):
                    try:
                        fs.update_account_balance(uid, account_id, float((field.value or "").strip()))
                        set_status("Balance updated.", is_error=False)
                    except ValueError:
                        set_status("Balance must be a number.")
                    except FirestoreServiceError as exc:
                        set_status(str(exc))
                    refresh_accounts()
                    page.update()

                return handler

            def make_delete_handler(account_id: str):
                def handler(_):
                    removed = fs.delete_account(uid, account_id)
                    set_status(f"Account deleted with {removed} transactions.", is_error=False)
                    refresh_accounts()
                    page.update()

                return handler

            account_list.controls.append(
                ft.Card(
                    content=ft.Container(
                        padding=12,
                        content=ft.Column(
                            controls=[
                                ft.Text(account.name, weight=ft.FontWeight.BOLD),
                                ft.Text(f"Type: {account.account_type}, Balance: {account.balance:,.2f} {account.currency}"),
                                ft.Row(
                                    controls=[
                                        new_balance,
                                        ft.TextButton("Set Balance", on_click=make_balance_handler(account.id, new_balance)),
                                        ft.TextButton("Delete", on_click=make_delete_handler(account.id)),
                                    ]
                                ),
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
            fs.create_account(
                uid,
                name=name.value or "",
                account_type=account_type.value or ACCOUNT_TYPES[0],
                balance=float((balance.value or "0").strip()),
                currency=(currency.value or "TWD").strip().upper(),
            )
            name.value = ""
            balance.value = "0"
            set_status("Account added.", is_error=False)
            refresh_accounts()
        except ValueError:
            set_status("Opening balance must be a number.")
            page.update()
        except FirestoreServiceError as exc:
            set_status(str(exc))
            page.update()

    try:
        refresh_accounts()
    except Exception as exc:
        set_status(f"Could not load accounts: {exc}")

    return ft.View(
        route="/accounts",
        controls=[
            ft.AppBar(title=ft.Text("FinAI - Accounts")),
            ft.Container(
                padding=20,
                content=ft.Column(
                    scroll=ft.ScrollMode.AUTO,
                    controls=[
                        ft.Row(controls=[ft.Button("Back to Dashboard", on_click=lambda _: on_back())]),
                        ft.Text("Add Account", size=22, weight=ft.FontWeight.BOLD),
                        name,
                        ft.Row(controls=[account_type, balance, currency]),
                        ft.Button("Add Account", on_click=on_add),
                        status,
                        ft.Divider(),
                        ft.Text("Your Accounts", size=20, weight=ft.FontWeight.BOLD),
                        account_list,
                    ],
                ),
            ),
        ],
    )
