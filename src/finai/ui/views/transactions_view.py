from datetime import datetime
from typing import Callable
import flet as ft

from finai.core.models import TRANSACTION_TYPES
from finai.services.firestore_service import FirestoreServiceError
from finai.state.app_state import AppState


DATE_FMT = "%Y-%m-%d"


def build_transactions_view(page: ft.Page, app_state: AppState, on_back: Callable[[], None]) -> ft.View:
    fs = app_state.outcome.store.with_id_token(app_state.session.id_token)

    account = ft.Dropdown(width=320, label="Account")
    tx_type = ft.Dropdown(
        width=180,
        label="Type",
        value="expense",
        options=[ft.dropdown.Option(value) for value in TRANSACTION_TYPES],
    )
    amount = ft.TextField(label="Amount", width=180)
    category = ft.TextField(label="Category", width=220)
    occurred_at = ft.TextField(label="Date (YYYY-MM-DD)", width=200, value=datetime.now().strftime(DATE_FMT))
    note = ft.TextField(label="Note", width=500)
    status = ft.Text(color=ft.Colors.RED_400)
    tx_list = ft.Column(spacing=8)
    account_names = {}

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def refresh_account_options() -> None:
        uid = app_state.session.uid
        if not uid:
            return

        accounts = fs.list_accounts(uid)
        account_names.clear()
        account_names.update({row.id: row.name for row in accounts})
        account.options = [ft.dropdown.Option(row.id, row.name) for row in accounts]
        if account.value not in account_names:
            account.value = accounts[0].id if accounts else None

    def refresh_transactions() -> None:
        uid = app_state.session.uid
        if not uid:
            set_status("No active session.")
            page.update()
            return

        tx_list.controls.clear()
        transactions = fs.list_transactions(uid)

        if not transactions:
            tx_list.controls.append(ft.Text("No transactions recorded yet."))
            page.update()
            return

        for tx in transactions:
            when = tx.occurred_at.strftime(DATE_FMT) if hasattr(tx.occurred_at, "strftime") else "-"
            sign = "+" if tx.tx_type == "income" else "-"

            def make_delete_handler(transaction_id: str):
                def handler(_):
                    fs.delete_transaction(uid, transaction_id)
                    set_status("Transaction deleted.", is_error=False)
                    refresh_transactions()
                    page.update()

                return handler

            tx_list.controls.append(
                ft.Card(
                    content=ft.Container(
                        padding=12,
                        content=ft.Column(
                            controls=[
                                ft.Text(f"{sign}{tx.amount:,.2f} {tx.category or '-'}", weight=ft.FontWeight.BOLD),
                                ft.Text(f"Account: {account_names.get(tx.account_id, tx.account_id)}, Date: {when}"),
                                ft.Text(tx.note),
                                ft.Row(controls=[ft.TextButton("Delete", on_click=make_delete_handler(tx.id))]),
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

        if not account.value or not amount.value:
            set_status("Account and amount are required.")
            page.update()
            return

        try:
            fs.create_transaction(
                uid,
                account_id=account.value,
                tx_type=tx_type.value or "expense",
                amount=float(amount.value.strip()),
                category=(category.value or "").strip(),
                occurred_at=datetime.strptime((occurred_at.value or "").strip(), DATE_FMT),
                note=(note.value or "").strip(),
            )
            amount.value = ""
            note.value = ""
            set_status("Transaction added.", is_error=False)
            refresh_transactions()
        except ValueError:
            set_status("Amount must be a number and date must be YYYY-MM-DD.")
            page.update()
        except FirestoreServiceError as exc:
            set_status(str(exc))
            page.update()

    try:
        refresh_account_options()
        refresh_transactions()
    except Exception as exc:
        set_status(f"Could not load transactions: {exc}")

    return ft.View(
        route="/transactions",
        controls=[
            ft.AppBar(title=ft.Text("FinAI - Transactions")),
            ft.Container(
                padding=20,
                content=ft.Column(
                    scroll=ft.ScrollMode.AUTO,
                    controls=[
                        ft.Row(controls=[ft.Button("Back to Dashboard", on_click=lambda _: on_back())]),
                        ft.Text("Add Transaction", size=22, weight=ft.FontWeight.BOLD),
                        ft.Row(controls=[account, tx_type, amount]),
                        ft.Row(controls=[category, occurred_at]),
                        note,
                        ft.Button("Add Transaction", on_click=on_add),
                        status,
                        ft.Divider(),
                        ft.Text("Recent Transactions", size=20, weight=ft.FontWeight.BOLD),
                        tx_list,
                    ],
                ),
            ),
        ],
    )
