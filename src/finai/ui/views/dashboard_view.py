from datetime import datetime
from typing import Callable, List, Tuple
import flet as ft

from finai.core.models import StockHolding
from finai.core.reports import (
    expense_breakdown,
    financial_summary_text,
    monthly_cash_flow,
    portfolio_summary,
    total_balance,
)
from finai.services.firestore_service import FirestoreService, FirestoreServiceError
from finai.services.gemini_service import GeminiService
from finai.state.app_state import AppState


def _money(value: float) -> str:
    return f"{value:,.2f}"


def refresh_holding_prices(
    gemini: GeminiService,
    fs: FirestoreService,
    uid: str,
    holdings: List[StockHolding],
) -> Tuple[str, bool, List[StockHolding]]:
    """Estimate prices, store them and return (message, is_error, holdings to show)."""
    if not gemini.enabled:
        return "Set API_KEY to enable AI price estimates.", True, holdings
    updates = gemini.fetch_stock_prices(holdings)
    if not updates:
        return "No price estimates were returned.", True, holdings
    try:
        changed = fs.apply_price_updates(uid, updates)
        refreshed = fs.list_holdings(uid)
    except FirestoreServiceError as exc:
        return str(exc), True, holdings
    return f"Updated {changed} holdings.", False, refreshed


def _portfolio_line(holdings: List[StockHolding]) -> str:
    portfolio = portfolio_summary(holdings)
    return (
        f"Value {_money(portfolio['market_value'])} "
        f"({portfolio['unrealized_gain']:+,.2f}, {portfolio['unrealized_gain_pct']:+.2f}%)"
    )


def _holding_lines(holdings: List[StockHolding]) -> List[ft.Control]:
    return [
        ft.Text(
            f"• {holding.symbol} x {holding.shares:g} @ "
            f"{_money(holding.current_price) if holding.current_price is not None else '-'} "
            f"(cost {_money(holding.avg_cost)})"
        )
        for holding in holdings
    ] or [ft.Text("No holdings yet")]


def build_dashboard_view(
    page: ft.Page,
    app_state: AppState,
    gemini: GeminiService,
    on_logout: Callable[[], None],
) -> ft.View:
    uid = app_state.session.uid
    fs = app_state.outcome.store.with_id_token(app_state.session.id_token)
    status_text = ft.Text(color=ft.Colors.RED_400)
    advice_text = ft.Text(selectable=True)

    try:
        accounts = fs.list_accounts(uid)
        transactions = fs.list_transactions(uid)
        holdings = fs.list_holdings(uid)
    except FirestoreServiceError as exc:
        accounts, transactions, holdings = [], [], []
        status_text.value = str(exc)
    except Exception as exc:
        accounts, transactions, holdings = [], [], []
        status_text.value = f"Could not load data: {exc}"

    now = datetime.now()
    flow = monthly_cash_flow(transactions, now.year, now.month)
    breakdown = expense_breakdown(transactions, now.year, now.month)
    portfolio_text = ft.Text(_portfolio_line(holdings))
    holding_list = ft.Column(controls=_holding_lines(holdings))

    def set_status(message: str, is_error: bool = True) -> None:
        status_text.value = message
        status_text.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400
        page.update()

    def on_refresh_prices(_):
        nonlocal holdings
        message, is_error, holdings = refresh_holding_prices(gemini, fs, uid, holdings)
        portfolio_text.value = _portfolio_line(holdings)
        holding_list.controls = _holding_lines(holdings)
        set_status(message, is_error=is_error)

    def on_advice(_):
        advice_text.value = "Thinking..."
        page.update()
        advice_text.value = gemini.get_financial_advice(
            financial_summary_text(accounts, transactions, holdings, now)
        )
        page.update()

    account_lines = [
        ft.Text(f"• {account.name} ({account.account_type}): {_money(account.balance)} {account.currency}")
        for account in accounts
    ] or [ft.Text("No accounts yet")]
    category_lines = [ft.Text(f"• {name}: {_money(value)}") for name, value in breakdown] or [
        ft.Text("No expenses this month")
    ]

    return ft.View(
        route="/dashboard",
        scroll=ft.ScrollMode.AUTO,
        controls=[
            ft.AppBar(
                title=ft.Text(f"FinAI - {app_state.session.label}"),
                actions=[
                    ft.TextButton("Accounts", on_click=lambda _: page.go("/accounts")),
                    ft.TextButton("Transactions", on_click=lambda _: page.go("/transactions")),
                    ft.TextButton("Stocks", on_click=lambda _: page.go("/stocks")),
                    ft.OutlinedButton("Refresh", on_click=lambda _: page.go("/dashboard")),
                    ft.TextButton("Logout", on_click=lambda _: on_logout()),
                ],
            ),
            ft.Column(
                controls=[
                    ft.Text(now.strftime("%A, %d %B %Y"), size=18),
                    status_text,
                    ft.Text(f"Total balance: {_money(total_balance(accounts))}", size=22, weight=ft.FontWeight.BOLD),
                    *account_lines,
                    ft.Divider(),
                    ft.Text("This Month", size=20, weight=ft.FontWeight.BOLD),
                    ft.Text(
                        f"Income {_money(flow['income'])} / Expense {_money(flow['expense'])} / Net {_money(flow['net'])}"
                    ),
                    *category_lines,
                    ft.Divider(),
                    ft.Text("Stocks", size=20, weight=ft.FontWeight.BOLD),
                    portfolio_text,
                    holding_list,
                    ft.Row(
                        controls=[
                            ft.Button("Estimate Prices with AI", on_click=on_refresh_prices),
                            ft.OutlinedButton("Get Advice", on_click=on_advice),
                        ]
                    ),
                    advice_text,
                ],
            ),
        ],
    )
