from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from finai.core.models import Account, StockHolding, Transaction


def total_balance(accounts: Iterable[Account]) -> float:
    return round(sum(account.balance for account in accounts), 2)


def _in_month(tx: Transaction, year: int, month: int) -> bool:
    return tx.occurred_at.year == year and tx.occurred_at.month == month


def monthly_cash_flow(transactions: Iterable[Transaction], year: int, month: int) -> Dict[str, float]:
    """Income, expense and net for one calendar month."""
    income = 0.0
    expense = 0.0
    for tx in transactions:
        if not _in_month(tx, year, month):
            continue
        if tx.tx_type == "income":
            income += tx.amount
        elif tx.tx_type == "expense":
            expense += tx.amount
    return {
        "income": round(income, 2),
        "expense": round(expense, 2),
        "net": round(income - expense, 2),
    }


def expense_breakdown(
    transactions: Iterable[Transaction],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[Tuple[str, float]]:
    """Expense totals per category, largest first."""
    totals: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        if tx.tx_type != "expense":
            continue
        if year is not None and month is not None and not _in_month(tx, year, month):
            continue
        totals[tx.category or "Other"] += tx.amount
    return sorted(((name, round(value, 2)) for name, value in totals.items()), key=lambda row: (-row[1], row[0]))


def portfolio_summary(holdings: Iterable[StockHolding]) -> Dict[str, float]:
    market_value = 0.0
    cost = 0.0
    for holding in holdings:
        market_value += holding.market_value
        cost += holding.cost_basis
    gain = market_value - cost
    gain_pct = (gain / cost * 100) if cost else 0.0
    return {
        "market_value": round(market_value, 2),
        "cost": round(cost, 2),
        "unrealized_gain": round(gain, 2),
        "unrealized_gain_pct": round(gain_pct, 2),
    }


def financial_summary_text(
    accounts: List[Account],
    transactions: List[Transaction],
    holdings: List[StockHolding],
    now: Optional[datetime] = None,
) -> str:
    """Plain-text snapshot used as the prompt for advice."""
    now = now or datetime.now()
    flow = monthly_cash_flow(transactions, now.year, now.month)
    portfolio = portfolio_summary(holdings)
    top = expense_breakdown(transactions, now.year, now.month)[:3]

    lines = [
        f"Total balance across {len(accounts)} accounts: {total_balance(accounts):.2f}",
        f"This month income {flow['income']:.2f}, expense {flow['expense']:.2f}, net {flow['net']:.2f}",
        f"Stock portfolio value {portfolio['market_value']:.2f} "
        f"(unrealized {portfolio['unrealized_gain']:+.2f}, {portfolio['unrealized_gain_pct']:+.2f}%)",
    ]
    if top:
        lines.append("Top expense categories: " + ", ".join(f"{name} {value:.2f}" for name, value in top))
    return "\n".join(lines)
