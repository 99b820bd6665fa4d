from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


ACCOUNT_TYPES = ("bank", "cash", "credit", "brokerage")
TRANSACTION_TYPES = ("income", "expense")


@dataclass
class Account:
    id: str
    name: str
    account_type: str
    balance: float
    currency: str = "TWD"


@dataclass
class Transaction:
    id: str
    account_id: str
    tx_type: str
    amount: float
    category: str
    occurred_at: datetime
    note: str = ""


@dataclass
class StockHolding:
    id: str
    symbol: str
    shares: float
    avg_cost: float
    current_price: float | None = None

    @property
    def market_value(self) -> float:
        price = self.current_price if self.current_price is not None else self.avg_cost
        return self.shares * price

    @property
    def cost_basis(self) -> float:
        return self.shares * self.avg_cost


@dataclass(frozen=True)
class StockPriceUpdate:
    symbol: str
    price: float
