from datetime import datetime, timezone
from typing import Any, List, Optional

try:
    from google.cloud import firestore
except ModuleNotFoundError as exc:
    raise ModuleNotFoundError(
        "Missing dependency 'google-cloud-firestore'. Install the project with pip install -e ."
    ) from exc
from google.auth.credentials import AnonymousCredentials
from google.oauth2.credentials import Credentials

from finai.core.models import (
    ACCOUNT_TYPES,
    TRANSACTION_TYPES,
    Account,
    StockHolding,
    StockPriceUpdate,
    Transaction,
)


class FirestoreServiceError(Exception):
    pass


class FirestoreService:
    def __init__(self, project_id: str, credentials: Any = None, db: Any = None) -> None:
        if not project_id:
            raise FirestoreServiceError("Missing Firebase project id")
        self.project_id = project_id
        if db is None:
            db = firestore.Client(project=project_id, credentials=credentials or AnonymousCredentials())
        self.db = db

    def with_id_token(self, id_token: str) -> "FirestoreService":
        """Return a service whose requests are authorized as the signed-in user."""
        if not id_token:
            raise FirestoreServiceError("Sign in before accessing your data.")
        return FirestoreService(self.project_id, credentials=Credentials(token=id_token))

    def _user_ref(self, uid: str):
        if not uid:
            raise FirestoreServiceError("Missing user id")
        return self.db.collection("users").document(uid)

    def ensure_user_profile(self, uid: str, email: str, display_name: str = "") -> None:
        ref = self._user_ref(uid)
        if not ref.get().exists:
            ref.set(
                {
                    "email": email,
                    "display_name": display_name,
                    "created_at": datetime.now(timezone.utc),
                }
            )

    def list_accounts(self, uid: str) -> List[Account]:
        docs = self._user_ref(uid).collection("accounts").stream()
        results: List[Account] = []
        for doc in docs:
            data = doc.to_dict() or {}
            results.append(
                Account(
                    id=doc.id,
                    name=data.get("name", ""),
                    account_type=data.get("account_type", "bank"),
                    balance=float(data.get("balance", 0.0)),
                    currency=data.get("currency", "TWD"),
                )
            )
        results.sort(key=lambda row: row.name)
        return results

    def create_account(
        self,
        uid: str,
        *,
        name: str,
        account_type: str,
        balance: float,
        currency: str = "TWD",
    ) -> str:
        if not name.strip():
            raise FirestoreServiceError("Account name is required.")
        if account_type not in ACCOUNT_TYPES:
            raise FirestoreServiceError(f"Unsupported account type: {account_type}")
        ref = self._user_ref(uid).collection("accounts").document()
        ref.set(
            {
                "name": name.strip(),
                "account_type": account_type,
                "balance": float(balance),
                "currency": currency,
                "created_at": datetime.now(timezone.utc),
            }
        )
        return ref.id

    def update_account_balance(self, uid: str, account_id: str, balance: float) -> None:
        self._user_ref(uid).collection("accounts").document(account_id).update({"balance": float(balance)})

    def delete_account(self, uid: str, account_id: str) -> int:
        """Delete an account together with its transactions; returns how many transactions went."""
        user_ref = self._user_ref(uid)
        batch = self.db.batch()
        removed = 0
        for tx in self.list_transactions(uid, account_id=account_id):
            batch.delete(user_ref.collection("transactions").document(tx.id))
            removed += 1
        batch.delete(user_ref.collection("accounts").document(account_id))
        batch.commit()
        return removed

    def list_transactions(self, uid: str, account_id: Optional[str] = None) -> List[Transaction]:
        docs = self._user_ref(uid).collection("transactions").stream()
        results: List[Transaction] = []
        for doc in docs:
            data = doc.to_dict() or {}
            if account_id and data.get("account_id") != account_id:
                continue
            results.append(
                Transaction(
                    id=doc.id,
                    account_id=data.get("account_id", ""),
                    tx_type=data.get("tx_type", "expense"),
                    amount=float(data.get("amount", 0.0)),
                    category=data.get("category", ""),
                    occurred_at=data.get("occurred_at") or datetime.min.replace(tzinfo=timezone.utc),
                    note=data.get("note", ""),
                )
            )
        results.sort(key=lambda row: row.occurred_at, reverse=True)
        return results

    def create_transaction(
        self,
        uid: str,
        *,
        account_id: str,
        tx_type: str,
        amount: float,
        category: str,
        occurred_at: datetime,
        note: str = "",
    ) -> str:
        if tx_type not in TRANSACTION_TYPES:
            raise FirestoreServiceError(f"Unsupported transaction type: {tx_type}")
        if amount <= 0:
            raise FirestoreServiceError("Amount must be greater than 0.")

        user_ref = self._user_ref(uid)
        account_ref = user_ref.collection("accounts").document(account_id)
        account = account_ref.get()
        if not account.exists:
            raise FirestoreServiceError("Account not found for transaction.")

        ref = user_ref.collection("transactions").document()
        delta = amount if tx_type == "income" else -amount

        # Transaction and balance change commit together
        batch = self.db.batch()
        batch.set(
            ref,
            {
                "account_id": account_id,
                "tx_type": tx_type,
                "amount": float(amount),
                "category": category,
                "occurred_at": occurred_at,
                "note": note,
                "created_at": datetime.now(timezone.utc),
            },
        )
        batch.update(account_ref, {"balance": firestore.Increment(delta)})
        batch.commit()
        return ref.id

    def delete_transaction(self, uid: str, transaction_id: str) -> None:
        user_ref = self._user_ref(uid)
        ref = user_ref.collection("transactions").document(transaction_id)
        snap = ref.get()
        if not snap.exists:
            return
        data = snap.to_dict() or {}
        amount = float(data.get("amount", 0.0))
        delta = -amount if data.get("tx_type") == "income" else amount

        batch = self.db.batch()
        account_id = data.get("account_id")
        if account_id:
            account_ref = user_ref.collection("accounts").document(account_id)
            if account_ref.get().exists:
                batch.update(account_ref, {"balance": firestore.Increment(delta)})
        batch.delete(ref)
        batch.commit()

    def list_holdings(self, uid: str) -> List[StockHolding]:
        docs = self._user_ref(uid).collection("stocks").stream()
        results: List[StockHolding] = []
        for doc in docs:
            data = doc.to_dict() or {}
            price = data.get("current_price")
            results.append(
                StockHolding(
                    id=doc.id,
                    symbol=data.get("symbol", ""),
                    shares=float(data.get("shares", 0.0)),
                    avg_cost=float(data.get("avg_cost", 0.0)),
                    current_price=float(price) if price is not None else None,
                )
            )
        results.sort(key=lambda row: row.symbol)
        return results

    def create_holding(self, uid: str, *, symbol: str, shares: float, avg_cost: float) -> str:
        symbol = symbol.strip().upper()
        if not symbol:
            raise FirestoreServiceError("Stock symbol is required.")
        if shares <= 0:
            raise FirestoreServiceError("Shares must be greater than 0.")
        ref = self._user_ref(uid).collection("stocks").document()
        ref.set(
            {
                "symbol": symbol,
                "shares": float(shares),
                "avg_cost": float(avg_cost),
                "current_price": None,
                "created_at": datetime.now(timezone.utc),
            }
        )
        return ref.id

    def delete_holding(self, uid: str, holding_id: str) -> None:
        self._user_ref(uid).collection("stocks").document(holding_id).delete()

    def apply_price_updates(self, uid: str, updates: List[StockPriceUpdate]) -> int:
        if not updates:
            return 0
        prices = {update.symbol.upper(): update.price for update in updates}
        stocks_ref = self._user_ref(uid).collection("stocks")
        batch = self.db.batch()
        changed = 0
        for holding in self.list_holdings(uid):
            price = prices.get(holding.symbol)
            if price is None:
                continue
            batch.update(
                stocks_ref.document(holding.id),
                {"current_price": float(price), "price_updated_at": datetime.now(timezone.utc)},
            )
            changed += 1
        if changed:
            batch.commit()
        return changed
