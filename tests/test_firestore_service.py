import unittest
from datetime import datetime, timezone
from unittest import mock

from finai.core.models import StockPriceUpdate
from finai.services.firestore_service import FirestoreService, FirestoreServiceError


def snapshot(doc_id, data, exists=True):
    snap = mock.Mock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


class FirestoreServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = mock.MagicMock()
        self.fs = FirestoreService("proj1", db=self.db)
        self.user_ref = self.db.collection.return_value.document.return_value

    def collection(self, name):
        return self.user_ref.collection(name)

    def test_requires_project_id(self):
        with self.assertRaises(FirestoreServiceError):
            FirestoreService("", db=self.db)

    def test_with_id_token_requires_token(self):
        with self.assertRaises(FirestoreServiceError):
            self.fs.with_id_token("")

    def test_ensure_user_profile_creates_once(self):
        self.user_ref.get.return_value = snapshot("u1", None, exists=False)
        self.fs.ensure_user_profile("u1", "a@b.com", "Ann")
        payload = self.user_ref.set.call_args.args[0]
        self.assertEqual(payload["email"], "a@b.com")
        self.assertEqual(payload["display_name"], "Ann")

        self.user_ref.reset_mock()
        self.user_ref.get.return_value = snapshot("u1", {"email": "a@b.com"})
        self.fs.ensure_user_profile("u1", "a@b.com")
        self.user_ref.set.assert_not_called()

    def test_list_accounts_sorted_by_name(self):
        self.collection("accounts").stream.return_value = [
            snapshot("b", {"name": "Wallet", "account_type": "cash", "balance": 10}),
            snapshot("a", {"name": "Bank", "balance": "2500.5"}),
        ]
        accounts = self.fs.list_accounts("u1")
        self.assertEqual([a.name for a in accounts], ["Bank", "Wallet"])
        self.assertEqual(accounts[0].balance, 2500.5)
        self.assertEqual(accounts[0].account_type, "bank")

    def test_create_account_validates_type(self):
        with self.assertRaises(FirestoreServiceError):
            self.fs.create_account("u1", name="Bank", account_type="crypto", balance=0)

    def test_create_transaction_adjusts_balance(self):
        accounts = self.collection("accounts")
        accounts.document.return_value.get.return_value = snapshot("a1", {"balance": 100})
        self.collection("transactions").document.return_value.id = "t1"
        batch = self.db.batch.return_value

        tx_id = self.fs.create_transaction(
            "u1",
            account_id="a1",
            tx_type="expense",
            amount=40,
            category="Food",
            occurred_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
        )

        self.assertEqual(tx_id, "t1")
        self.assertEqual(batch.set.call_args.args[1]["amount"], 40.0)
        self.assertIn("balance", batch.update.call_args.args[1])
        batch.commit.assert_called_once()
        accounts.document.return_value.update.assert_not_called()

    def test_update_account_balance(self):
        self.fs.update_account_balance("u1", "a1", "250.5")
        self.collection("accounts").document.assert_called_with("a1")
        self.collection("accounts").document.return_value.update.assert_called_once_with({"balance": 250.5})

    def test_delete_account_removes_its_transactions(self):
        self.collection("transactions").stream.return_value = [
            snapshot("t1", {"account_id": "a1", "amount": 5}),
            snapshot("t2", {"account_id": "a2", "amount": 7}),
            snapshot("t3", {"account_id": "a1", "amount": 9}),
        ]
        batch = self.db.batch.return_value

        removed = self.fs.delete_account("u1", "a1")

        self.assertEqual(removed, 2)
        self.assertEqual(batch.delete.call_count, 3)
        batch.commit.assert_called_once()

    def test_delete_transaction_reverts_balance_in_one_batch(self):
        self.collection("transactions").document.return_value.get.return_value = snapshot(
            "t1", {"account_id": "a1", "tx_type": "expense", "amount": 40}
        )
        batch = self.db.batch.return_value

        self.fs.delete_transaction("u1", "t1")

        batch.update.assert_called_once()
        self.assertIn("balance", batch.update.call_args.args[1])
        batch.delete.assert_called_once()
        batch.commit.assert_called_once()

    def test_delete_missing_transaction_is_a_no_op(self):
        self.collection("transactions").document.return_value.get.return_value = snapshot("t1", None, exists=False)
        self.fs.delete_transaction("u1", "t1")
        self.db.batch.assert_not_called()

    def test_delete_holding(self):
        self.fs.delete_holding("u1", "h1")
        self.collection("stocks").document.assert_called_with("h1")
        self.collection("stocks").document.return_value.delete.assert_called_once()

    def test_create_transaction_rejects_unknown_account(self):
        self.collection("accounts").document.return_value.get.return_value = snapshot("a1", None, exists=False)
        with self.assertRaises(FirestoreServiceError):
            self.fs.create_transaction(
                "u1",
                account_id="a1",
                tx_type="income",
                amount=10,
                category="Salary",
                occurred_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
            )

    def test_create_transaction_rejects_non_positive_amount(self):
        with self.assertRaises(FirestoreServiceError):
            self.fs.create_transaction(
                "u1",
                account_id="a1",
                tx_type="income",
                amount=0,
                category="Salary",
                occurred_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
            )

    def test_create_holding_normalizes_symbol(self):
        self.fs.create_holding("u1", symbol=" aapl ", shares=3, avg_cost=150)
        payload = self.collection("stocks").document.return_value.set.call_args.args[0]
        self.assertEqual(payload["symbol"], "AAPL")
        self.assertIsNone(payload["current_price"])

    def test_apply_price_updates_only_touches_known_symbols(self):
        self.collection("stocks").stream.return_value = [
            snapshot("h1", {"symbol": "AAPL", "shares": 1, "avg_cost": 100}),
            snapshot("h2", {"symbol": "MSFT", "shares": 1, "avg_cost": 100}),
        ]
        batch = self.db.batch.return_value

        changed = self.fs.apply_price_updates("u1", [StockPriceUpdate("aapl", 190.0), StockPriceUpdate("TSLA", 1.0)])

        self.assertEqual(changed, 1)
        self.assertEqual(batch.update.call_count, 1)
        self.assertEqual(batch.update.call_args.args[1]["current_price"], 190.0)
        batch.commit.assert_called_once()

    def test_apply_no_updates(self):
        self.assertEqual(self.fs.apply_price_updates("u1", []), 0)
        self.db.batch.assert_not_called()


if __name__ == "__main__":
    unittest.main()
