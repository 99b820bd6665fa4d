import json
import unittest
from unittest import mock

from finai.core.models import StockHolding, StockPriceUpdate
from finai.services.gemini_service import ADVICE_SERVICE_DOWN, ADVICE_UNAVAILABLE, GeminiService


def holdings(*symbols):
    return [StockHolding(id=str(i), symbol=s, shares=1, avg_cost=10) for i, s in enumerate(symbols)]


def service_returning(text=None, error=None):
    client = mock.Mock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = mock.Mock(text=text)
    factory = mock.Mock(return_value=client)
    return GeminiService("key", model="test-model", client_factory=factory), client, factory


class FetchStockPricesTests(unittest.TestCase):
    def test_parses_prices(self):
        payload = json.dumps([{"symbol": "aapl", "price": 190.5}, {"symbol": "2330.TW", "price": 1000}])
        service, client, _ = service_returning(payload)

        prices = service.fetch_stock_prices(holdings("AAPL", "2330.TW"))

        self.assertEqual(prices, [StockPriceUpdate("AAPL", 190.5), StockPriceUpdate("2330.TW", 1000.0)])
        kwargs = client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertIn("2330.TW, AAPL", kwargs["contents"])
        self.assertEqual(kwargs["config"].response_mime_type, "application/json")

    def test_skips_malformed_rows(self):
        payload = json.dumps([{"symbol": "AAPL"}, "junk", {"symbol": "", "price": 1}, {"symbol": "MSFT", "price": 400}])
        service, _, _ = service_returning(payload)
        self.assertEqual(service.fetch_stock_prices(holdings("AAPL", "MSFT")), [StockPriceUpdate("MSFT", 400.0)])

    def test_no_holdings_makes_no_call(self):
        service, _, factory = service_returning("[]")
        self.assertEqual(service.fetch_stock_prices([]), [])
        factory.assert_not_called()

    def test_failures_return_empty_list(self):
        for text, error in (("not json", None), ('{"symbol": "A"}', None), ("", None), (None, RuntimeError("quota"))):
            with self.subTest(text=text, error=error):
                service, _, _ = service_returning(text, error)
                self.assertEqual(service.fetch_stock_prices(holdings("AAPL")), [])

    def test_missing_key_returns_empty_list(self):
        factory = mock.Mock()
        service = GeminiService("", client_factory=factory)
        self.assertFalse(service.enabled)
        self.assertEqual(service.fetch_stock_prices(holdings("AAPL")), [])
        factory.assert_not_called()


class FinancialAdviceTests(unittest.TestCase):
    def test_returns_model_text(self):
        service, client, _ = service_returning("  Save more.  ")
        self.assertEqual(service.get_financial_advice("balance 100"), "Save more.")
        self.assertIn("balance 100", client.models.generate_content.call_args.kwargs["contents"])

    def test_empty_text_falls_back(self):
        service, _, _ = service_returning("")
        self.assertEqual(service.get_financial_advice("x"), ADVICE_UNAVAILABLE)

    def test_error_falls_back(self):
        service, _, _ = service_returning(error=RuntimeError("boom"))
        self.assertEqual(service.get_financial_advice("x"), ADVICE_SERVICE_DOWN)


if __name__ == "__main__":
    unittest.main()
