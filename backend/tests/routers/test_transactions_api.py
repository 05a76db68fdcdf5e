# tests/routers/test_transactions_api.py
"""
Integration tests for Transaction API endpoints.

These tests verify full HTTP request/response cycles for:
- POST /transactions/ (buy and sell by symbol)
- GET /transactions/ (newest first, symbol and list filters)
- GET /transactions/summary/{symbol}
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from portfolio_tracker.main import app
from portfolio_tracker.services.exceptions import ProviderUnavailableError
from tests.conftest import create_list, override_app_dependencies


@pytest.fixture(scope="function")
def client(db: Session, mock_provider) -> TestClient:
    """Create TestClient with database and market data overrides."""
    override_app_dependencies(app, db, mock_provider)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def _record(client: TestClient, user_id: int, **payload):
    return client.post("/transactions/", params={"user_id": user_id}, json=payload)


# =============================================================================
# TEST: POST /transactions/
# =============================================================================

class TestCreateTransaction:

    def test_buy_opens_position(self, client, sample_user):
        response = _record(
            client, sample_user.id,
            symbol="msft", transaction_type="buy", quantity="3", price="400",
            fees="1.50", date="2026-02-03T15:30:00", notes="first lot",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "MSFT"
        assert data["transaction_type"] == "buy"
        assert data["position_id"] is not None
        assert Decimal(data["fees"]) == Decimal("1.50")
        assert data["notes"] == "first lot"
        assert data["date"].startswith("2026-02-03T15:30:00")

    def test_sell_by_symbol(self, client, sample_user):
        _record(client, sample_user.id, symbol="MSFT", transaction_type="buy", quantity="3", price="400")

        response = _record(client, sample_user.id, symbol="MSFT", transaction_type="sell", quantity="1", price="420")

        assert response.status_code == 201
        [position] = client.get("/positions/", params={"user_id": sample_user.id}).json()
        assert Decimal(position["quantity"]) == Decimal("2")

    def test_sell_without_position_is_404(self, client, sample_user):
        response = _record(client, sample_user.id, symbol="MSFT", transaction_type="sell", quantity="1", price="420")

        assert response.status_code == 404
        assert response.json()["error"] == "PositionNotFoundError"

    def test_oversell_is_400(self, client, sample_user):
        _record(client, sample_user.id, symbol="MSFT", transaction_type="buy", quantity="1", price="400")

        response = _record(client, sample_user.id, symbol="MSFT", transaction_type="sell", quantity="2", price="420")

        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientSharesError"
        assert len(client.get("/transactions/", params={"user_id": sample_user.id}).json()) == 1

    @pytest.mark.parametrize("payload", [
        {"symbol": "MSFT", "transaction_type": "hold", "quantity": "1", "price": "1"},
        {"symbol": "MSFT", "transaction_type": "buy", "quantity": "0", "price": "1"},
        {"symbol": "MSFT", "transaction_type": "buy", "quantity": "1", "price": "0"},
        {"symbol": "$$$", "transaction_type": "buy", "quantity": "1", "price": "1"},
    ])
    def test_invalid_payload_is_422(self, client, sample_user, payload):
        assert _record(client, sample_user.id, **payload).status_code == 422

    def test_buy_into_list(self, client, db, sample_user):
        growth = create_list(db, sample_user, name="Growth", is_default=True)

        data = _record(
            client, sample_user.id,
            symbol="NVDA", transaction_type="buy", quantity="1", price="100", list_id=growth.id,
        ).json()

        assert data["list_id"] == growth.id


# =============================================================================
# TEST: GET /transactions/
# =============================================================================

class TestListTransactions:

    def test_newest_first_and_filtered(self, client, sample_user):
        _record(client, sample_user.id, symbol="AAPL", transaction_type="buy", quantity="1", price="100",
                date="2025-01-01T00:00:00Z")
        _record(client, sample_user.id, symbol="MSFT", transaction_type="buy", quantity="1", price="200",
                date="2025-02-01T00:00:00Z")
        _record(client, sample_user.id, symbol="AAPL", transaction_type="buy", quantity="1", price="110",
                date="2025-03-01T00:00:00Z")

        everything = client.get("/transactions/", params={"user_id": sample_user.id}).json()
        aapl = client.get("/transactions/", params={"user_id": sample_user.id, "symbol": "aapl"}).json()

        assert [t["symbol"] for t in everything] == ["AAPL", "MSFT", "AAPL"]
        assert [Decimal(t["price"]) for t in aapl] == [Decimal("110"), Decimal("100")]


# =============================================================================
# TEST: GET /transactions/summary/{symbol}
# =============================================================================

class TestTradeSummary:

    def test_realized_and_unrealized(self, client, mock_provider, sample_user):
        mock_provider.add_price("AAPL", "160")
        _record(client, sample_user.id, symbol="AAPL", transaction_type="buy", quantity="10", price="100")
        _record(client, sample_user.id, symbol="AAPL", transaction_type="buy", quantity="10", price="200")
        _record(client, sample_user.id, symbol="AAPL", transaction_type="sell", quantity="5", price="180")

        response = client.get("/transactions/summary/AAPL", params={"user_id": sample_user.id})

        assert response.status_code == 200
        data = response.json()
        assert data["transaction_count"] == 3
        assert Decimal(data["realized_gain_loss"]) == Decimal("150")
        assert Decimal(data["unrealized_gain_loss"]) == Decimal("150")
        assert Decimal(data["total_return_percent"]) == Decimal("10")

    def test_price_outage_blanks_unrealized(self, client, mock_provider, sample_user):
        mock_provider.add_error("AAPL", ProviderUnavailableError("mock"))
        _record(client, sample_user.id, symbol="AAPL", transaction_type="buy", quantity="1", price="100")

        data = client.get("/transactions/summary/AAPL", params={"user_id": sample_user.id}).json()

        assert data["unrealized_gain_loss"] is None
        assert data["total_return"] is None
