# tests/routers/test_lists_api.py
"""
Integration tests for List API endpoints.

- POST /lists/ (first list is default, 409 on duplicate name)
- GET /lists/, GET /lists/{id}
- PATCH /lists/{id}, POST /lists/{id}/default
- DELETE /lists/{id} (400 for the default list, members move)
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from portfolio_tracker.main import app
from tests.conftest import create_position, create_user, override_app_dependencies


@pytest.fixture(scope="function")
def client(db: Session, mock_provider) -> TestClient:
    """Create TestClient with database and market data overrides."""
    override_app_dependencies(app, db, mock_provider)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def _create(client: TestClient, user_id: int, name: str, **extra):
    return client.post("/lists/", params={"user_id": user_id}, json={"name": name, **extra})


class TestCreateList:

    def test_first_list_is_default(self, client, sample_user):
        first = _create(client, sample_user.id, "Main")
        second = _create(client, sample_user.id, "Growth", description="Small caps")

        assert first.status_code == 201
        assert first.json()["is_default"] is True
        assert second.json()["is_default"] is False
        assert second.json()["description"] == "Small caps"

    def test_duplicate_name_is_409(self, client, sample_user):
        _create(client, sample_user.id, "Main")

        response = _create(client, sample_user.id, "Main")

        assert response.status_code == 409
        assert response.json() == {
            "error": "DuplicateListNameError",
            "message": "A list named 'Main' already exists",
            "details": {"name": "Main"},
        }

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51])
    def test_invalid_name_is_422(self, client, sample_user, name):
        assert _create(client, sample_user.id, name).status_code == 422


class TestReadAndUpdate:

    def test_list_default_first(self, client, sample_user):
        _create(client, sample_user.id, "Main")
        growth = _create(client, sample_user.id, "Growth").json()

        client.post(f"/lists/{growth['id']}/default", params={"user_id": sample_user.id})

        names = [l["name"] for l in client.get("/lists/", params={"user_id": sample_user.id}).json()]
        assert names == ["Growth", "Main"]

    def test_rename(self, client, sample_user):
        created = _create(client, sample_user.id, "Main").json()

        response = client.patch(f"/lists/{created['id']}", params={"user_id": sample_user.id},
                                json={"name": "Core"})

        assert response.status_code == 200
        assert response.json()["name"] == "Core"

    def test_other_users_list_is_404(self, client, db, sample_user):
        other = create_user(db, email="other@example.com")
        theirs = _create(client, other.id, "Theirs").json()

        assert client.get(f"/lists/{theirs['id']}", params={"user_id": sample_user.id}).status_code == 404


class TestDeleteList:

    def test_default_list_is_400(self, client, sample_user):
        main = _create(client, sample_user.id, "Main").json()

        response = client.delete(f"/lists/{main['id']}", params={"user_id": sample_user.id})

        assert response.status_code == 400
        assert response.json()["error"] == "DefaultListDeletionError"

    def test_positions_move_to_default(self, client, db, sample_user):
        main = _create(client, sample_user.id, "Main").json()
        growth = _create(client, sample_user.id, "Growth").json()
        create_position(db, sample_user, symbol="TSLA", quantity="0", purchase_price=None, list_id=growth["id"])

        response = client.delete(f"/lists/{growth['id']}", params={"user_id": sample_user.id})

        assert response.status_code == 204
        db.expire_all()
        [position] = client.get("/positions/", params={"user_id": sample_user.id, "list_id": main["id"]}).json()
        assert position["symbol"] == "TSLA"
