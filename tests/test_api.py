"""Tests for Prakriti Mitra API."""

import pytest
from fastapi.testclient import TestClient

import prakriti.api.main as api_main
from prakriti.api.main import app
from prakriti.auth import ADMIN_EMAIL, ADMIN_PASSWORD
from prakriti.chat import APOLOGY_MESSAGE
from prakriti.handbook import ContentRepository


ADMIN_HEADERS = {"X-Admin-Email": ADMIN_EMAIL, "X-Admin-Password": ADMIN_PASSWORD}


class FakeBridge:
    """Records chat calls instead of reaching the network."""

    def __init__(self, reply: str = "సమాధానం") -> None:
        self.reply = reply
        self.calls = []

    async def send(self, message, history=()):
        self.calls.append((message, list(history)))
        return self.reply

    async def aclose(self) -> None:
        pass


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def client(bridge: FakeBridge):
    """Create a test client with a fresh handbook repository."""
    original_get_repository = api_main.get_repository
    original_get_chat_bridge = api_main.get_chat_bridge

    test_repository = ContentRepository()
    api_main.get_repository = lambda: test_repository
    api_main.get_chat_bridge = lambda: bridge

    with TestClient(app) as client:
        yield client

    api_main.get_repository = original_get_repository
    api_main.get_chat_bridge = original_get_chat_bridge


class TestRootEndpoint:
    """Tests for the root endpoint."""

    def test_root(self, client: TestClient) -> None:
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Prakriti Mitra API"
        assert data["version"] == "0.1.0"

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestReferenceEndpoints:
    """Tests for crops, inputs, FAQs and the daily tip."""

    def test_list_crops(self, client: TestClient) -> None:
        response = client.get("/crops")
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == ["rice", "groundnut", "cotton"]

    def test_get_crop(self, client: TestClient) -> None:
        response = client.get("/crops/rice")
        assert response.status_code == 200
        assert response.json()["localized_name"] == "వరి"

    def test_get_crop_not_found(self, client: TestClient) -> None:
        assert client.get("/crops/wheat").status_code == 404

    def test_list_inputs(self, client: TestClient) -> None:
        response = client.get("/inputs")
        assert response.status_code == 200
        assert len(response.json()) == 3

    def test_get_input(self, client: TestClient) -> None:
        response = client.get("/inputs/jeevamrutham")
        assert response.status_code == 200
        assert response.json()["name"] == "Jeevamrutham"

    def test_get_input_not_found(self, client: TestClient) -> None:
        assert client.get("/inputs/urea").status_code == 404

    def test_faqs_and_tip(self, client: TestClient) -> None:
        assert len(client.get("/faqs").json()) == 3
        assert client.get("/tip").json()["tip"]


class TestAuth:
    """Tests for admin login and header checks."""

    def test_login_success(self, client: TestClient) -> None:
        response = client.post(
            "/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )
        assert response.json() == {"is_admin": True}

    def test_login_failure(self, client: TestClient) -> None:
        response = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"})
        assert response.status_code == 200
        assert response.json() == {"is_admin": False}

    def test_write_requires_admin(self, client: TestClient) -> None:
        response = client.post("/handbook/categories", json={"name": "New"})
        assert response.status_code == 401
        assert len(client.get("/handbook").json()["categories"]) == 3

    def test_write_with_wrong_password(self, client: TestClient) -> None:
        response = client.delete(
            "/handbook/categories/1",
            headers={"X-Admin-Email": ADMIN_EMAIL, "X-Admin-Password": "nope"},
        )
        assert response.status_code == 401


class TestHandbookEndpoints:
    """Tests for handbook reads and admin writes."""

    def test_get_handbook(self, client: TestClient) -> None:
        response = client.get("/handbook")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()["categories"]] == [
            "పంటలు",
            "కషాయాలు",
            "సూత్రాలు",
        ]

    def test_get_category_and_item(self, client: TestClient) -> None:
        assert len(client.get("/handbook/categories/2").json()["items"]) == 3
        item = client.get("/handbook/categories/2/items/jeevamrutham").json()
        assert [s["id"] for s in item["sections"]] == ["ingredients", "preparation", "usage"]

    def test_get_missing(self, client: TestClient) -> None:
        assert client.get("/handbook/categories/9").status_code == 404
        assert client.get("/handbook/categories/1/items/jeevamrutham").status_code == 404

    def test_create_category(self, client: TestClient) -> None:
        response = client.post("/handbook/categories", json={"name": "నేల"}, headers=ADMIN_HEADERS)
        assert response.status_code == 200
        categories = response.json()["categories"]
        assert categories[-1]["name"] == "నేల"
        assert categories[-1]["items"] == []

    def test_create_category_blank_name(self, client: TestClient) -> None:
        response = client.post("/handbook/categories", json={"name": "  "}, headers=ADMIN_HEADERS)
        assert response.status_code == 400

    def test_rename_category(self, client: TestClient) -> None:
        response = client.put(
            "/handbook/categories/3", json={"name": "Principles"}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["categories"][2]["name"] == "Principles"

    def test_rename_missing_category(self, client: TestClient) -> None:
        response = client.put(
            "/handbook/categories/42", json={"name": "X"}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 404

    def test_delete_category(self, client: TestClient) -> None:
        response = client.delete("/handbook/categories/1", headers=ADMIN_HEADERS)
        assert [c["id"] for c in response.json()["categories"]] == ["2", "3"]
        assert client.delete("/handbook/categories/1", headers=ADMIN_HEADERS).status_code == 404

    def test_create_item(self, client: TestClient) -> None:
        response = client.post(
            "/handbook/categories/2/items", json={"name": "Test Input"}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        items = response.json()["categories"][1]["items"]
        assert len(items) == 4
        assert items[-1]["name"] == "Test Input"
        assert items[-1]["sections"] == []
        assert items[-1]["image"].startswith("https://")

    def test_update_item(self, client: TestClient) -> None:
        item = client.get("/handbook/categories/2/items/neemastram").json()
        item["name"] = "నీమాస్త్రం (వేప)"
        item["sections"].append({"id": "extra", "title": "T", "content": "C"})

        response = client.put(
            "/handbook/categories/2/items/neemastram", json=item, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        stored = client.get("/handbook/categories/2/items/neemastram").json()
        assert stored["name"] == "నీమాస్త్రం (వేప)"
        assert stored["sections"][-1] == {"id": "extra", "title": "T", "content": "C"}

    def test_update_item_path_id_wins(self, client: TestClient) -> None:
        item = client.get("/handbook/categories/2/items/neemastram").json()
        item["id"] = "something-else"
        response = client.put(
            "/handbook/categories/2/items/neemastram", json=item, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        ids = [i["id"] for i in response.json()["categories"][1]["items"]]
        assert ids == ["beejamrutham", "jeevamrutham", "neemastram"]

    def test_update_item_blank_name(self, client: TestClient) -> None:
        item = client.get("/handbook/categories/2/items/neemastram").json()
        item["name"] = ""
        response = client.put(
            "/handbook/categories/2/items/neemastram", json=item, headers=ADMIN_HEADERS
        )
        assert response.status_code == 400

    def test_update_item_duplicate_section_ids(self, client: TestClient) -> None:
        item = client.get("/handbook/categories/1/items/rice").json()
        item["sections"] = [{"id": "s"}, {"id": "s"}]
        response = client.put(
            "/handbook/categories/1/items/rice", json=item, headers=ADMIN_HEADERS
        )
        assert response.status_code == 400
        assert "Duplicate section id" in response.json()["detail"]
        stored = client.get("/handbook/categories/1/items/rice").json()
        assert [s["id"] for s in stored["sections"]] == ["about", "sowing", "pests"]

    def test_delete_item(self, client: TestClient) -> None:
        response = client.delete(
            "/handbook/categories/2/items/jeevamrutham", headers=ADMIN_HEADERS
        )
        ids = [i["id"] for i in response.json()["categories"][1]["items"]]
        assert ids == ["beejamrutham", "neemastram"]

    def test_reset(self, client: TestClient) -> None:
        client.delete("/handbook/categories/1", headers=ADMIN_HEADERS)
        client.post("/handbook/categories", json={"name": "Extra"}, headers=ADMIN_HEADERS)
        response = client.post("/handbook/reset", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert [c["id"] for c in response.json()["categories"]] == ["1", "2", "3"]


class TestChatEndpoint:
    """Tests for the chat endpoint."""

    def test_chat_reply(self, client: TestClient, bridge: FakeBridge) -> None:
        response = client.post(
            "/chat",
            json={
                "message": "జీవామృతం ఎలా?",
                "history": [
                    {"role": "user", "text": "నమస్తే"},
                    {"role": "model", "text": "నమస్కారం"},
                ],
            },
        )
        assert response.status_code == 200
        assert response.json() == {"reply": "సమాధానం"}
        message, history = bridge.calls[0]
        assert message == "జీవామృతం ఎలా?"
        assert [t.text for t in history] == ["నమస్తే", "నమస్కారం"]

    def test_chat_apology_is_200(self, client: TestClient, bridge: FakeBridge) -> None:
        bridge.reply = APOLOGY_MESSAGE
        response = client.post("/chat", json={"message": "hi"})
        assert response.status_code == 200
        assert response.json()["reply"] == APOLOGY_MESSAGE

    def test_chat_blank_message(self, client: TestClient, bridge: FakeBridge) -> None:
        response = client.post("/chat", json={"message": "   "})
        assert response.status_code == 400
        assert bridge.calls == []
