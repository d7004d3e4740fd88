"""Tests for the HTTP routes."""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from booking_agent.agent import create_graph, get_graph
from booking_agent.api import get_blob_store, get_store
from booking_agent.auth import CallerIdentity, get_caller
from booking_agent.blob_store import LocalBlobStore
from booking_agent.config import get_settings
from booking_agent.main import create_app
from booking_agent.schemas import MessageEnvelope
from tests.helpers import FakeChatModel


@pytest.fixture
def model():
    return FakeChatModel(responses=[AIMessage(content="Where would you like to go?")])


@pytest.fixture
def caller():
    return {"identity": CallerIdentity(user_id="user-123")}


@pytest.fixture
def client(settings, store, model, caller):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_graph] = lambda: create_graph(settings, model=model)
    app.dependency_overrides[get_caller] = lambda: caller["identity"]
    app.dependency_overrides[get_blob_store] = lambda: LocalBlobStore(settings)
    return TestClient(app)


class TestHealth:
    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestChat:
    def test_streams_reply_and_saves_transcript(self, client, store):
        response = client.post("/api/chat", json={"id": "chat-1", "messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Where would you like to go?"
        assert response.headers["x-conversation-id"] == "chat-1"
        assert len(store.get_conversation("chat-1").messages) == 2

    def test_new_conversation_gets_an_id(self, client, store):
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hi"}]})

        conversation_id = response.headers["x-conversation-id"]
        assert uuid.UUID(conversation_id)
        assert store.get_conversation(conversation_id) is not None

    def test_unauthenticated(self, client, caller, store):
        caller["identity"] = None
        response = client.post("/api/chat", json={"id": "chat-1", "messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 401
        assert store.get_conversation("chat-1") is None

    def test_cannot_write_into_another_users_conversation(self, client, store, model):
        store.save_conversation("victim-chat", "victim", [MessageEnvelope(role="user", content="My passport is X123")])

        response = client.post(
            "/api/chat", json={"id": "victim-chat", "messages": [{"role": "user", "content": "Hi"}]}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}
        conversation = store.get_conversation("victim-chat")
        assert conversation.userId == "victim"
        assert [m.content for m in conversation.messages] == ["My passport is X123"]
        assert model.calls == []

    def test_owner_continues_own_conversation(self, client, store):
        store.save_conversation("chat-1", "user-123", [MessageEnvelope(role="user", content="Hi")])

        response = client.post(
            "/api/chat",
            json={"id": "chat-1", "messages": [{"role": "user", "content": "Hi"}, {"role": "user", "content": "Again"}]},
        )

        assert response.status_code == 200
        assert store.get_conversation("chat-1").userId == "user-123"

    def test_uploaded_file_reaches_model_as_absolute_url(self, client, model):
        upload = client.post("/api/files/upload", files={"file": ("boarding.png", b"\x89PNG\r\n\x1a\n", "image/png")}).json()
        attachment = {"fileId": upload["fileId"], "contentType": upload["contentType"], "name": "boarding.png"}

        response = client.post(
            "/api/chat",
            json={"id": "chat-1", "messages": [{"role": "user", "content": "Read this", "attachments": [attachment]}]},
        )

        assert response.status_code == 200
        blocks = model.calls[0][-1].content
        assert {"type": "image_url", "image_url": {"url": f"https://app.example{upload['url']}"}} in blocks
        assert not any(block.get("type") == "media" for block in blocks if isinstance(block, dict))

    def test_invalid_body_is_400(self, client):
        response = client.post("/api/chat", json={"id": "chat-1"})
        assert response.status_code == 400

    def test_unusable_attachment_is_400(self, client):
        response = client.post(
            "/api/chat",
            json={"id": "chat-1", "messages": [{"role": "user", "content": "Look", "attachments": [{"name": "a.png"}]}]},
        )
        assert response.status_code == 400

    def test_quota_error_maps_to_429(self, client, model, store):
        model.error = RuntimeError("429 RESOURCE_EXHAUSTED: quota exceeded")
        response = client.post("/api/chat", json={"id": "chat-1", "messages": [{"role": "user", "content": "Hi"}]})

        assert response.status_code == 429
        assert response.json() == {"error": "The assistant is busy right now. Please try again later."}
        assert store.get_conversation("chat-1") is None

    def test_permission_error_maps_to_403(self, client, model):
        model.error = RuntimeError("403 PERMISSION_DENIED")
        response = client.post("/api/chat", json={"id": "chat-1", "messages": [{"role": "user", "content": "Hi"}]})
        assert response.status_code == 403


class TestTranscriptRoutes:
    def _seed(self, store, user_id="user-123"):
        store.save_conversation("chat-1", user_id, [MessageEnvelope(role="user", content="Hi")])

    def test_get_own_transcript(self, client, store):
        self._seed(store)
        response = client.get("/api/chat", params={"id": "chat-1"})

        assert response.status_code == 200
        assert response.json()["messages"][0]["content"] == "Hi"

    def test_get_foreign_transcript_is_404(self, client, store):
        self._seed(store, user_id="someone-else")
        assert client.get("/api/chat", params={"id": "chat-1"}).status_code == 404

    def test_delete(self, client, store):
        self._seed(store)
        response = client.delete("/api/chat", params={"id": "chat-1"})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert store.get_conversation("chat-1") is None

    def test_delete_without_id(self, client):
        assert client.delete("/api/chat").status_code == 400

    def test_delete_unknown(self, client):
        assert client.delete("/api/chat", params={"id": "missing"}).status_code == 404

    def test_delete_foreign_leaves_it_in_place(self, client, store):
        self._seed(store, user_id="someone-else")
        assert client.delete("/api/chat", params={"id": "chat-1"}).status_code == 404
        assert store.get_conversation("chat-1") is not None

    def test_delete_unauthenticated(self, client, caller, store):
        self._seed(store)
        caller["identity"] = None
        assert client.delete("/api/chat", params={"id": "chat-1"}).status_code == 401


class TestUpload:
    def test_upload_png(self, client, settings):
        response = client.post("/api/files/upload", files={"file": ("boarding.png", b"\x89PNG\r\n\x1a\n", "image/png")})

        assert response.status_code == 200
        body = response.json()
        assert body["url"].startswith("/uploads/") and body["url"].endswith(".png")
        assert body["pathname"] == body["url"]
        assert body["fileId"] == body["url"]
        assert body["contentType"] == "image/png"
        assert body["size"] == 8

    def test_uploaded_file_is_served(self, client):
        body = client.post("/api/files/upload", files={"file": ("a.pdf", b"%PDF-1.4", "application/pdf")}).json()
        served = client.get(body["url"])
        assert served.status_code == 200
        assert served.content == b"%PDF-1.4"

    def test_html_filename_is_stored_under_content_type_extension(self, client):
        body = client.post(
            "/api/files/upload", files={"file": ("x.html", b"<script>alert(1)</script>", "image/png")}
        ).json()

        assert body["url"].endswith(".png")
        served = client.get(body["url"])
        assert not served.headers["content-type"].startswith("text/html")

    def test_rejects_unsupported_type(self, client):
        response = client.post("/api/files/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400

    def test_rejects_oversize(self, client, settings):
        data = b"0" * (settings.max_upload_bytes + 1)
        response = client.post("/api/files/upload", files={"file": ("big.png", data, "image/png")})
        assert response.status_code == 400

    def test_requires_session(self, client, caller):
        caller["identity"] = None
        response = client.post("/api/files/upload", files={"file": ("a.png", b"x", "image/png")})
        assert response.status_code == 401
