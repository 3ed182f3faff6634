from typing import Any

import pytest

from prthread.config import PrthreadConfig
from prthread.storage import InMemorySnapshotStore


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def send_message(self, channel: str, text: str, thread_id: str | None = None) -> str:
        self.calls.append(("send_message", channel, text, thread_id))
        return f"{len(self.calls)}.0"

    def lookup_user_by_email(self, email: str) -> str | None:
        self.calls.append(("lookup_user_by_email", email))
        return "U999" if email == "dana@example.com" else None

    def list_thread_replies(self, channel: str, root_id: str) -> list[str]:
        self.calls.append(("list_thread_replies", channel, root_id))
        return ["r1"]

    def delete_message(self, channel: str, message_id: str) -> None:
        self.calls.append(("delete_message", channel, message_id))


def _payload(event_type: str, **resource: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "repository": {"project": {"name": "Alpha"}, "name": "api", "webUrl": "https://dev.azure.com/acme/_git/api"},
        "pullRequestId": 5,
        "status": "active",
        "title": "Tidy webhooks",
        "createdBy": {"displayName": "Dana", "uniqueName": "dana@example.com"},
        "isDraft": False,
        "reviewers": [],
        "url": "https://dev.azure.com/acme/_apis/git/pullRequests/5",
    }
    body.update(resource)
    return {"eventType": event_type, "resource": body, "publisherId": "tfs"}


@pytest.fixture()
def client_and_state():
    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    from prthread.webapp import create_app

    config = PrthreadConfig.model_validate({"projects": {"Alpha": {"channel_id": "C1"}}})
    sink = RecordingSink()
    store = InMemorySnapshotStore()
    app = create_app(config, sink, store=store)
    return TestClient(app), sink, store


def test_create_route_posts_root_message(client_and_state) -> None:
    client, sink, store = client_and_state

    resp = client.post("/azuredevops/create", json=_payload("git.pullrequest.created"))

    assert resp.status_code == 200
    assert resp.json() == {"status": "accepted", "outcome": "root_posted"}
    sends = [call for call in sink.calls if call[0] == "send_message"]
    assert len(sends) == 1
    assert sends[0][1] == "C1"
    assert "<@U999>" in sends[0][2]
    assert store.get(5).has_posted_root is True


def test_update_route_closes_thread_on_completed(client_and_state) -> None:
    client, sink, store = client_and_state
    client.post("/azuredevops/create", json=_payload("git.pullrequest.created"))

    resp = client.post("/azuredevops/updates", json=_payload("git.pullrequest.updated", status="completed"))

    assert resp.status_code == 200
    assert resp.json()["outcome"] == "thread_closed"
    assert ("delete_message", "C1", "r1") in sink.calls
    assert 5 not in store


def test_update_for_unknown_pr_is_accepted_without_calls(client_and_state) -> None:
    client, sink, _ = client_and_state

    resp = client.post("/azuredevops/updates", json=_payload("git.pullrequest.updated", pullRequestId=99))

    assert resp.status_code == 200
    assert resp.json()["outcome"] == "untracked"
    assert sink.calls == []


def test_unknown_project_is_accepted_and_dropped(client_and_state) -> None:
    client, sink, store = client_and_state
    payload = _payload(
        "git.pullrequest.created",
        repository={"project": {"name": "Gamma"}, "name": "x", "webUrl": "https://example"},
    )

    resp = client.post("/azuredevops/create", json=payload)

    assert resp.status_code == 200
    assert resp.json()["outcome"] == "unknown_project"
    assert sink.calls == []
    assert len(store) == 0


def test_event_type_mismatch_is_rejected(client_and_state) -> None:
    client, sink, store = client_and_state

    resp = client.post("/azuredevops/create", json=_payload("git.pullrequest.updated"))
    assert resp.status_code == 400
    assert "create" in resp.json()["detail"]

    resp = client.post("/azuredevops/updates", json=_payload("git.pullrequest.created"))
    assert resp.status_code == 400
    assert sink.calls == []
    assert len(store) == 0


def test_malformed_bodies_are_rejected(client_and_state) -> None:
    client, sink, _ = client_and_state

    assert client.post("/azuredevops/create", content=b"{not json").status_code == 400
    assert client.post("/azuredevops/create", json=["not", "an", "object"]).status_code == 400
    assert client.post("/azuredevops/create", json={"eventType": "git.pullrequest.created"}).status_code == 400
    bad_id = _payload("git.pullrequest.created", pullRequestId="forty-two")
    assert client.post("/azuredevops/create", json=bad_id).status_code == 400
    assert sink.calls == []


def test_wrong_method_returns_405(client_and_state) -> None:
    client, _, _ = client_and_state

    assert client.get("/azuredevops/create").status_code == 405
    assert client.put("/azuredevops/updates", json={}).status_code == 405


def test_health_reports_tracked_count(client_and_state) -> None:
    client, _, _ = client_and_state
    client.post("/azuredevops/create", json=_payload("git.pullrequest.created", isDraft=True))

    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "tracked": 1}
