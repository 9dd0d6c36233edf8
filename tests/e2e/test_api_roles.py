import pytest
from fastapi.testclient import TestClient

from api.dependencies import ApiServices
from api_server import create_app
from config.settings import settings
from interview_flow import InterviewOrchestrator, RoleBlock
from storage import InMemorySessionStore, RoleStore

ROLE_BLOCK = {
    "role_name": "Data Engineer",
    "skills": ["spark", "sql"],
    "categories": ["technical", "other"],
    "custom_category": "Data modelling",
    "total_questions": 4,
}


class FakeRoleAgent:
    def __init__(self) -> None:
        self.calls = []

    def generate(self, **kwargs) -> RoleBlock:
        self.calls.append(kwargs)
        return RoleBlock(
            role_name=kwargs["role_text"].title(),
            skills=["python", "sql"],
            categories=kwargs["categories"],
            custom_category=kwargs.get("custom_category"),
            total_questions=kwargs["total_questions"],
        )


@pytest.fixture
def role_agent():
    return FakeRoleAgent()


@pytest.fixture
def client(tmp_db, collaborators, clock, role_agent):
    services = ApiServices(
        orchestrator=InterviewOrchestrator(InMemorySessionStore(), settings=settings, now=clock, **collaborators),
        roles=RoleStore(tmp_db),
        role_agent=role_agent,
    )
    return TestClient(create_app(services))


def _create(client, title="Data platform", user_id="alice", visibility="public"):
    resp = client.post(
        "/api/roles",
        json={"title": title, "role_block": ROLE_BLOCK, "user_id": user_id, "visibility": visibility},
    )
    assert resp.status_code == 201
    return resp.json()


def test_create_and_list_roles(client):
    created = _create(client)
    assert created["role_block"]["categories"] == ["technical", "custom"]
    assert created["usage_count"] == 0
    _create(client, title="Secret", visibility="private")

    recent = client.get("/api/roles", params={"view": "recent"}).json()
    assert [item["title"] for item in recent] == ["Data platform"]
    mine = client.get("/api/roles", params={"view": "my", "user_id": "alice"}).json()
    assert {item["title"] for item in mine} == {"Data platform", "Secret"}
    assert client.get("/api/roles", params={"view": "bogus"}).status_code == 422


def test_start_from_saved_role_counts_usage(client):
    role = _create(client)
    start = client.post("/api/interviews/start", json={"role_id": role["role_id"], "user_id": "bob"})
    assert start.status_code == 201
    assert start.json()["type_targets"] == {"technical": 2, "custom": 2}
    assert client.get(f"/api/roles/{role['role_id']}").json()["usage_count"] == 1

    popular = client.get("/api/roles", params={"view": "popular"}).json()
    assert popular[0]["role_id"] == role["role_id"]

    missing = client.post("/api/interviews/start", json={"role_id": "missing"})
    assert missing.status_code == 404


def test_use_endpoint_increments(client):
    role = _create(client)
    assert client.post(f"/api/roles/{role['role_id']}/use").json()["usage_count"] == 1


def test_visibility_and_delete_require_owner(client):
    role = _create(client)
    forbidden = client.patch(f"/api/roles/{role['role_id']}", json={"visibility": "private", "user_id": "bob"})
    assert forbidden.status_code == 403
    assert forbidden.json()["error"] == "forbidden"

    updated = client.patch(f"/api/roles/{role['role_id']}", json={"visibility": "private", "user_id": "alice"})
    assert updated.json()["visibility"] == "private"

    assert client.delete(f"/api/roles/{role['role_id']}", params={"user_id": "bob"}).status_code == 403
    assert client.delete(f"/api/roles/{role['role_id']}", params={"user_id": "alice"}).status_code == 204
    assert client.get(f"/api/roles/{role['role_id']}").status_code == 404


def test_generate_role(client, role_agent):
    resp = client.post(
        "/api/roles/generate",
        json={"role": "ml engineer", "experience_level": "senior", "interview_types": ["technical", "hr"]},
    )
    assert resp.status_code == 200
    block = resp.json()["role_block"]
    assert block["role_name"] == "Ml Engineer"
    assert block["total_questions"] == 10
    assert role_agent.calls[0]["categories"] == ["technical", "hr"]


def test_generate_role_unconfigured(tmp_db, collaborators, clock):
    services = ApiServices(
        orchestrator=InterviewOrchestrator(InMemorySessionStore(), now=clock, **collaborators),
        roles=RoleStore(tmp_db),
    )
    client = TestClient(create_app(services))
    resp = client.post("/api/roles/generate", json={"role": "dev", "experience_level": "junior"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "external_service_failure"
