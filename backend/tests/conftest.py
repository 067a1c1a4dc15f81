from __future__ import annotations

import itertools
import os
from typing import Any

os.environ.setdefault("BACKEND_URL", "https://rh-docs.backend.test")
os.environ.setdefault("BACKEND_ANON_KEY", "test-anon-key")

import anyio  # noqa: E402
import pytest  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402

from rhdocs.core.config import settings  # noqa: E402
from rhdocs.core.dependencies import get_backend, get_workspace  # noqa: E402
from rhdocs.main import app  # noqa: E402
from rhdocs.services.backend_client import BackendClient, BackendError  # noqa: E402
from rhdocs.services.workspaces import WorkspaceRegistry  # noqa: E402

PASSWORD = "s3nha-forte"
NOW = "2024-05-02T10:30:00+00:00"

HR_MANAGER = {
    "id": "user-hr",
    "email": "ana.rh@empresa.com.br",
    "user_metadata": {"role": "hr_manager", "name": "Ana Souza"},
}
STAFF = {
    "id": "user-staff",
    "email": "joao@empresa.com.br",
    "user_metadata": {"role": "employee"},
}

SAMPLE_POSITIONS = [
    {"id": "pos-2", "title": "Gerente", "description": None, "created_at": NOW},
    {"id": "pos-1", "title": "Analista Pleno", "description": "Nível pleno", "created_at": NOW},
]
SAMPLE_DEPARTMENTS = [
    {"id": "dep-1", "name": "Tecnologia", "description": None, "created_at": NOW},
    {"id": "dep-2", "name": "Recursos Humanos", "description": None, "created_at": NOW},
]
SAMPLE_EMPLOYEES = [
    {
        "id": "emp-c",
        "name": "Carla Mendes",
        "cpf": "123.456.789-01",
        "registration": "TI001",
        "position_id": "pos-1",
        "department_id": "dep-1",
        "hire_date": "2019-03-01",
        "status": "active",
        "documents": ["rg.pdf", "contrato.pdf"],
        "email": "carla@empresa.com.br",
        "phone": "(11) 98765-4321",
        "created_at": NOW,
        "updated_at": NOW,
    },
    {
        "id": "emp-b",
        "name": "Bruno Lima",
        "cpf": "987.654.321-00",
        "registration": "RH002",
        "position_id": "pos-2",
        "department_id": "dep-2",
        "hire_date": "2015-08-17",
        "status": "inactive",
        "documents": None,
        "created_at": NOW,
        "updated_at": NOW,
    },
    {
        "id": "emp-a",
        "name": "Ana Beatriz",
        "cpf": "111.222.333-44",
        "registration": "TI003",
        "position_id": "pos-1",
        "department_id": "dep-1",
        "hire_date": None,
        "status": "active",
        "documents": ["cnh.png"],
        "created_at": NOW,
        "updated_at": NOW,
    },
]


class FakeBackend(BackendClient):
    """In-memory stand-in for the hosted backend's auth and row endpoints."""

    def __init__(self) -> None:
        super().__init__()
        self.initialized = True
        self.tables: dict[str, list[dict[str, Any]]] = {
            "employees": [dict(row) for row in SAMPLE_EMPLOYEES],
            "positions": [dict(row) for row in SAMPLE_POSITIONS],
            "departments": [dict(row) for row in SAMPLE_DEPARTMENTS],
        }
        self.users: dict[str, dict[str, Any]] = {
            HR_MANAGER["email"]: HR_MANAGER,
            STAFF["email"]: STAFF,
        }
        self.failures: dict[tuple[str, str], BackendError] = {}
        self.calls: list[tuple[str, str]] = []
        self.tokens: list[str | None] = []
        self._ids = itertools.count(1)
        self._refresh_owner: dict[str, dict[str, Any]] = {}

    def count_calls(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: Any = None,
        access_token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        self.calls.append((method, path))
        self.tokens.append(access_token)
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure

        if path == "/auth/v1/health":
            return {"name": "auth", "version": "test"}
        if path == "/auth/v1/token":
            return self._token(params or {}, payload or {})
        if path == "/auth/v1/logout":
            return None
        if path.startswith("/rest/v1/"):
            table = path.removeprefix("/rest/v1/")
            if method == "GET":
                return self._select(table, params or {})
            if method == "POST":
                return self._insert(table, payload)
        raise AssertionError(f"Unexpected backend request: {method} {path}")

    def _token(self, params: dict[str, str], payload: dict[str, Any]) -> dict[str, Any]:
        if params.get("grant_type") == "refresh_token":
            user = self._refresh_owner.pop(payload.get("refresh_token", ""), None)
            if user is None:
                raise BackendError("Invalid Refresh Token", status=400)
        else:
            user = self.users.get(payload.get("email", ""))
            if user is None or payload.get("password") != PASSWORD:
                raise BackendError("Invalid login credentials", status=400)

        serial = next(self._ids)
        refresh_token = f"refresh-{serial}"
        self._refresh_owner[refresh_token] = user
        return {
            "access_token": f"access-{user['id']}-{serial}",
            "token_type": "bearer",
            "expires_in": 3600,
            "refresh_token": refresh_token,
            "user": user,
        }

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        rows = [dict(row) for row in self.tables[table]]
        order = params.get("order")
        if order:
            column = order.split(".")[0]
            rows.sort(key=lambda row: row.get(column) or "")
        return rows

    def _insert(self, table: str, payload: list[dict[str, Any]]) -> list[dict[str, Any]]:
        inserted = []
        for row in payload:
            record = {"id": f"{table}-new-{next(self._ids)}", "created_at": NOW, "updated_at": NOW, **row}
            self.tables[table].append(record)
            inserted.append(dict(record))
        return inserted


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def registry(fake_backend):
    return WorkspaceRegistry(fake_backend, settings)


@pytest.fixture
def workspace(registry):
    workspace = anyio.run(registry.acquire, None)
    yield workspace
    registry.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(workspace, fake_backend):
    app.dependency_overrides[get_workspace] = lambda: workspace
    app.dependency_overrides[get_backend] = lambda: fake_backend
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def login(api_client: TestClient, email: str = HR_MANAGER["email"], password: str = PASSWORD):
    return api_client.post("/api/v1/auth/login", json={"email": email, "password": password})
