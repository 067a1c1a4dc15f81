from __future__ import annotations

from datetime import date

import pytest

from rhdocs.models.employee import Employee, EmployeeDraft, EmployeeStatus
from rhdocs.models.results import ErrorKind
from rhdocs.services.backend_client import BackendError
from rhdocs.services.employee_directory import EmployeeDirectory, _calculate_years_of_service
from rhdocs.services.notifications import NotificationCenter


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def directory(fake_backend, notifications):
    return EmployeeDirectory(fake_backend.scope(), notifications)


def _draft(**overrides) -> EmployeeDraft:
    data = {"name": "Daniela Rocha", "cpf": "555.666.777-88", "registration": "FIN010"}
    data.update(overrides)
    return EmployeeDraft(**data)


@pytest.mark.anyio
async def test_load_all_fetches_everything_in_order(directory, fake_backend):
    assert directory.loading is True

    await directory.load_all()

    assert directory.loading is False
    assert directory.loaded is True
    assert [e.name for e in directory.employees] == ["Ana Beatriz", "Bruno Lima", "Carla Mendes"]
    assert [p.title for p in directory.positions] == ["Analista Pleno", "Gerente"]
    assert [d.name for d in directory.departments] == ["Recursos Humanos", "Tecnologia"]
    assert fake_backend.count_calls("GET", "/rest/v1/employees") == 1


@pytest.mark.anyio
async def test_null_documents_become_empty_list(directory):
    await directory.load_all()
    bruno = directory.get("emp-b")
    assert bruno is not None
    assert bruno.documents == []


@pytest.mark.anyio
async def test_reference_failures_do_not_fail_load(directory, fake_backend, notifications):
    fake_backend.failures[("GET", "/rest/v1/positions")] = BackendError("permission denied", status=401)
    fake_backend.failures[("GET", "/rest/v1/departments")] = BackendError("permission denied", status=401)

    await directory.load_all()

    assert directory.loading is False
    assert len(directory.employees) == 3
    assert directory.positions == []
    assert directory.departments == []
    assert notifications.items == []


@pytest.mark.anyio
async def test_employee_fetch_failure_keeps_previous_list(directory, fake_backend, notifications):
    await directory.load_all()
    before = list(directory.employees)

    fake_backend.failures[("GET", "/rest/v1/employees")] = BackendError("timeout", status=504)
    await directory.refresh()

    assert directory.employees == before
    assert notifications.items[-1].title == "Erro ao carregar funcionários"
    assert notifications.items[-1].description == "timeout"


@pytest.mark.anyio
async def test_employee_fetch_failure_on_first_load_leaves_empty_list(directory, fake_backend):
    fake_backend.failures[("GET", "/rest/v1/employees")] = BackendError("timeout", status=504)

    await directory.load_all()

    assert directory.employees == []
    assert directory.loading is False


@pytest.mark.anyio
async def test_search_blank_term_returns_full_list_in_order(directory):
    await directory.load_all()

    for term in ("", " ", "\t  "):
        result = directory.search(term)
        assert result == directory.employees
        assert result is not directory.employees


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("term", "expected"),
    [
        ("carla", ["emp-c"]),
        ("BRUNO", ["emp-b"]),
        ("123.456", ["emp-c"]),
        ("ti00", ["emp-a", "emp-c"]),
        ("gerente", ["emp-b"]),
        ("tecnologia", ["emp-a", "emp-c"]),
        ("recursos", ["emp-b"]),
        ("a", ["emp-a", "emp-b", "emp-c"]),
        ("zzz", []),
    ],
)
async def test_search_matches_any_field(directory, term, expected):
    await directory.load_all()
    assert [e.id for e in directory.search(term)] == expected


@pytest.mark.anyio
@pytest.mark.parametrize("term", ["an", "TI", "9", "Pleno", "humanos", "li"])
async def test_search_partitions_list(directory, term):
    await directory.load_all()
    matches = directory.search(term)
    needle = term.lower()

    def hit(employee: Employee) -> bool:
        values = (
            employee.name,
            employee.cpf,
            employee.registration,
            directory.position_label(employee),
            directory.department_label(employee),
        )
        return any(needle in v.lower() for v in values)

    assert all(hit(e) for e in matches)
    assert not any(hit(e) for e in directory.employees if e not in matches)
    assert matches == [e for e in directory.employees if e in matches]


@pytest.mark.anyio
async def test_create_success_reloads_list(directory, fake_backend, notifications):
    await directory.load_all()

    result = await directory.create(_draft())

    assert result.error is None
    assert result.employee is not None
    assert result.employee.id.startswith("employees-new-")
    assert notifications.items[-1].title == "Funcionário cadastrado"
    assert notifications.items[-1].description == "Daniela Rocha foi cadastrado com sucesso"
    assert fake_backend.count_calls("GET", "/rest/v1/employees") == 2

    matches = [e for e in directory.employees if e.id == result.employee.id]
    assert len(matches) == 1
    assert matches[0].documents == []
    assert [e.name for e in directory.employees] == [
        "Ana Beatriz",
        "Bruno Lima",
        "Carla Mendes",
        "Daniela Rocha",
    ]


@pytest.mark.anyio
async def test_create_sends_only_set_fields(directory, fake_backend):
    await directory.create(_draft(hire_date=date(2024, 1, 15), position_id="pos-1"))

    stored = fake_backend.tables["employees"][-1]
    assert stored["hire_date"] == "2024-01-15"
    assert stored["position_id"] == "pos-1"
    assert stored["status"] == "active"
    assert stored["documents"] == []
    assert "email" not in stored


@pytest.mark.anyio
async def test_create_failure_returns_error_without_mutation(directory, fake_backend, notifications):
    await directory.load_all()
    before = list(directory.employees)
    fake_backend.failures[("POST", "/rest/v1/employees")] = BackendError(
        'duplicate key value violates unique constraint "employees_cpf_key"', status=409
    )

    result = await directory.create(_draft(cpf="123.456.789-01"))

    assert result.employee is None
    assert result.error is not None
    assert result.error.kind == ErrorKind.CREATE
    assert result.error.status == 409
    assert directory.employees == before
    assert fake_backend.count_calls("GET", "/rest/v1/employees") == 1
    assert notifications.items[-1].title == "Erro ao cadastrar funcionário"


@pytest.mark.anyio
async def test_labels_stats_and_profile(directory):
    await directory.load_all()
    carla = directory.get("emp-c")
    assert carla is not None

    assert directory.position_label(carla) == "Analista Pleno"
    assert directory.department_label(carla) == "Tecnologia"

    stats = directory.stats()
    assert stats.active == 2
    assert stats.inactive == 1
    assert stats.documents == 3

    summary = directory.summarize(carla)
    assert summary.position == "Analista Pleno"
    assert summary.document_count == 2

    profile = directory.profile(carla)
    assert profile.status == EmployeeStatus.ACTIVE
    assert profile.documents == ["rg.pdf", "contrato.pdf"]
    assert profile.years_of_service != "N/A"
    assert directory.get("missing") is None


@pytest.mark.anyio
async def test_unknown_reference_resolves_to_empty_label(directory, fake_backend):
    fake_backend.tables["employees"][0]["position_id"] = "pos-404"
    await directory.load_all()
    carla = directory.get("emp-c")
    assert carla is not None
    assert directory.position_label(carla) == ""


@pytest.mark.anyio
async def test_reset_drops_cache(directory):
    await directory.load_all()
    directory.reset()
    assert directory.employees == []
    assert directory.loaded is False
    assert directory.loading is True


def test_years_of_service():
    assert _calculate_years_of_service(None) == "N/A"
    assert _calculate_years_of_service(date(2015, 8, 17), today=date(2024, 8, 16)) == "8"
    assert _calculate_years_of_service(date(2015, 8, 17), today=date(2024, 8, 18)) == "9"
    assert _calculate_years_of_service(date(2030, 1, 1), today=date(2024, 1, 1)) == "0"
