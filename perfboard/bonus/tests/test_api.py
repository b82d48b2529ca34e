from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from perfboard.audit.models import AuditLog
from perfboard.bonus.models import BonusAllocation
from perfboard.evaluations.tests.factories import EvaluationFactory
from perfboard.org.tests.factories import DepartmentFactory
from perfboard.users.roles import Role
from perfboard.users.tests.factories import UserFactory

pytestmark = pytest.mark.django_db

YEAR = 2024


@pytest.fixture
def org():
    root = DepartmentFactory(name="Engineering")
    backend = DepartmentFactory(name="Backend", parent=root)
    head = UserFactory(role=Role.HEAD_MANAGER, home_department=root)
    strong = UserFactory(home_department=backend, monthly_salary=Decimal("1000.00"))
    steady = UserFactory(home_department=backend, monthly_salary=Decimal("1000.00"))
    EvaluationFactory(
        evaluatee=strong, overall_rating=Decimal("10"), scoring_system="1-10"
    )
    EvaluationFactory(
        evaluatee=steady, overall_rating=Decimal("5"), scoring_system="1-10"
    )
    return {
        "root": root,
        "backend": backend,
        "head": head,
        "strong": strong,
        "steady": steady,
    }


@pytest.fixture
def head_client(api_client, org):
    api_client.force_authenticate(org["head"])
    return api_client


def _url(name, department):
    return reverse(
        f"api_v1:{name}", kwargs={"department_id": department.pk, "year": YEAR}
    )


def test_get_returns_empty_draft_with_scored_team(head_client, org):
    resp = head_client.get(_url("bonus-allocation", org["backend"]))

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["version"] == 0
    assert resp.data["allocations"] == {}
    assert resp.data["key"] == f"{org['backend'].pk}_{YEAR}"
    team = {row["user_id"]: row for row in resp.data["team"]}
    assert set(team) == {org["strong"].pk, org["steady"].pk}
    assert team[org["strong"].pk]["normalized_score"] == "10.00"
    assert team[org["steady"].pk]["monthly_salary"] == "1000.00"
    assert resp.data["totals"]["exceeded"] is False


def test_auto_allocate_computes_without_saving(head_client, org):
    resp = head_client.post(
        _url("bonus-auto-allocate", org["backend"]),
        {"total_budget": "1200"},
        format="json",
    )

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["skipped"] is None
    allocations = resp.data["allocations"]
    assert allocations[str(org["strong"].pk)]["bonus_percentage"] == "80.0"
    assert allocations[str(org["steady"].pk)]["bonus_percentage"] == "40.0"
    assert resp.data["totals"]["allocated_amount"] == "1200.00"
    assert not BonusAllocation.objects.exists()


def test_auto_allocate_without_budget_is_skipped(head_client, org):
    resp = head_client.post(
        _url("bonus-auto-allocate", org["backend"]), {}, format="json"
    )

    assert resp.status_code == status.HTTP_200_OK
    assert resp.data["skipped"] == "missing_budget"
    assert resp.data["message"] == "Please enter a total budget first."
    assert resp.data["allocations"] == {}


def test_save_and_reload(head_client, org):
    url = _url("bonus-allocation", org["backend"])
    payload = {
        "total_budget": "50.00",
        "kpi_target": "Ship v2",
        "allocations": {
            str(org["strong"].pk): {
                "monthly_salary": "1000.00",
                "bonus_percentage": "8.0",
            },
        },
        "version": 0,
    }

    saved = head_client.put(url, payload, format="json")
    reloaded = head_client.get(url)

    assert saved.status_code == status.HTTP_200_OK, saved.data
    assert saved.data["version"] == 1
    # Over budget drafts are flagged, never refused
    assert saved.data["totals"]["exceeded"] is True
    assert reloaded.data["kpi_target"] == "Ship v2"
    assert reloaded.data["allocations"][str(org["strong"].pk)] == {
        "monthly_salary": "1000.00",
        "bonus_percentage": "8.00",
    }
    assert BonusAllocation.objects.get().created_by == org["head"]
    assert AuditLog.objects.filter(action=AuditLog.Action.ALLOCATION_SAVE).exists()


def test_stale_version_conflicts(head_client, org):
    url = _url("bonus-allocation", org["backend"])
    head_client.put(url, {"total_budget": "100"}, format="json")

    resp = head_client.put(url, {"total_budget": "200", "version": 0}, format="json")

    assert resp.status_code == status.HTTP_409_CONFLICT
    assert resp.data["current_version"] == 1
    assert BonusAllocation.objects.get().total_budget == Decimal("100.00")


def test_save_without_version_overwrites(head_client, org):
    url = _url("bonus-allocation", org["backend"])
    head_client.put(url, {"total_budget": "100"}, format="json")

    resp = head_client.put(url, {"total_budget": "200"}, format="json")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.data["version"] == 2
    assert resp.data["total_budget"] == "200.00"


def test_adjust_steps_percentage(head_client, org):
    url = _url("bonus-adjust", org["backend"])
    member = str(org["steady"].pk)

    up = head_client.post(url, {"user_id": org["steady"].pk}, format="json")
    down = head_client.post(
        url,
        {
            "user_id": org["steady"].pk,
            "delta": "-2",
            "allocations": {member: {"bonus_percentage": "1.5"}},
        },
        format="json",
    )

    assert up.status_code == status.HTTP_200_OK, up.data
    assert up.data["allocations"][member]["bonus_percentage"] == "0.5"
    assert Decimal(down.data["allocations"][member]["bonus_percentage"]) == 0


def test_adjust_rejects_users_outside_the_team(head_client, org):
    outsider = UserFactory()

    resp = head_client.post(
        _url("bonus-adjust", org["backend"]), {"user_id": outsider.pk}, format="json"
    )

    assert resp.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_department_is_not_found(api_client):
    api_client.force_authenticate(UserFactory(role=Role.ADMIN))

    resp = api_client.get(
        reverse(
            "api_v1:bonus-allocation", kwargs={"department_id": 999999, "year": YEAR}
        )
    )

    assert resp.status_code == status.HTTP_404_NOT_FOUND


def test_salary_entry_overrides_record_and_keeps_percentage(head_client, org):
    member = str(org["steady"].pk)

    resp = head_client.post(
        _url("bonus-salary", org["backend"]),
        {
            "user_id": org["steady"].pk,
            "monthly_salary": "1500.00",
            "allocations": {member: {"bonus_percentage": "2.00"}},
        },
        format="json",
    )

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["allocations"][member] == {
        "monthly_salary": "1500.00",
        "bonus_percentage": "2.00",
    }
    row = next(r for r in resp.data["team"] if r["user_id"] == org["steady"].pk)
    assert row["monthly_salary"] == "1500.00"
    assert row["bonus_amount"] == "30.00"
    assert not BonusAllocation.objects.exists()
