from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from perfboard.org.models import Department
from perfboard.users.roles import Role
from tests.permissions.factories import create_user_with_role

ROLE_ADMIN = Role.ADMIN
ROLE_HR = Role.HR
ROLE_HEAD_MANAGER = Role.HEAD_MANAGER
ROLE_MANAGER = Role.MANAGER
ROLE_SUPERVISOR = Role.SUPERVISOR
ROLE_EMPLOYEE = Role.EMPLOYEE


class RoleAPITestCase(APITestCase):
    """Base test case to streamline role fixtures and helpers.

    Org chart::

        HQ
        ├── Engineering   (head manager, manager, supervisor, employee)
        │   └── Platform  (employee)
        └── Sales         (sibling head manager, employee)
    """

    def setUp(self):
        super().setUp()
        hq = self._create_department("HQ")
        engineering = self._create_department("Engineering", parent=hq)
        self.departments = {
            "hq": hq,
            "engineering": engineering,
            "platform": self._create_department("Platform", parent=engineering),
            "sales": self._create_department("Sales", parent=hq),
        }
        eng = self.departments["engineering"]
        salary = Decimal("1000.00")
        self.roles = {
            ROLE_ADMIN: create_user_with_role("admin", role=ROLE_ADMIN),
            ROLE_HR: create_user_with_role("hr", role=ROLE_HR),
            ROLE_HEAD_MANAGER: create_user_with_role(
                "head", role=ROLE_HEAD_MANAGER, department=eng
            ),
            ROLE_MANAGER: create_user_with_role(
                "manager", role=ROLE_MANAGER, department=eng, monthly_salary=salary
            ),
            ROLE_SUPERVISOR: create_user_with_role(
                "supervisor",
                role=ROLE_SUPERVISOR,
                department=eng,
                monthly_salary=salary,
            ),
            ROLE_EMPLOYEE: create_user_with_role(
                "employee", role=ROLE_EMPLOYEE, department=eng, monthly_salary=salary
            ),
        }
        self.others = {
            "platform": create_user_with_role(
                "platform", department=self.departments["platform"]
            ),
            "sales_head": create_user_with_role(
                "saleshead",
                role=ROLE_HEAD_MANAGER,
                department=self.departments["sales"],
            ),
            "sales": create_user_with_role(
                "sales", department=self.departments["sales"]
            ),
        }

    # Utilities -------------------------------------------------------------
    def _create_department(self, name: str, parent=None):
        return Department.objects.create(name=name, parent=parent)

    def authenticate(self, role: str):
        self.client.force_authenticate(user=self.roles[role])

    def assert_http_status(self, response, expected_status: int):
        msg = getattr(response, "data", response)
        assert response.status_code == expected_status, msg

    def get(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.get(url, **kwargs)

    def post(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.post(url, data=payload or {}, format="json", **kwargs)

    def put(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.put(url, data=payload or {}, format="json", **kwargs)

    def patch(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.patch(url, data=payload or {}, format="json", **kwargs)

    def delete(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.delete(url, **kwargs)

    def assert_allowed(self, response):
        assert response.status_code in (
            status.HTTP_200_OK,
            status.HTTP_201_CREATED,
            status.HTTP_204_NO_CONTENT,
        ), response.data

    def assert_denied(self, response, code=status.HTTP_403_FORBIDDEN):
        assert response.status_code == code, response.data

    def ids(self, response):
        return {row["id"] for row in response.data}
