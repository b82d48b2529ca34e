from rest_framework import status

from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_HEAD_MANAGER
from tests.permissions.mixins import ROLE_HR
from tests.permissions.mixins import RoleAPITestCase


class DepartmentPermissionTests(RoleAPITestCase):
    def test_create_department_requires_admin_or_hr(self):
        payload = {"name": "Operations"}
        denied = self.post(
            "api_v1:department-list",
            role=ROLE_EMPLOYEE,
            payload=payload,
        )
        self.assert_denied(denied)
        denied = self.post(
            "api_v1:department-list",
            role=ROLE_HEAD_MANAGER,
            payload=payload,
        )
        self.assert_denied(denied)
        allowed = self.post(
            "api_v1:department-list",
            role=ROLE_HR,
            payload=payload,
        )
        self.assert_http_status(allowed, status.HTTP_201_CREATED)

    def test_everyone_authenticated_can_read_the_tree(self):
        response = self.get("api_v1:department-tree", role=ROLE_EMPLOYEE)
        self.assert_http_status(response, status.HTTP_200_OK)

    def test_reparent_requires_admin_or_hr(self):
        platform = self.departments["platform"]
        payload = {"parent": self.departments["sales"].pk}
        denied = self.patch(
            "api_v1:department-detail",
            role=ROLE_EMPLOYEE,
            payload=payload,
            reverse_kwargs={"pk": platform.pk},
        )
        self.assert_denied(denied)
        allowed = self.patch(
            "api_v1:department-detail",
            role=ROLE_ADMIN,
            payload=payload,
            reverse_kwargs={"pk": platform.pk},
        )
        self.assert_http_status(allowed, status.HTTP_200_OK)
        platform.refresh_from_db()
        assert platform.parent_id == self.departments["sales"].pk

    def test_deactivate_refused_while_members_remain(self):
        engineering = self.departments["engineering"]
        response = self.delete(
            "api_v1:department-detail",
            role=ROLE_ADMIN,
            reverse_kwargs={"pk": engineering.pk},
        )
        self.assert_http_status(response, status.HTTP_409_CONFLICT)
        engineering.refresh_from_db()
        assert engineering.is_active
