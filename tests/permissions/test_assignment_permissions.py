from rest_framework import status

from perfboard.assignments.models import Assignment
from perfboard.assignments.registry import AssignmentKind
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_HEAD_MANAGER
from tests.permissions.mixins import ROLE_HR
from tests.permissions.mixins import ROLE_MANAGER
from tests.permissions.mixins import RoleAPITestCase


class AssignmentPermissionTests(RoleAPITestCase):
    def payload(self):
        return {
            "kind": AssignmentKind.EVALUATION,
            "source": self.roles[ROLE_MANAGER].pk,
            "target": self.others["sales"].pk,
        }

    def test_only_admin_or_hr_create_assignments(self):
        denied = self.post(
            "api_v1:assignment-list",
            role=ROLE_HEAD_MANAGER,
            payload=self.payload(),
        )
        self.assert_denied(denied)
        allowed = self.post(
            "api_v1:assignment-list",
            role=ROLE_HR,
            payload=self.payload(),
        )
        self.assert_http_status(allowed, status.HTTP_201_CREATED)
        assert allowed.data["created_by"] == self.roles[ROLE_HR].pk

    def test_participants_only_see_their_own_pairings(self):
        mine = Assignment.objects.create(
            kind=AssignmentKind.EVALUATION,
            source=self.roles[ROLE_MANAGER],
            target=self.others["sales"],
        )
        Assignment.objects.create(
            kind=AssignmentKind.EVALUATION,
            source=self.roles[ROLE_HEAD_MANAGER],
            target=self.others["platform"],
        )
        response = self.get("api_v1:assignment-list", role=ROLE_MANAGER)
        self.assert_http_status(response, status.HTTP_200_OK)
        assert self.ids(response) == {mine.pk}

        response = self.get("api_v1:assignment-list", role=ROLE_EMPLOYEE)
        assert self.ids(response) == set()

        response = self.get("api_v1:assignment-list", role=ROLE_HR)
        assert len(self.ids(response)) == 2
