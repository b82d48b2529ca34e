from django.db.models import Q
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from perfboard.assignments.models import Assignment
from perfboard.assignments.registry import DanglingAssignmentError
from perfboard.assignments.services import check_targets
from perfboard.audit.models import AuditLog
from perfboard.audit.utils import log_action
from perfboard.audit.utils import snapshot
from perfboard.users.api.permissions import IsAdminOrHR
from perfboard.users.api.permissions import IsAdminOrHRCanWrite
from perfboard.users.api.permissions import is_organisation_wide

from .filters import AssignmentFilter
from .serializers import AssignmentSerializer

AUDIT_FIELDS = [
    "kind",
    "source",
    "target",
    "assignment_type",
    "expires_date",
    "active",
]


@extend_schema_view(
    list=extend_schema(tags=["Assignments"]),
    retrieve=extend_schema(tags=["Assignments"]),
    create=extend_schema(tags=["Assignments"]),
    update=extend_schema(tags=["Assignments"]),
    partial_update=extend_schema(tags=["Assignments"]),
    destroy=extend_schema(tags=["Assignments"]),
)
class AssignmentViewSet(viewsets.ModelViewSet):
    queryset = Assignment.objects.select_related("source", "target").all()
    serializer_class = AssignmentSerializer
    permission_classes = [IsAdminOrHRCanWrite]
    filterset_class = AssignmentFilter

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user
        if is_organisation_wide(user):
            return qs
        # Everyone else only sees the pairings they take part in
        return qs.filter(Q(source=user) | Q(target=user))

    def perform_create(self, serializer):
        assignment = serializer.save(created_by=self.request.user)
        log_action(
            AuditLog.Action.ASSIGNMENT_CREATE,
            actor=self.request.user,
            model_name="Assignment",
            record_id=assignment.pk,
            after=snapshot(assignment, AUDIT_FIELDS),
        )

    def perform_update(self, serializer):
        before = snapshot(serializer.instance, AUDIT_FIELDS)
        assignment = serializer.save()
        log_action(
            AuditLog.Action.ASSIGNMENT_UPDATE,
            actor=self.request.user,
            model_name="Assignment",
            record_id=assignment.pk,
            before=before,
            after=snapshot(assignment, AUDIT_FIELDS),
        )

    def perform_destroy(self, instance):
        before = snapshot(instance, AUDIT_FIELDS)
        record_id = instance.pk
        instance.delete()
        log_action(
            AuditLog.Action.ASSIGNMENT_DELETE,
            actor=self.request.user,
            model_name="Assignment",
            record_id=record_id,
            before=before,
        )

    @extend_schema(tags=["Assignments"])
    @action(detail=False, methods=["get"], permission_classes=[IsAdminOrHR])
    def integrity(self, request):
        """Report rows that point at missing or deactivated users."""
        try:
            check_targets()
        except DanglingAssignmentError as exc:
            return Response(
                {
                    "ok": False,
                    "detail": str(exc),
                    "assignment_ids": list(exc.assignment_ids),
                    "missing_user_ids": list(exc.missing_user_ids),
                },
                status=status.HTTP_409_CONFLICT,
            )
        return Response({"ok": True})
