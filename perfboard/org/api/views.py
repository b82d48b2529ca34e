import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from perfboard.audit.models import AuditLog
from perfboard.audit.utils import log_action
from perfboard.audit.utils import snapshot
from perfboard.org.accessors import load_tree
from perfboard.org.exceptions import DepartmentInUseError
from perfboard.org.models import Department
from perfboard.org.services import deactivate_department
from perfboard.org.services import ensure_can_deactivate
from perfboard.org.tree import render_label
from perfboard.users.api.permissions import IsAdminOrHRCanWrite

from .serializers import DepartmentOptionSerializer
from .serializers import DepartmentSerializer
from .serializers import DepartmentTreeSerializer

logger = logging.getLogger(__name__)

AUDIT_FIELDS = ["name", "description", "parent", "manager", "is_active"]
UPDATE_RESPONSES = {200: DepartmentSerializer, 409: OpenApiTypes.OBJECT}


def _node_payload(node) -> dict:
    dept = node.department
    return {
        "id": dept.id,
        "name": dept.name,
        "is_active": dept.is_active,
        "manager": dept.manager_id,
        "employee_count": dept.employee_count,
        "children": [_node_payload(child) for child in node.children],
    }


def _in_use_response(exc: DepartmentInUseError) -> Response:
    return Response(
        {
            "detail": str(exc),
            "active_employees": exc.active_employees,
            "active_children": exc.active_children,
        },
        status=status.HTTP_409_CONFLICT,
    )


def _parse_int(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@extend_schema_view(
    list=extend_schema(tags=["Departments"]),
    retrieve=extend_schema(tags=["Departments"]),
    create=extend_schema(tags=["Departments"]),
    update=extend_schema(tags=["Departments"], responses=UPDATE_RESPONSES),
    partial_update=extend_schema(tags=["Departments"], responses=UPDATE_RESPONSES),
    destroy=extend_schema(
        tags=["Departments"],
        description="Logical delete: the department is deactivated, never removed.",
        responses={204: None, 409: OpenApiTypes.OBJECT},
    ),
)
class DepartmentViewSet(viewsets.ModelViewSet):
    queryset = Department.objects.select_related("parent", "manager").all()
    serializer_class = DepartmentSerializer
    permission_classes = [IsAdminOrHRCanWrite]
    filterset_fields = ["is_active", "parent"]

    def perform_create(self, serializer):
        dept = serializer.save()
        log_action(
            AuditLog.Action.DEPARTMENT_CREATE,
            actor=self.request.user,
            model_name="Department",
            record_id=dept.pk,
            after=snapshot(dept, AUDIT_FIELDS),
        )

    def update(self, request, *args, **kwargs):
        try:
            return super().update(request, *args, **kwargs)
        except DepartmentInUseError as exc:
            logger.info(
                "Refused to deactivate department %s: %s", exc.department_id, exc
            )
            return _in_use_response(exc)

    def perform_update(self, serializer):
        # Switching is_active off is a logical delete and gets the same guard
        deactivating = serializer.validated_data.get("is_active") is False
        if deactivating and serializer.instance.is_active:
            ensure_can_deactivate(serializer.instance.pk)
        before = snapshot(serializer.instance, AUDIT_FIELDS)
        dept = serializer.save()
        log_action(
            AuditLog.Action.DEPARTMENT_UPDATE,
            actor=self.request.user,
            model_name="Department",
            record_id=dept.pk,
            before=before,
            after=snapshot(dept, AUDIT_FIELDS),
        )

    def destroy(self, request, *args, **kwargs):
        dept = self.get_object()
        if not dept.is_active:
            return Response(status=status.HTTP_204_NO_CONTENT)
        try:
            deactivate_department(dept)
        except DepartmentInUseError as exc:
            logger.info("Refused to deactivate department %s: %s", dept.pk, exc)
            return _in_use_response(exc)
        log_action(
            AuditLog.Action.DEPARTMENT_DEACTIVATE,
            actor=request.user,
            model_name="Department",
            record_id=dept.pk,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Departments"],
        responses={200: DepartmentTreeSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def tree(self, request):
        roots = load_tree().roots
        return Response([_node_payload(root) for root in roots])

    @extend_schema(
        tags=["Departments"],
        description="Flattened hierarchy for parent selection widgets.",
        parameters=[
            OpenApiParameter(
                "exclude",
                OpenApiTypes.INT,
                description="Drop this department and its subtree",
            ),
        ],
        responses={200: DepartmentOptionSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="options", url_name="options")
    def parent_options(self, request):
        exclude_id = _parse_int(request.query_params.get("exclude"))
        rows = [
            {
                "id": entry.department.id,
                "name": entry.department.name,
                "is_active": entry.department.is_active,
                "level": entry.level,
                "is_last": entry.is_last,
                "lineage": list(entry.lineage),
                "display_label": render_label(entry),
            }
            for entry in load_tree().flatten(exclude_id=exclude_id)
        ]
        return Response(rows)

    @extend_schema(tags=["Departments"], responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["get"])
    def descendants(self, request, pk=None):
        dept = self.get_object()
        ids = sorted(load_tree().descendants(dept.pk))
        return Response({"id": dept.pk, "descendants": ids})
