import logging
from dataclasses import replace

from asgiref.sync import async_to_sync
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from perfboard.audit.models import AuditLog
from perfboard.audit.utils import log_action
from perfboard.bonus.accessors import load_allocation_team
from perfboard.bonus.accessors import load_scored_team
from perfboard.bonus.records import allocations_to_json
from perfboard.bonus.services import adjust_percentage
from perfboard.bonus.services import apply_auto_allocation
from perfboard.bonus.services import auto_allocate
from perfboard.bonus.services import bonus_amount
from perfboard.bonus.services import compute_totals
from perfboard.bonus.services import load_draft
from perfboard.bonus.services import percentage_step
from perfboard.bonus.services import persist_draft
from perfboard.bonus.services import set_salary
from perfboard.bonus.store import ModelAllocationStore
from perfboard.bonus.store import StaleAllocationError
from perfboard.bonus.store import allocation_key
from perfboard.org.models import Department

from .permissions import CanAllocateDepartmentBonus
from .serializers import AdjustSerializer
from .serializers import AllocationSaveSerializer
from .serializers import AutoAllocateSerializer
from .serializers import SalarySerializer

logger = logging.getLogger(__name__)


def _decimal_str(value):
    return None if value is None else str(value)


def _totals_payload(totals) -> dict:
    return {
        "allocated_amount": str(totals.allocated_amount),
        "total_budget": str(totals.total_budget),
        "remaining": str(totals.remaining),
        "exceeded": totals.exceeded,
    }


def _team_payload(members, scored, allocations) -> list[dict]:
    by_id = {s.user_id: s for s in scored}
    rows = []
    for member in members:
        score = by_id[member.id]
        entry = allocations.get(member.id)
        rows.append(
            {
                "user_id": member.id,
                "name": member.name,
                "role": member.role,
                "monthly_salary": _decimal_str(score.monthly_salary),
                "raw_score": _decimal_str(score.raw_score),
                "max_score": _decimal_str(score.max_score),
                "normalized_score": str(score.normalized_score),
                "bonus_percentage": _decimal_str(
                    entry.bonus_percentage if entry else None
                ),
                "bonus_amount": str(bonus_amount(entry)),
            }
        )
    return rows


class _AllocationViewBase(APIView):
    permission_classes = [CanAllocateDepartmentBonus]
    store_class = ModelAllocationStore

    def get_store(self):
        return self.store_class()

    def get_department(self, department_id) -> Department:
        return get_object_or_404(Department, pk=department_id)

    def load_workspace(self, department_id, year):
        draft = async_to_sync(load_draft)(self.get_store(), department_id, year)
        members = load_allocation_team(self.request.user, department_id)
        return draft, members

    def build_payload(
        self, draft, members, allocations=None, total_budget=None, **extra
    ):
        allocations = draft.allocations if allocations is None else allocations
        if total_budget is None:
            total_budget = draft.total_budget
        scored = load_scored_team(members, allocations)
        team_ids = [m.id for m in members]
        payload = {
            "key": allocation_key(draft.department_id, draft.year),
            "department": draft.department_id,
            "year": draft.year,
            "total_budget": _decimal_str(total_budget),
            "kpi_target": draft.kpi_target,
            "status": draft.status,
            "version": draft.version,
            "last_saved": draft.last_saved,
            "created_by": draft.created_by,
            "percentage_step": str(percentage_step()),
            "allocations": allocations_to_json(allocations),
            "team": _team_payload(members, scored, allocations),
            "totals": _totals_payload(
                compute_totals(team_ids, allocations, total_budget)
            ),
        }
        payload.update(extra)
        return payload


@extend_schema(tags=["Bonus"])
class AllocationView(_AllocationViewBase):
    """The department's allocation draft for one year."""

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request, department_id: int, year: int):
        self.get_department(department_id)
        draft, members = self.load_workspace(department_id, year)
        return Response(self.build_payload(draft, members))

    @extend_schema(
        request=AllocationSaveSerializer,
        responses={200: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
    )
    def put(self, request, department_id: int, year: int):
        self.get_department(department_id)
        serializer = AllocationSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        current, members = self.load_workspace(department_id, year)
        draft = replace(
            current,
            total_budget=data.get("total_budget"),
            kpi_target=data["kpi_target"],
            status=data["status"],
            allocations=data["allocations"],
            created_by=current.created_by or request.user.pk,
        )
        try:
            saved = async_to_sync(persist_draft)(
                self.get_store(),
                draft,
                expected_version=data.get("version"),
            )
        except StaleAllocationError as exc:
            logger.info("Stale allocation save rejected: %s", exc)
            return Response(
                {"detail": str(exc), "current_version": exc.current_version},
                status=status.HTTP_409_CONFLICT,
            )

        log_action(
            AuditLog.Action.ALLOCATION_SAVE,
            actor=request.user,
            model_name="BonusAllocation",
            record_id=allocation_key(department_id, year),
            before={"version": current.version},
            after={"version": saved.version, "status": saved.status},
        )
        totals = compute_totals(
            [m.id for m in members], saved.allocations, saved.total_budget
        )
        if totals.exceeded:
            logger.info(
                "Allocation %s saved over budget (%s > %s)",
                allocation_key(department_id, year),
                totals.allocated_amount,
                totals.total_budget,
            )
        return Response(self.build_payload(saved, members))


@extend_schema(tags=["Bonus"])
class AutoAllocateView(_AllocationViewBase):
    """Compute a performance-weighted split. Nothing is saved."""

    @extend_schema(request=AutoAllocateSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request, department_id: int, year: int):
        self.get_department(department_id)
        serializer = AutoAllocateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        draft, members = self.load_workspace(department_id, year)
        allocations = data.get("allocations", draft.allocations)
        total_budget = data.get("total_budget", draft.total_budget)
        scored = load_scored_team(members, allocations)

        result = auto_allocate(scored, total_budget)
        if result.computed:
            allocations = apply_auto_allocation(allocations, result)
        return Response(
            self.build_payload(
                draft,
                members,
                allocations=allocations,
                total_budget=total_budget,
                skipped=result.skipped,
                message=result.message,
            )
        )


@extend_schema(tags=["Bonus"])
class AdjustView(_AllocationViewBase):
    """Step one member's percentage up or down. Nothing is saved."""

    @extend_schema(request=AdjustSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request, department_id: int, year: int):
        self.get_department(department_id)
        serializer = AdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        draft, members = self.load_workspace(department_id, year)
        if data["user_id"] not in {m.id for m in members}:
            return Response(
                {"detail": "User is not part of this allocation team."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        allocations = data.get("allocations", draft.allocations)
        total_budget = data.get("total_budget", draft.total_budget)
        delta = data.get("delta", percentage_step())
        allocations = adjust_percentage(allocations, data["user_id"], delta)
        return Response(
            self.build_payload(
                draft,
                members,
                allocations=allocations,
                total_budget=total_budget,
            )
        )


@extend_schema(tags=["Bonus"])
class SalaryView(_AllocationViewBase):
    """Enter a member's monthly salary for this draft. Nothing is saved."""

    @extend_schema(request=SalarySerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request, department_id: int, year: int):
        self.get_department(department_id)
        serializer = SalarySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        draft, members = self.load_workspace(department_id, year)
        if data["user_id"] not in {m.id for m in members}:
            return Response(
                {"detail": "User is not part of this allocation team."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        allocations = data.get("allocations", draft.allocations)
        total_budget = data.get("total_budget", draft.total_budget)
        allocations = set_salary(allocations, data["user_id"], data["monthly_salary"])
        return Response(
            self.build_payload(
                draft,
                members,
                allocations=allocations,
                total_budget=total_budget,
            )
        )
