"""
Persistence boundary for allocation drafts.

The engine talks to any object satisfying ``AllocationStore``; production code
uses ``ModelAllocationStore`` over the ``BonusAllocation`` table through
Django's async ORM.
"""

from __future__ import annotations

import logging
from typing import Protocol

from django.db.models import F
from django.utils import timezone

from .models import BonusAllocation
from .records import AllocationDraft
from .records import allocations_from_json
from .records import allocations_to_json

logger = logging.getLogger(__name__)


class StaleAllocationError(Exception):
    """The stored draft moved on since the caller read it."""

    def __init__(self, key: str, expected_version: int, current_version: int) -> None:
        self.key = key
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Allocation {key} is at version {current_version}, "
            f"expected {expected_version}"
        )


def allocation_key(department_id, year) -> str:
    return f"{department_id}_{year}"


class AllocationStore(Protocol):
    async def get(self, department_id, year) -> AllocationDraft | None: ...

    async def put(
        self,
        department_id,
        year,
        draft: AllocationDraft,
        expected_version: int | None = None,
    ) -> AllocationDraft: ...


def to_draft(row: BonusAllocation) -> AllocationDraft:
    return AllocationDraft(
        department_id=row.department_id,
        year=row.year,
        total_budget=row.total_budget,
        allocations=allocations_from_json(row.allocations),
        status=row.status,
        kpi_target=row.kpi_target,
        created_by=row.created_by_id,
        last_saved=row.last_saved,
        version=row.version,
    )


class ModelAllocationStore:
    async def get(self, department_id, year) -> AllocationDraft | None:
        try:
            row = await BonusAllocation.objects.aget(
                key=allocation_key(department_id, year)
            )
        except BonusAllocation.DoesNotExist:
            return None
        return to_draft(row)

    async def put(self, department_id, year, draft, expected_version=None):
        """
        Write ``draft`` under ``(department_id, year)``, bump ``version`` and
        stamp ``last_saved``.

        Without ``expected_version`` the write always wins. With it, the write
        only lands if the stored version still matches (0 meaning "not stored
        yet"); otherwise ``StaleAllocationError`` is raised.
        """
        key = allocation_key(department_id, year)
        now = timezone.now()
        fields = {
            "department_id": department_id,
            "year": year,
            "total_budget": draft.total_budget,
            "kpi_target": draft.kpi_target or "",
            "allocations": allocations_to_json(draft.allocations),
            "status": draft.status,
            "last_saved": now,
        }
        rows = BonusAllocation.objects.filter(key=key)

        if expected_version is None:
            row, _created = await BonusAllocation.objects.aupdate_or_create(
                key=key,
                defaults={**fields, "version": F("version") + 1},
                create_defaults={
                    **fields,
                    "created_by_id": draft.created_by,
                    "version": 1,
                },
            )
            await row.arefresh_from_db()
        elif expected_version == 0:
            current = await rows.values_list("version", flat=True).afirst()
            if current is not None:
                raise StaleAllocationError(key, expected_version, current)
            row = await BonusAllocation.objects.acreate(
                key=key,
                created_by_id=draft.created_by,
                version=1,
                **fields,
            )
        else:
            updated = await rows.filter(version=expected_version).aupdate(
                **fields,
                version=F("version") + 1,
                updated_at=now,
            )
            if not updated:
                current = await rows.values_list("version", flat=True).afirst()
                raise StaleAllocationError(key, expected_version, current or 0)
            row = await rows.aget()

        logger.info("Saved bonus allocation %s (version %s)", key, row.version)
        return to_draft(row)
