from rest_framework import serializers

from perfboard.bonus.records import AllocationEntry
from perfboard.bonus.records import DraftStatus


class AllocationEntrySerializer(serializers.Serializer):
    monthly_salary = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        allow_null=True,
        required=False,
    )
    bonus_percentage = serializers.DecimalField(
        max_digits=7,
        decimal_places=2,
        min_value=0,
        allow_null=True,
        required=False,
    )


class AllocationMapField(serializers.DictField):
    """``{"<user_id>": {...entry...}}`` in, ``{user_id: AllocationEntry}`` out."""

    child = AllocationEntrySerializer()

    def to_internal_value(self, data):
        raw = super().to_internal_value(data)
        result = {}
        for key, entry in raw.items():
            try:
                user_id = int(key)
            except (TypeError, ValueError) as exc:
                msg = f"Invalid user id {key!r}."
                raise serializers.ValidationError(msg) from exc
            result[user_id] = AllocationEntry(
                monthly_salary=entry.get("monthly_salary"),
                bonus_percentage=entry.get("bonus_percentage"),
            )
        return result


class AllocationSaveSerializer(serializers.Serializer):
    total_budget = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=0,
        allow_null=True,
        required=False,
    )
    kpi_target = serializers.CharField(allow_blank=True, required=False, default="")
    status = serializers.ChoiceField(
        choices=DraftStatus.choices,
        default=DraftStatus.DRAFT,
    )
    allocations = AllocationMapField(required=False, default=dict)
    version = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class AutoAllocateSerializer(serializers.Serializer):
    total_budget = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        allow_null=True,
        required=False,
    )
    allocations = AllocationMapField(required=False)


class AdjustSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    delta = serializers.DecimalField(max_digits=7, decimal_places=2, required=False)
    total_budget = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        allow_null=True,
        required=False,
    )
    allocations = AllocationMapField(required=False)


class SalarySerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    monthly_salary = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
    )
    total_budget = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        allow_null=True,
        required=False,
    )
    allocations = AllocationMapField(required=False)
