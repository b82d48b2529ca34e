from rest_framework import serializers

from perfboard.org.exceptions import StructureError
from perfboard.org.models import Department
from perfboard.org.services import validate_parent


class DepartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = [
            "id",
            "name",
            "description",
            "parent",
            "manager",
            "is_active",
            "employee_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["employee_count", "created_at", "updated_at"]

    def validate_parent(self, value):
        """
        Re-parenting must not close a loop. A new department cannot close one,
        so creation skips the check. Inactive parents are accepted: the link is
        kept, and the department still counts as below every ancestor of it.
        """
        if self.instance is None:
            return value
        try:
            validate_parent(self.instance.pk, value.pk if value else None)
        except StructureError as exc:
            raise serializers.ValidationError(str(exc)) from exc
        return value


class DepartmentTreeSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    is_active = serializers.BooleanField()
    manager = serializers.IntegerField(allow_null=True)
    employee_count = serializers.IntegerField()
    children = serializers.ListField(child=serializers.DictField())


class DepartmentOptionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    is_active = serializers.BooleanField()
    level = serializers.IntegerField()
    is_last = serializers.BooleanField()
    lineage = serializers.ListField(child=serializers.BooleanField())
    display_label = serializers.CharField()
