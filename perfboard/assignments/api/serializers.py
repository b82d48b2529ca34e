from rest_framework import serializers

from perfboard.assignments.models import Assignment
from perfboard.assignments.registry import AssignmentType


class AssignmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Assignment
        fields = [
            "id",
            "kind",
            "source",
            "target",
            "assignment_type",
            "expires_date",
            "active",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_by", "created_at", "updated_at"]
        # Duplicate active pairs are checked in validate() with a clearer message
        validators = []

    def _merged(self, attrs, name):
        if name in attrs:
            return attrs[name]
        return getattr(self.instance, name, None) if self.instance else None

    def validate(self, attrs):
        kind = self._merged(attrs, "kind")
        source = self._merged(attrs, "source")
        target = self._merged(attrs, "target")
        active = self._merged(attrs, "active")
        if active is None:
            active = True
        assignment_type = self._merged(attrs, "assignment_type") or AssignmentType.PERMANENT
        expires_date = self._merged(attrs, "expires_date")

        if source is not None and target is not None and source.pk == target.pk:
            raise serializers.ValidationError(
                {"target": "A user cannot be assigned to themselves."}
            )
        if assignment_type == AssignmentType.TEMPORARY and not expires_date:
            raise serializers.ValidationError(
                {"expires_date": "Temporary assignments need an expiry date."}
            )
        if active and source is not None and target is not None:
            clash = Assignment.objects.filter(
                kind=kind, source=source, target=target, active=True
            )
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError(
                    "An active assignment already exists for this pair."
                )
        return attrs
