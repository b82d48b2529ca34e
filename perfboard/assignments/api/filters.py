import django_filters

from perfboard.assignments.models import Assignment
from perfboard.assignments.registry import AssignmentKind


class AssignmentFilter(django_filters.FilterSet):
    kind = django_filters.ChoiceFilter(choices=AssignmentKind.choices)
    source = django_filters.NumberFilter(field_name="source__id")
    target = django_filters.NumberFilter(field_name="target__id")
    active = django_filters.BooleanFilter(field_name="active")

    class Meta:
        model = Assignment
        fields = ["kind", "source", "target", "active"]
