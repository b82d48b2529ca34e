from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from perfboard.users.accessors import to_team_member
from perfboard.users.models import User
from perfboard.visibility.rules import VisibilityMode
from perfboard.visibility.services import team_for
from perfboard.visibility.services import user_can_view

MODE_PARAMETER = OpenApiParameter(
    "mode",
    OpenApiTypes.STR,
    enum=VisibilityMode.values,
    description="evaluation (default) or bonus",
)


class TeamMemberSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    role = serializers.CharField()
    home_department = serializers.IntegerField(
        source="home_department_id", allow_null=True
    )


class _ModeMixin:
    def parse_mode(self, request):
        """Return ``(mode, None)`` or ``(None, error_response)``."""
        mode = request.query_params.get("mode", VisibilityMode.EVALUATION)
        if mode not in VisibilityMode.values:
            return None, Response(
                {"detail": f"mode must be one of {', '.join(VisibilityMode.values)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return VisibilityMode(mode), None


@extend_schema(
    tags=["Team"],
    parameters=[MODE_PARAMETER],
    responses={200: TeamMemberSerializer(many=True)},
)
class TeamView(_ModeMixin, APIView):
    """Users the requester may evaluate or allocate a bonus to."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        mode, error = self.parse_mode(request)
        if error is not None:
            return error
        team = team_for(request.user, mode)
        return Response(TeamMemberSerializer(team, many=True).data)


@extend_schema(
    tags=["Team"],
    parameters=[MODE_PARAMETER],
    responses={200: TeamMemberSerializer},
)
class TeamMemberView(_ModeMixin, APIView):
    """One member of the requester's team; 404 when outside it."""

    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        mode, error = self.parse_mode(request)
        if error is not None:
            return error
        if not user_can_view(request.user, user_id, mode):
            return Response(
                {"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND
            )
        member = get_object_or_404(User, pk=user_id, is_active=True)
        return Response(TeamMemberSerializer(to_team_member(member)).data)
