from django.conf import settings
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from perfboard.assignments.api.views import AssignmentViewSet
from perfboard.bonus.api.views import AdjustView
from perfboard.bonus.api.views import AllocationView
from perfboard.bonus.api.views import AutoAllocateView
from perfboard.bonus.api.views import SalaryView
from perfboard.org.api.views import DepartmentViewSet
from perfboard.visibility.api.views import TeamMemberView
from perfboard.visibility.api.views import TeamView

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("departments", DepartmentViewSet)
router.register("assignments", AssignmentViewSet)


app_name = "api"
urlpatterns = [
    path("team/", TeamView.as_view(), name="team"),
    path("team/<int:user_id>/", TeamMemberView.as_view(), name="team-member"),
    path(
        "bonus/allocations/<int:department_id>/<int:year>/",
        AllocationView.as_view(),
        name="bonus-allocation",
    ),
    path(
        "bonus/allocations/<int:department_id>/<int:year>/auto-allocate/",
        AutoAllocateView.as_view(),
        name="bonus-auto-allocate",
    ),
    path(
        "bonus/allocations/<int:department_id>/<int:year>/adjust/",
        AdjustView.as_view(),
        name="bonus-adjust",
    ),
    path(
        "bonus/allocations/<int:department_id>/<int:year>/salary/",
        SalaryView.as_view(),
        name="bonus-salary",
    ),
    *router.urls,
]
