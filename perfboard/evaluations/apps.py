from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class EvaluationsConfig(AppConfig):
    name = "perfboard.evaluations"
    verbose_name = _("Evaluations")
