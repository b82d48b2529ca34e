from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class BonusConfig(AppConfig):
    name = "perfboard.bonus"
    verbose_name = _("Bonus allocation")
