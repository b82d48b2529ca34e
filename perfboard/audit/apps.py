import importlib

from django.apps import AppConfig


class AuditConfig(AppConfig):
    name = "perfboard.audit"

    def ready(self) -> None:  # pragma: no cover
        importlib.import_module("perfboard.audit.signals")
        return super().ready()
