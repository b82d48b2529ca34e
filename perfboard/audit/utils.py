from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.serializers.json import DjangoJSONEncoder
from django.forms.models import model_to_dict

from .models import AuditLog


def snapshot(instance, fields=None) -> dict:
    """JSON-safe dict of a model instance for ``before``/``after`` columns."""

    data = model_to_dict(instance, fields=fields)
    encoder = DjangoJSONEncoder()
    return {
        key: value
        if value is None or isinstance(value, (str, int, bool, list, dict))
        else encoder.default(value)
        for key, value in data.items()
    }


def log_action(  # noqa: PLR0913
    action: str,
    *,
    actor: object | None = None,
    message: str = "",
    model_name: str = "",
    record_id: object | None = None,
    before: dict | list | None = None,
    after: dict | list | None = None,
) -> AuditLog:
    user_model = get_user_model()
    actor_user = actor if isinstance(actor, user_model) else None
    return AuditLog.objects.create(
        action=action,
        actor=actor_user,
        message=message,
        model_name=model_name,
        record_id="" if record_id is None else str(record_id),
        before=before,
        after=after,
    )
