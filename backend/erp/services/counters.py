"""Document code sequences backed by :class:`erp.models.Setting` rows."""

from __future__ import annotations

from typing import Optional

from django.apps import apps
from django.conf import settings
from django.db import transaction

CODE_KEY = "code_counter"


def reserve_next_value(group: str, key: str = CODE_KEY, default: Optional[int] = None) -> int:
    """Atomically increment the ``group``/``key`` counter and return the new value.

    When ``default`` is omitted the starting value configured in
    ``ERP_CODE_STARTS`` is used for code counters.
    """

    if default is None and key == CODE_KEY:
        default = getattr(settings, "ERP_CODE_STARTS", {}).get(group, 1000)
    setting_model = apps.get_model("erp", "Setting")
    with transaction.atomic():
        return setting_model.increment_value(group, key, 1, default=default)


def reserve_next_code(group: str, key: str = CODE_KEY, default: Optional[int] = None) -> str:
    """Return the next value of the sequence as a zero-padded code."""

    value = reserve_next_value(group, key, default)
    return str(value).zfill(getattr(settings, "ERP_CODE_PAD", 6))
