"""Utility helpers shared across API view modules."""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..exceptions import LedgerError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render ledger errors as structured responses, defer the rest to DRF."""

    if isinstance(exc, LedgerError):
        if exc.status_code >= 500:
            logger.error("Ledger operation failed in %s: %s", context.get("view"), exc.message)
        return Response(exc.to_dict(), status=exc.status_code)
    return exception_handler(exc, context)
