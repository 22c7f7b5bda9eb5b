"""Domain errors raised by the ledger services.

Services raise these instead of DRF exceptions so they can be used from
management commands and tests as well as from views.  The API layer renders
them through :func:`erp.views.utils.api_exception_handler`.
"""

from __future__ import annotations

from typing import Any, Optional

from rest_framework import status


class LedgerError(Exception):
    """Base class for every error raised by the ledger services."""

    default_error_code = "LEDGER_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "detail": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result


class DocumentNotFound(LedgerError):
    """An update, delete or restore referenced a document that does not exist."""

    default_error_code = "DOCUMENT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InventoryError(LedgerError):
    """A stock movement was rejected (bad quantity, unknown item, short stock)."""

    default_error_code = "INVENTORY_ERROR"


class DocumentOperationFailed(LedgerError):
    """Wraps an unexpected failure; the surrounding transaction was rolled back."""

    default_error_code = "OPERATION_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
