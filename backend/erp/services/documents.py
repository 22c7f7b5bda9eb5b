"""Create, update, delete and restore financial documents.

Every operation runs in one database transaction covering the document row,
its lines, stock movements and ledger adjustments.  Domain errors propagate
unchanged; anything unexpected is logged with the document reference and
re-raised as :class:`~erp.exceptions.DocumentOperationFailed`.
"""

from __future__ import annotations

import logging

from django.db import transaction

from ..exceptions import DocumentNotFound, DocumentOperationFailed, LedgerError
from .ledger import post_adjustments

logger = logging.getLogger(__name__)

LINES_KEY = "items"


def _label(model):
    return model._meta.verbose_name


def _run(operation, model, reference, func):
    try:
        with transaction.atomic():
            return func()
    except LedgerError as exc:
        logger.warning("Could not %s %s %s: %s", operation, _label(model), reference or "", exc.message)
        raise
    except Exception as exc:
        logger.exception("Failed to %s %s %s", operation, _label(model), reference or "")
        target = f"{_label(model)} {reference}" if reference else _label(model)
        raise DocumentOperationFailed(
            f"Failed to {operation} {target}. All changes have been rolled back.",
            details={"reference": str(reference) if reference else None},
        ) from exc


def _get(model, pk, trashed=False):
    manager = model.all_objects if trashed else model.objects
    queryset = manager.select_for_update()
    if trashed:
        queryset = queryset.filter(deleted_at__isnull=False)
    try:
        return queryset.get(pk=pk)
    except model.DoesNotExist as exc:
        raise DocumentNotFound(
            f"{_label(model).capitalize()} #{pk} not found.", details={"id": pk}
        ) from exc


def _line_model(model):
    return model._meta.get_field(model.lines_relation).related_model


def _merge_lines(document, lines_data):
    """Match submitted lines to existing ones by ``id``.

    Returns the lines to keep (unsaved) and the existing lines to remove.
    """

    line_model = _line_model(type(document))
    existing = {line.pk: line for line in document.lines()} if document.pk else {}
    lines = []
    for data in lines_data:
        data = dict(data)
        line_id = data.pop("id", None)
        if line_id in existing:
            line = existing.pop(line_id)
            for field, value in data.items():
                setattr(line, field, value)
        else:
            line = line_model(**data)
        if line.warehouse_id is None:
            line.warehouse_id = document.warehouse_id
        lines.append(line)
    return lines, list(existing.values())


def _save_lines(document, lines):
    for line in lines:
        line.document = document
        line.save()


def create_document(model, data, user=None):
    """Insert a document (and its lines) and post its create transition."""

    data = dict(data)
    lines_data = data.pop(LINES_KEY, None) or []

    def _create():
        document = model(**data)
        if user is not None and document.created_by_id is None:
            document.created_by = user
        lines = []
        if model.lines_relation:
            document.ensure_rate()
            lines, _ = _merge_lines(document, lines_data)
            document.recalculate_totals(lines)
        document.save()
        _save_lines(document, lines)
        if not model.posts_on_save:
            post_adjustments(model.ledger_table.created(document.ledger_state()), entry_id=document.pk)
        logger.info("Created %s %s", _label(model), document.number)
        return document

    return _run("create", model, None, _create)


def update_document(model, pk, data, user=None):
    """Apply field changes and post the difference between old and new state."""

    data = dict(data)
    lines_data = data.pop(LINES_KEY, None)

    def _update():
        document = _get(model, pk)
        previous_state = document.ledger_state()
        previous_currency_id = document.currency_id
        for field, value in data.items():
            setattr(document, field, value)
        if document.currency_id != previous_currency_id and "currency_rate" not in data:
            document.currency_rate = None
        for field, sources in model.derived_fields.items():
            if field not in data and any(source in data for source in sources):
                setattr(document, field, None)
        if model.lines_relation:
            document.ensure_rate()
            if lines_data is None:
                lines, removed = document.lines(), []
            else:
                lines, removed = _merge_lines(document, lines_data)
            for line in removed:
                line.delete()
                document.line_removed(line)
            document.recalculate_totals(lines)
            _save_lines(document, lines)
        document.save()
        if not model.posts_on_save:
            post_adjustments(
                model.ledger_table.updated(previous_state, document.ledger_state()),
                entry_id=document.pk,
            )
        logger.info("Updated %s %s", _label(model), document.number)
        return document

    return _run("update", model, f"#{pk}", _update)


def delete_document(model, pk, user=None):
    """Soft-delete a document and reverse its balance effect."""

    def _delete():
        document = _get(model, pk)
        state = document.ledger_state()
        document.delete()
        if not model.posts_on_save:
            post_adjustments(model.ledger_table.deleted(state), entry_id=document.pk)
        logger.info("Deleted %s %s", _label(model), document.number)
        return document

    return _run("delete", model, f"#{pk}", _delete)


def restore_document(model, pk, user=None):
    """Bring back a soft-deleted document and re-apply its balance effect."""

    def _restore():
        document = _get(model, pk, trashed=True)
        document.restore()
        if not model.posts_on_save:
            post_adjustments(model.ledger_table.restored(document.ledger_state()), entry_id=document.pk)
        logger.info("Restored %s %s", _label(model), document.number)
        return document

    return _run("restore", model, f"#{pk}", _restore)


def force_delete_document(model, pk, user=None):
    """Remove a document permanently.

    Live documents are reversed first; already soft-deleted ones have no
    further balance effect.
    """

    def _force_delete():
        try:
            document = model.all_objects.select_for_update().get(pk=pk)
        except model.DoesNotExist as exc:
            raise DocumentNotFound(
                f"{_label(model).capitalize()} #{pk} not found.", details={"id": pk}
            ) from exc
        if document.deleted_at is None and not model.posts_on_save:
            post_adjustments(model.ledger_table.deleted(document.ledger_state()), entry_id=document.pk)
        number = document.number
        document.hard_delete()
        logger.info("Permanently deleted %s %s", _label(model), number)

    return _run("permanently delete", model, f"#{pk}", _force_delete)


def approve_document(model, pk, user):
    def _approve():
        document = _get(model, pk)
        document.approve(user)
        return document

    return _run("approve", model, f"#{pk}", _approve)


def unapprove_document(model, pk, user=None):
    def _unapprove():
        document = _get(model, pk)
        document.unapprove()
        return document

    return _run("unapprove", model, f"#{pk}", _unapprove)
