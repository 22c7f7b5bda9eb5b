"""Shared viewset for balance-affecting documents."""

from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..activity_logger import log_activity
from ..services import documents


class DocumentViewSet(viewsets.ModelViewSet):
    """CRUD plus restore, permanent delete and approval for a document model.

    ``parent_lookup`` is ``(field, url_kwarg)`` for viewsets nested under a
    counterparty, e.g. ``('customer', 'customer_pk')``.
    """

    model = None
    parent_lookup = None
    permission_classes = [IsAuthenticated]

    def scope(self, queryset):
        if self.parent_lookup:
            field, kwarg = self.parent_lookup
            queryset = queryset.filter(**{f'{field}_id': self.kwargs[kwarg]})
        return queryset

    def get_queryset(self):
        if self.request.query_params.get('trashed') in ('1', 'true'):
            queryset = self.model.all_objects.trashed()
        else:
            queryset = self.model.objects.all()
        return self.scope(queryset).order_by('-date', '-id')

    def get_parent(self):
        field, kwarg = self.parent_lookup
        parent_model = self.model._meta.get_field(field).related_model
        return get_object_or_404(parent_model, pk=self.kwargs[kwarg])

    def perform_create(self, serializer):
        extra = {}
        if self.parent_lookup:
            extra[self.parent_lookup[0]] = self.get_parent()
        instance = serializer.save(**extra)
        log_activity(self.request.user, 'created', instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'updated', instance)

    def perform_destroy(self, instance):
        log_activity(self.request.user, 'deleted', instance)
        documents.delete_document(self.model, instance.pk, user=self.request.user)

    def _respond(self, document):
        document = self.model.all_objects.get(pk=document.pk)
        return Response(self.get_serializer(document).data)

    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None, **kwargs):
        get_object_or_404(self.scope(self.model.all_objects.trashed()), pk=pk)
        document = documents.restore_document(self.model, pk, user=request.user)
        log_activity(request.user, 'restored', document)
        return self._respond(document)

    @action(detail=True, methods=['delete'], url_path='force')
    def force_delete(self, request, pk=None, **kwargs):
        document = get_object_or_404(self.scope(self.model.all_objects.all()), pk=pk)
        log_activity(request.user, 'deleted', document, description=f'{document} was permanently deleted.')
        documents.force_delete_document(self.model, pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _require_approval_support(self):
        if not hasattr(self.model, 'approve'):
            return Response(
                {'detail': f'{self.model._meta.verbose_name} does not require approval.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return None

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None, **kwargs):
        unsupported = self._require_approval_support()
        if unsupported is not None:
            return unsupported
        self.get_object()
        document = documents.approve_document(self.model, pk, request.user)
        log_activity(request.user, 'approved', document)
        return self._respond(document)

    @action(detail=True, methods=['post'])
    def unapprove(self, request, pk=None, **kwargs):
        unsupported = self._require_approval_support()
        if unsupported is not None:
            return unsupported
        self.get_object()
        document = documents.unapprove_document(self.model, pk, user=request.user)
        log_activity(request.user, 'updated', document, description=f'{document} approval was withdrawn.')
        return self._respond(document)
