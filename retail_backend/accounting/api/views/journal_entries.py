# accounting/api/views/journal_entries.py

"""
JOURNAL ENTRIES API

GET  /api/accounting/journal-entries/        list (filter: source_type, source_id)
GET  /api/accounting/journal-entries/<id>/   retrieve with lines
POST /api/accounting/journal-entries/        manual entry

Entries are immutable: no update, no delete.
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.serializers.journal_entries import (
    JournalEntrySerializer,
    ManualJournalEntryInputSerializer,
)
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.manual_entry_service import create_manual_journal_entry
from store.api.mixins import StoreScopedMixin

logger = logging.getLogger(__name__)


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(StoreScopedMixin, ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    http_method_names = ["get", "post", "head", "options"]
    filterset_fields = ["source_type", "source_id"]

    def get_queryset(self):
        return (
            JournalEntry.objects.filter(store=self.get_store())
            .prefetch_related("lines")
            .order_by("-date", "-created_at")
        )

    @extend_schema(request=ManualJournalEntryInputSerializer, responses={201: JournalEntrySerializer})
    def create(self, request, *args, **kwargs):
        serializer = ManualJournalEntryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            entry = create_manual_journal_entry(
                store=self.get_store(),
                actor=self.get_actor(),
                date=data.get("date"),
                description=data["description"],
                lines=[dict(line) for line in data["lines"]],
            )
        except AccountingServiceError as exc:
            logger.warning("Manual journal entry rejected: %s", exc)
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
