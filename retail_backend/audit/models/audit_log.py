# audit/models/audit_log.py

"""
STORE AUDIT LOG (APPEND-ONLY)

One row per business action (sale created, payment recorded, stock
adjusted, ...). The actor is snapshotted as id + display name so rows stay
readable after the user account is renamed or removed.

Created once. Never updated. Never deleted.
"""

import uuid

from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="audit_logs",
    )

    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    actor_id = models.CharField(max_length=64, blank=True, default="")
    actor_name = models.CharField(max_length=255, blank=True, default="")

    action = models.CharField(max_length=100, db_index=True)
    details = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["store", "timestamp"], name="audit_store_ts_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("AuditLog records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("AuditLog records cannot be deleted")

    def __str__(self):
        return f"{self.action} | {self.actor_name or 'system'}"
