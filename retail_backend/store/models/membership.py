# store/models/membership.py

from django.conf import settings
from django.db import models


class StoreMembership(models.Model):
    """
    Grants a (non-superuser) staff account access to one store.
    """

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="store_memberships",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["store", "user"],
                name="uniq_store_membership",
            ),
        ]

    def __str__(self):
        return f"{self.user} @ {self.store}"
