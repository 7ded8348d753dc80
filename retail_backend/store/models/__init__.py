# store/models/__init__.py

from store.models.membership import StoreMembership
from store.models.store import Store

__all__ = ["Store", "StoreMembership"]
