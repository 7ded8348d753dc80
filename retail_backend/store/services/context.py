# store/services/context.py

"""
PATH: store/services/context.py

REQUEST CONTEXT RESOLUTION (TENANT + ACTOR)

RESPONSIBILITIES:
- Resolve the store a request operates on (X-Store-Id header, or
  ?store_id= as a fallback)
- Decide whether the authenticated user may act for that store
- Build the Actor snapshot written into audit rows

ACCESS RULE:
- superusers may act for any active store
- everyone else needs an active StoreMembership row

CACHING:
- access decisions are cached in the Django cache under
  "store-access:<store_id>:<user_id>" for STORE_CONTEXT_CACHE_TTL seconds
- revoking a membership takes effect once the entry expires, or
  immediately via invalidate_store_access()

THIS MODULE DOES NOT:
- authenticate users (DRF / simplejwt does that)
- enforce roles
"""

import logging
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.core.cache import cache

from store.models import Store, StoreMembership

logger = logging.getLogger(__name__)

STORE_HEADER = "HTTP_X_STORE_ID"
DEFAULT_CACHE_TTL = 300


class StoreContextError(Exception):
    """Raised when the request does not name a store the user may act for."""


@dataclass(frozen=True)
class Actor:
    id: str
    name: str


def _cache_ttl() -> int:
    return int(getattr(settings, "STORE_CONTEXT_CACHE_TTL", DEFAULT_CACHE_TTL))


def _access_cache_key(store_id, user_id) -> str:
    return f"store-access:{store_id}:{user_id}"


def actor_from_user(user) -> Actor:
    if user is None or not getattr(user, "is_authenticated", False):
        return Actor(id="", name="system")

    full_name = ""
    get_full_name = getattr(user, "get_full_name", None)
    if callable(get_full_name):
        full_name = (get_full_name() or "").strip()

    name = full_name or getattr(user, "username", "") or getattr(user, "email", "") or str(user.pk)
    return Actor(id=str(user.pk), name=name)


def _parse_store_id(request):
    raw = (request.META.get(STORE_HEADER) or "").strip()
    if not raw:
        raw = (getattr(request, "query_params", request.GET).get("store_id") or "").strip()
    if not raw:
        raise StoreContextError("X-Store-Id header is required.")

    try:
        return uuid.UUID(raw)
    except ValueError as exc:
        raise StoreContextError("X-Store-Id is not a valid store id.") from exc


def user_can_access_store(user, store_id) -> bool:
    if user is None or not getattr(user, "is_authenticated", False):
        return False

    key = _access_cache_key(store_id, user.pk)
    cached = cache.get(key)
    if cached is not None:
        return bool(cached)

    if getattr(user, "is_superuser", False):
        allowed = Store.objects.filter(id=store_id, is_active=True).exists()
    else:
        allowed = StoreMembership.objects.filter(
            store_id=store_id,
            store__is_active=True,
            user_id=user.pk,
            is_active=True,
        ).exists()

    cache.set(key, allowed, _cache_ttl())
    return allowed


def invalidate_store_access(store_id, user_id) -> None:
    cache.delete(_access_cache_key(store_id, user_id))


def resolve_request_store(request) -> Store:
    store_id = _parse_store_id(request)
    user = getattr(request, "user", None)

    if not user_can_access_store(user, store_id):
        logger.warning(
            "Store access denied",
            extra={"store_id": str(store_id), "user_id": getattr(user, "pk", None)},
        )
        raise StoreContextError("You do not have access to this store.")

    try:
        return Store.objects.get(id=store_id, is_active=True)
    except Store.DoesNotExist as exc:
        invalidate_store_access(store_id, getattr(user, "pk", None))
        raise StoreContextError("Store not found or inactive.") from exc
