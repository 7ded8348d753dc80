# store/api/mixins.py

from rest_framework.exceptions import PermissionDenied

from store.services.context import (
    StoreContextError,
    actor_from_user,
    resolve_request_store,
)


class StoreScopedMixin:
    """
    Resolves request.store / actor once per request for store-scoped views.
    """

    _store = None

    def get_store(self):
        if self._store is None:
            try:
                self._store = resolve_request_store(self.request)
            except StoreContextError as exc:
                raise PermissionDenied(str(exc)) from exc
        return self._store

    def get_actor(self):
        return actor_from_user(getattr(self.request, "user", None))
