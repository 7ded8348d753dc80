# PATH: accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account of this store plays this role?"

Roles are Account.sub_type values (cash, inventory, cogs, ...). Each store
holds at most one account per sub_type (DB constraint), so lookups are
deterministic.

Two entry points:
- find_account / require_account: single lookups
- load_account_map: one query, an immutable snapshot used by a whole
  workflow, so every account a posting needs is known to exist BEFORE the
  workflow writes anything

Design goals:
- deterministic
- store-safe (never returns another store's account)
- hard-fail on missing setup (so we don't post to wrong accounts)
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)


def _missing_message(store, sub_types) -> str:
    names = ", ".join(sorted(sub_types))
    return (
        f"Required system account(s) not configured for store '{store}': {names}. "
        "Run `manage.py seed_store_chart` or create the accounts manually."
    )


def find_account(store, sub_type: str):
    """
    Return the store's account for sub_type, or None.
    """
    sub_type = (sub_type or "").strip()
    if not sub_type:
        return None
    return Account.objects.filter(store=store, sub_type=sub_type).first()


def require_account(store, sub_type: str) -> Account:
    account = find_account(store, sub_type)
    if account is None:
        logger.error(
            "Account resolution failed",
            extra={"store_id": str(getattr(store, "pk", store)), "sub_type": sub_type},
        )
        raise AccountResolutionError(_missing_message(store, [sub_type]))
    return account


class AccountMap:
    """
    Read-only snapshot of one store's chart.

    Built once per workflow; recorders only read from it.
    """

    def __init__(self, store, accounts):
        self.store = store
        by_sub_type = {}
        by_id = {}
        for account in accounts:
            by_id[account.pk] = account
            if account.sub_type:
                by_sub_type[account.sub_type] = account
        self._by_sub_type = MappingProxyType(by_sub_type)
        self._by_id = MappingProxyType(by_id)

    def __contains__(self, sub_type):
        return sub_type in self._by_sub_type

    def get(self, sub_type):
        return self._by_sub_type.get(sub_type)

    def get_by_id(self, account_id):
        return self._by_id.get(account_id)

    def require(self, *sub_types) -> dict:
        """
        Return {sub_type: Account} for every requested sub_type.

        Raises one AccountResolutionError naming every missing sub_type.
        """
        missing = [s for s in sub_types if s not in self._by_sub_type]
        if missing:
            logger.error(
                "Account resolution failed",
                extra={"store_id": str(getattr(self.store, "pk", self.store)), "missing": missing},
            )
            raise AccountResolutionError(_missing_message(self.store, missing))
        return {s: self._by_sub_type[s] for s in sub_types}

    def _override_or_default(self, account_id, default_sub_type):
        if account_id is not None:
            account = self._by_id.get(account_id)
            if account is not None:
                return account
        return self.require(default_sub_type)[default_sub_type]

    def revenue_account_for(self, category) -> Account:
        """
        Category override when set and owned by this store, else sales_revenue.
        """
        account_id = getattr(category, "revenue_account_id", None) if category is not None else None
        return self._override_or_default(account_id, Account.SALES_REVENUE)

    def cogs_account_for(self, category) -> Account:
        account_id = getattr(category, "cogs_account_id", None) if category is not None else None
        return self._override_or_default(account_id, Account.COGS)


def load_account_map(store) -> AccountMap:
    return AccountMap(store, Account.objects.filter(store=store))


def ensure_account_map(store, accounts=None) -> AccountMap:
    """
    Reuse a caller-supplied snapshot, or load a fresh one.
    """
    if accounts is not None:
        return accounts
    return load_account_map(store)
