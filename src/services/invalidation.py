"""Key-space invalidation helpers for the bookkeeping data caches.

Cache keys follow a colon-separated convention, e.g.
'balances:account:<id>:<period>' or 'transactions:user:<id>:<page>'.
CacheInvalidator knows which key families a domain change touches and
removes them in bulk.
"""

from __future__ import annotations

import logging
from typing import Iterable

from core.errors import ValidationError
from core.interfaces import CacheBackend

logger = logging.getLogger(__name__)


def _require_id(value: str, what: str) -> str:
    s = str(value if value is not None else "").strip()
    if not s:
        raise ValidationError(f"Missing {what}")
    return s


class CacheInvalidator:
    def __init__(self, cache: CacheBackend) -> None:
        self._cache = cache

    def _delete_patterns(self, patterns: Iterable[str]) -> int:
        return sum(self._cache.delete_pattern(p) for p in patterns)

    def invalidate_user(self, user_id: str) -> int:
        uid = _require_id(user_id, "user_id")
        removed = self._delete_patterns(
            (
                f"user:{uid}:*",
                f"transactions:user:{uid}:*",
                f"balances:user:{uid}:*",
            )
        )
        logger.debug("Invalidated %d cache keys for user %s", removed, uid)
        return removed

    def invalidate_account(self, account_id: str) -> int:
        aid = _require_id(account_id, "account_id")
        removed = self._delete_patterns(
            (
                f"account:{aid}:*",
                f"balances:account:{aid}:*",
                f"transactions:account:{aid}:*",
            )
        )
        logger.debug("Invalidated %d cache keys for account %s", removed, aid)
        return removed

    def invalidate_transaction(self, transaction_id: str) -> int:
        tid = _require_id(transaction_id, "transaction_id")
        removed = int(self._cache.delete(f"transaction:{tid}"))
        removed += self._cache.delete_pattern(f"transactions:*:{tid}:*")
        logger.debug("Invalidated %d cache keys for transaction %s", removed, tid)
        return removed

    def invalidate_financial_data(self) -> int:
        removed = self._delete_patterns(("balances:*", "transactions:*", "reports:*"))
        logger.debug("Invalidated %d financial cache keys", removed)
        return removed

    def invalidate_company_data(self, tenant_id: str) -> int:
        """Drop everything cached for one tenant (tagged or keyed by tenant)."""
        tid = _require_id(tenant_id, "tenant_id")
        removed = self._cache.delete_by_tag(tenant_tag(tid))
        removed += self._cache.delete_pattern(f"tenant:{tid}:*")
        logger.debug("Invalidated %d cache keys for tenant %s", removed, tid)
        return removed


def tenant_tag(tenant_id: str) -> str:
    """Tag to attach to entries that belong to a tenant."""
    return f"tenant:{tenant_id}"
