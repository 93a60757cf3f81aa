# backend/client/queries.py
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional, Tuple

from backend.client.api_client import ApiError, FinanzasClient

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


@dataclass(frozen=True)
class MutationRule:
    """After ``mutation`` succeeds, every query key starting with one of ``invalidates`` is refetched."""

    mutation: str
    invalidates: Tuple[str, ...]


MUTATION_RULES: Dict[str, MutationRule] = {
    rule.mutation: rule
    for rule in (
        MutationRule("create_transaction", ("transactions", "profile", "reports")),
        MutationRule("update_user", ("users",)),
        MutationRule("update_profile", ("profile", "users", "transactions")),
    )
}


class QueryCache:
    def __init__(self):
        self._data: Dict[QueryKey, Any] = {}
        self._fetchers: Dict[QueryKey, Callable[[], Any]] = {}

    def fetch(self, key: QueryKey, fetcher: Callable[[], Any]) -> Any:
        self._fetchers[key] = fetcher
        if key not in self._data:
            self._data[key] = fetcher()
        return self._data[key]

    def peek(self, key: QueryKey) -> Optional[Any]:
        return self._data.get(key)

    def invalidate(self, prefix: str) -> None:
        """
        Drop every entry under ``prefix`` and refetch the ones that have been
        read before. A key whose refetch fails stays dropped, so the next read
        tries again.
        """
        for key in [k for k in self._fetchers if k[0] == prefix]:
            self._data.pop(key, None)
            logger.debug("Refetching %s", key)
            try:
                self._data[key] = self._fetchers[key]()
            except ApiError as exc:
                logger.warning("Refetch of %s failed: %s", key, exc.message)


class DataLayer:
    """Cached queries plus mutations that invalidate according to MUTATION_RULES."""

    def __init__(self, client: FinanzasClient, cache: Optional[QueryCache] = None,
                 rules: Optional[Dict[str, MutationRule]] = None):
        self.client = client
        self.cache = cache if cache is not None else QueryCache()
        self.rules = rules if rules is not None else MUTATION_RULES

    # ---------- queries ----------
    def transactions(self):
        return self.cache.fetch(("transactions",), self.client.list_transactions)

    def users(self):
        return self.cache.fetch(("users",), self.client.list_users)

    def profile(self):
        return self.cache.fetch(("profile",), self.client.get_profile)

    def report(self, desde: Optional[date] = None, hasta: Optional[date] = None):
        key = ("reports", desde, hasta)
        return self.cache.fetch(key, lambda: self.client.get_report(desde, hasta))

    # ---------- mutations ----------
    def _mutate(self, name: str, call: Callable[[], Any]) -> Any:
        # an ApiError leaves the cache exactly as it was
        result = call()
        for prefix in self.rules[name].invalidates:
            self.cache.invalidate(prefix)
        return result

    def create_transaction(self, concepto: str, monto: float, fecha) -> Any:
        return self._mutate("create_transaction", lambda: self.client.create_transaction(concepto, monto, fecha))

    def update_user(self, user_id: str, name: str, role: str) -> Any:
        return self._mutate("update_user", lambda: self.client.update_user(user_id, name, role))

    def update_profile(self, name: str, email: str) -> Any:
        return self._mutate("update_profile", lambda: self.client.update_profile(name, email))
