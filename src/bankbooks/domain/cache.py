"""Per-company lookup cache for rules and account IDs.

The cache belongs to whoever creates it (normally one service instance).
Registering it with the database lets the repository drop a company's
entries whenever its rules or accounts are written.
"""

import logging
from typing import Callable, Optional

from bankbooks.domain.entities import ClassificationRule

logger = logging.getLogger(__name__)


class LookupCache:
    """Caches rule lists and account-code to ID maps per company."""

    def __init__(self):
        self._rules: dict[int, list[ClassificationRule]] = {}
        self._account_ids: dict[int, dict[str, int]] = {}

    def rules_for(
        self, company_id: int, loader: Callable[[int], list[ClassificationRule]]
    ) -> list[ClassificationRule]:
        """Return the company's rules, loading them on first use."""
        if company_id not in self._rules:
            self._rules[company_id] = list(loader(company_id))
            logger.debug("Loaded %s rules for company %s", len(self._rules[company_id]), company_id)
        return self._rules[company_id]

    def account_id_for(
        self, company_id: int, code: str, loader: Callable[[int, str], Optional[int]]
    ) -> Optional[int]:
        """Return the ID of an account code. Misses are not cached."""
        ids = self._account_ids.setdefault(company_id, {})
        if code not in ids:
            account_id = loader(company_id, code)
            if account_id is None:
                return None
            ids[code] = account_id
        return ids[code]

    def invalidate_rules(self, company_id: Optional[int] = None) -> None:
        if company_id is None:
            self._rules.clear()
        else:
            self._rules.pop(company_id, None)

    def invalidate_accounts(self, company_id: Optional[int] = None) -> None:
        if company_id is None:
            self._account_ids.clear()
        else:
            self._account_ids.pop(company_id, None)

    def clear(self) -> None:
        self.invalidate_rules()
        self.invalidate_accounts()
