"""
Reconciliation-scoped deduplication of shared networking work.

The host controller calls the provider once per pod, but all pods of a
stretched cluster in one physical cluster share a single headless service and
ServiceExport. The first pod of a pass claims the work; the rest skip it.
"""

from enum import Enum
import logging
import threading
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


class ClaimOutcome(str, Enum):
    """
    Result of a claim attempt.

    Attributes:
        CLAIMED: Caller owns the work for this key in this pass
        ALREADY_CLAIMED: Another caller handled the key in this pass
        ALREADY_EXISTS: The resource already exists in the cluster
    """

    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"
    ALREADY_EXISTS = "already_exists"

    def __str__(self) -> str:
        return self.value


class ReconciliationDeduplicator:
    """
    Process-wide set of keys handled in the current reconciliation pass.

    Clear-if-stale, lookup, existence check and insert run under one lock,
    so at most one caller ever gets CLAIMED per (reconciliation id, key).
    The lock is a threading lock: callers running on an event loop invoke claim_or_skip
    through asyncio.to_thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._keys: Set[str] = set()
        self._reconciliation_id: Optional[str] = None

    @property
    def reconciliation_id(self) -> Optional[str]:
        return self._reconciliation_id

    def claim_or_skip(
        self,
        reconciliation_id: str,
        key: str,
        exists_check: Callable[[], bool]
    ) -> ClaimOutcome:
        """
        Claim the work for `key` in the pass identified by `reconciliation_id`.

        Args:
            reconciliation_id: Identifier of the current control-loop pass
            key: Work key (clusterId/namespace/serviceName)
            exists_check: Checks the live cluster; runs under the lock

        Returns:
            ClaimOutcome
        """
        with self._lock:
            if self._reconciliation_id != reconciliation_id:
                logger.debug(
                    f"[MCS:DEDUP] New reconciliation {reconciliation_id}, clearing "
                    f"{len(self._keys)} keys (was: {self._reconciliation_id})"
                )
                self._keys.clear()
                self._reconciliation_id = reconciliation_id

            if key in self._keys:
                return ClaimOutcome.ALREADY_CLAIMED

            exists = exists_check()
            self._keys.add(key)
            return ClaimOutcome.ALREADY_EXISTS if exists else ClaimOutcome.CLAIMED

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()
            self._reconciliation_id = None
