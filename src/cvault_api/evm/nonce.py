"""Nonce allocation for the managed account.

The node's pending transaction count is a lower bound on the next usable
nonce: it lags behind transactions this process has just broadcast, yet it is
the only signal that reveals transactions sent from the same address by
someone else. Reservations therefore take the larger of the two views.

Reservation and the send that consumes the nonce happen inside one
:meth:`NonceSynchronizer.serialized` block, so no two reservations are ever
outstanding for unsent transactions.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


def next_nonce(last_reserved: int | None, observed_pending: int) -> int:
    """Return the nonce to reserve given local and node views."""
    if observed_pending < 0:
        raise ValidationError(
            "Pending transaction count cannot be negative",
            field="observed_pending",
            value=observed_pending,
        )
    if last_reserved is None:
        return observed_pending
    if observed_pending > last_reserved:
        return observed_pending
    return last_reserved + 1


class NonceSynchronizer:
    """Per-account nonce state guarded by a re-entrant lock."""

    def __init__(self, address: str) -> None:
        self._address = address
        self._lock = threading.RLock()
        self._last_reserved: int | None = None
        # Value of _last_reserved before the latest reservation.
        self._before_last: int | None = None

    @property
    def address(self) -> str:
        return self._address

    @property
    def last_reserved(self) -> int | None:
        return self._last_reserved

    @contextmanager
    def serialized(self) -> Iterator[None]:
        """Hold the account lock for a whole reserve-through-send attempt."""
        with self._lock:
            yield

    def reserve_nonce(self, observed_pending: int) -> int:
        with self._lock:
            previous = self._last_reserved
            reserved = next_nonce(previous, observed_pending)
            self._before_last = previous
            self._last_reserved = reserved

        logger.debug(
            "Reserved nonce %d for %s (node pending=%d, previous=%s)",
            reserved,
            self._address,
            observed_pending,
            previous,
        )
        return reserved

    def reset_on_conflict(self) -> None:
        """Forget the local view; the next reservation follows the node."""
        with self._lock:
            previous = self._last_reserved
            self._last_reserved = None
            self._before_last = None

        logger.warning(
            "Reset nonce state for %s after nonce conflict (was %s)", self._address, previous
        )

    def release_unsent(self, nonce: int) -> None:
        """Roll back a reservation the node never accepted.

        Only the latest reservation is rolled back, to the value it replaced.
        Nonces already broadcast stay reserved, so the next attempt reuses
        ``nonce`` even when the node's pending count still lags behind.
        """
        with self._lock:
            if self._last_reserved != nonce:
                return
            self._last_reserved = self._before_last
            self._before_last = None
            restored = self._last_reserved

        logger.info(
            "Released unsent nonce %d for %s (last reserved now %s)",
            nonce,
            self._address,
            restored,
        )
