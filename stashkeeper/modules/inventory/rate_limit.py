"""
Per-player submission cooldown.

The limiter remembers, for each player, when their last accepted
submission started. Entries live for the lifetime of the limiter; nothing
sweeps them. A rejected attempt leaves the stored timestamp alone, so the
cooldown always runs from the last accepted attempt.
"""

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SAVE_COOLDOWN_SECONDS = 5.0


class RateLimiter:
    """
    Cooldown gate keyed by player id.

    Check-and-record is atomic per player: each player has a lock of their
    own, and the shared registry lock is only held long enough to fetch or
    create that per-player lock.

    Usage:
        limiter = RateLimiter()
        if not limiter.check_and_record(player_id, time.time()):
            ...  # still cooling down
    """

    def __init__(self, cooldown: float = SAVE_COOLDOWN_SECONDS):
        self.cooldown = cooldown
        self._last_accepted: Dict[str, float] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, player_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(player_id)
            if lock is None:
                lock = self._locks[player_id] = threading.Lock()
            return lock

    def check_and_record(self, player_id: str, now: float) -> bool:
        """
        Admit a submission if the player is not cooling down.

        Args:
            player_id: Submitting player
            now: Current time in seconds

        Returns:
            True if admitted (and ``now`` recorded), False if rejected
        """
        with self._lock_for(player_id):
            last = self._last_accepted.get(player_id)
            if last is not None and now - last < self.cooldown:
                logger.info(
                    f"Rate limited {player_id}: {now - last:.3f}s since last save "
                    f"(cooldown {self.cooldown}s)"
                )
                return False
            self._last_accepted[player_id] = now
            return True

    def last_accepted(self, player_id: str) -> Optional[float]:
        """Timestamp of the player's last admitted submission, if any."""
        return self._last_accepted.get(player_id)

    def retry_after(self, player_id: str, now: float) -> float:
        """Seconds until the player may submit again (0 if already allowed)."""
        last = self._last_accepted.get(player_id)
        if last is None:
            return 0.0
        return max(0.0, self.cooldown - (now - last))


__all__ = ['RateLimiter', 'SAVE_COOLDOWN_SECONDS']
