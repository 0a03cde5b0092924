"""
Free-usage gate consulted before an analysis is started.
"""
import json
import logging
import os
import threading

logger = logging.getLogger(__name__)


class UsageGate:
    """
    Tracks a monotonically increasing free-usage counter plus a subscription
    flag, persisted as {"free_usage_count": int, "subscribed": bool}.
    """

    def __init__(self, path: str, max_free_usage: int = 1):
        """
        Args:
            path: JSON file holding the counter.
            max_free_usage: Analyses allowed without a subscription.
        """
        self.path = path
        self.max_free_usage = max_free_usage
        self.free_usage_count = 0
        self.subscribed = False
        self._reserved = 0
        self._lock = threading.Lock()
        self._load()

    def can_analyze(self) -> bool:
        """True when subscribed or free analyses remain."""
        if self.subscribed:
            return True
        return self.free_usage_count + self._reserved < self.max_free_usage

    def remaining_free_usage(self) -> int:
        return max(0, self.max_free_usage - self.free_usage_count - self._reserved)

    def reserve(self) -> bool:
        """
        Check and hold one free analysis in a single step.

        A held analysis counts against the limit until commit() or release(),
        so two concurrent requests can't both take the last one.

        Returns:
            False when the limit is reached, True otherwise (always for subscribers).
        """
        with self._lock:
            if self.subscribed:
                return True
            if self.free_usage_count + self._reserved >= self.max_free_usage:
                return False
            self._reserved += 1
            return True

    def commit(self) -> None:
        """Turn a held analysis into a recorded one."""
        with self._lock:
            if self._reserved == 0:
                return
            self._reserved -= 1
            self.free_usage_count += 1
            self._save()
        logger.info(f"Free usage recorded: {self.free_usage_count}/{self.max_free_usage}")

    def release(self) -> None:
        """Give back a held analysis after a failed run."""
        with self._lock:
            if self._reserved > 0:
                self._reserved -= 1

    def record_usage(self) -> None:
        """Consume one free analysis. Subscribed users are not counted."""
        if self.subscribed:
            return
        with self._lock:
            self.free_usage_count += 1
            self._save()
        logger.info(f"Free usage recorded: {self.free_usage_count}/{self.max_free_usage}")

    def set_subscribed(self, subscribed: bool) -> None:
        with self._lock:
            self.subscribed = subscribed
            self._save()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.free_usage_count = int(data.get('free_usage_count', 0))
            self.subscribed = bool(data.get('subscribed', False))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load usage state from {self.path}: {e}")

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'free_usage_count': self.free_usage_count, 'subscribed': self.subscribed}, f)
