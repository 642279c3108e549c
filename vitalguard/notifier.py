# vitalguard/notifier.py
"""
Push side channel.

The engine only tells a delivery collaborator that something changed for a
patient. Delivery is best-effort and at-most-once: a failing notifier is
logged and never fails the operation that triggered it.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, patient_id: int) -> None: ...


class NullNotifier:
    def notify(self, patient_id: int) -> None:
        pass


class LoggingNotifier:
    """Writes one log line per update; handy until a real transport is wired in."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def notify(self, patient_id: int) -> None:
        self.log.info("patient %s updated", patient_id)


class CallbackNotifier:
    """Adapts a plain callable, e.g. a websocket hub's send function."""

    def __init__(self, callback: Callable[[int], None]):
        self.callback = callback

    def notify(self, patient_id: int) -> None:
        self.callback(patient_id)


def build_notifier(kind: str) -> Notifier:
    """Notifier named by the NOTIFIER config value."""
    kind = (kind or "log").lower()
    if kind == "null":
        return NullNotifier()
    if kind == "log":
        return LoggingNotifier()
    raise ValueError(f"Unknown notifier: {kind}")


def send(notifier: Notifier, patient_id: int) -> bool:
    """Fire one notification; report instead of raise when delivery fails."""
    try:
        notifier.notify(patient_id)
    except Exception:
        logger.exception("notify(%s) failed; update not delivered", patient_id)
        return False
    return True
