"""Change notifications published after a batch operation succeeded."""
from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget sink; return values are ignored."""

    def entities_archived(self, kind: str, uids: list[str]) -> None: ...

    def entities_restored(self, kind: str, uids: list[str]) -> None: ...

    def entities_updated(self, kind: str, uids: list[str]) -> None: ...

    def entities_deleted(self, kind: str, uids: list[str]) -> None: ...


class LogNotifier:
    """Writes one log line per event. Used when no other notifier is wired in."""

    def _publish(self, event: str, kind: str, uids: list[str]) -> None:
        log.info("%s.%s: %d item(s) %s", kind, event, len(uids), ", ".join(uids))

    def entities_archived(self, kind: str, uids: list[str]) -> None:
        self._publish("archived", kind, uids)

    def entities_restored(self, kind: str, uids: list[str]) -> None:
        self._publish("restored", kind, uids)

    def entities_updated(self, kind: str, uids: list[str]) -> None:
        self._publish("updated", kind, uids)

    def entities_deleted(self, kind: str, uids: list[str]) -> None:
        self._publish("deleted", kind, uids)
