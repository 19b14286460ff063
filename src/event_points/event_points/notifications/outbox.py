from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..core.exceptions import NotificationError
from .dispatcher import NotificationDispatcher, mask_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushMessage:
    token: str
    title: str
    body: str
    data: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BulkPushMessage:
    tokens: tuple[str, ...]
    title: str
    body: str
    data: dict[str, str] = field(default_factory=dict)


class NotificationOutbox:
    """Push messages collected during a transaction.

    Flush only after the transaction committed: delivery failures are logged
    and never propagate, so they cannot undo committed state.
    """

    def __init__(self):
        self._pending: list[PushMessage | BulkPushMessage] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, token: Optional[str], title: str, body: str, data: Optional[dict] = None) -> None:
        if token:
            self._pending.append(PushMessage(token=token, title=title, body=body, data=dict(data or {})))

    def add_bulk(self, tokens, title: str, body: str, data: Optional[dict] = None) -> None:
        tokens = tuple(t for t in tokens if t)
        if tokens:
            self._pending.append(BulkPushMessage(tokens=tokens, title=title, body=body, data=dict(data or {})))

    def flush(self, dispatcher: NotificationDispatcher) -> int:
        """Dispatch everything pending; returns how many messages were accepted."""
        pending, self._pending = self._pending, []
        delivered = 0
        for message in pending:
            try:
                if isinstance(message, BulkPushMessage):
                    result = dispatcher.send_bulk_push(list(message.tokens), message.title, message.body, message.data)
                    delivered += result.success_count
                else:
                    dispatcher.send_push(message.token, message.title, message.body, message.data)
                    delivered += 1
            except NotificationError as e:
                logger.warning("Notification to %s not delivered: %s", _target(message), e)
            except Exception:
                logger.exception("Notification dispatcher failed for %s", _target(message))
        return delivered


def _target(message) -> str:
    if isinstance(message, BulkPushMessage):
        return f"{len(message.tokens)} tokens"
    return mask_token(message.token)
