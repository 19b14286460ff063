from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, Sequence

from ..core.constants import PUSH_TOKEN_LOG_PREFIX
from ..core.exceptions import InvalidPushTokenError, NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkPushResult:
    success_count: int
    failed_tokens: list[str] = field(default_factory=list)


def mask_token(token: str) -> str:
    return f"{token[:PUSH_TOKEN_LOG_PREFIX]}..."


class NotificationDispatcher(Protocol):
    """Push transport (the device messaging provider)."""

    def send_push(
        self, token: str, title: str, body: str, data: Optional[Mapping[str, str]] = None
    ) -> str:
        """Deliver one message; returns the provider message id.

        Raises InvalidPushTokenError for permanently invalid tokens and
        NotificationError for any other delivery failure.
        """

        raise NotImplementedError

    def send_bulk_push(
        self, tokens: Sequence[str], title: str, body: str, data: Optional[Mapping[str, str]] = None
    ) -> BulkPushResult:
        raise NotImplementedError


class BaseDispatcher:
    """Bulk sending on top of `send_push`, one token failing never aborts the rest."""

    def send_push(self, token, title, body, data=None) -> str:
        raise NotImplementedError

    def send_bulk_push(self, tokens, title, body, data=None) -> BulkPushResult:
        valid = [t.strip() for t in tokens if t and t.strip()]
        if not valid:
            logger.warning("No valid push tokens provided for bulk notification")
            return BulkPushResult(success_count=0, failed_tokens=[])

        failed: list[str] = []
        for token in valid:
            try:
                self.send_push(token, title, body, data)
            except InvalidPushTokenError as e:
                logger.warning("Push failed for token %s: %s", mask_token(token), e)
                failed.append(token)
            except NotificationError as e:
                # Transient failure: the token stays valid.
                logger.warning("Push failed for token %s: %s", mask_token(token), e)

        success = len(valid) - len(failed)
        logger.info("Bulk notification: %s/%s sent", success, len(valid))
        return BulkPushResult(success_count=success, failed_tokens=failed)


class LoggingDispatcher(BaseDispatcher):
    """Default transport: records every message in the application log."""

    def __init__(self):
        self._sent = 0

    def send_push(self, token, title, body, data=None) -> str:
        if not token or not token.strip():
            raise InvalidPushTokenError(token or "", "Push token is missing")
        self._sent += 1
        logger.info("PUSH -> %s | %s | %s | %s", mask_token(token), title, body, dict(data or {}))
        return f"log-{self._sent}"
