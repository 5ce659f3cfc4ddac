"""Outbound push / e-mail delivery adapters."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class PushSender(Protocol):
    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[dict[str, str]] = None,
    ) -> None: ...


class LoggingPushSender:
    """Default sender: records the push in the application log."""

    async def send(self, token, title, body, data=None) -> None:
        logger.info("Push to %s...: %s", token[:8], title)


class OtpMailer(Protocol):
    async def send_otp(self, email: str, code: str) -> None: ...


class LoggingOtpMailer:
    def __init__(self, reveal_code: bool = False):
        self.reveal_code = reveal_code

    async def send_otp(self, email: str, code: str) -> None:
        if self.reveal_code:
            logger.info("Admin OTP for %s: %s", email, code)
        else:
            logger.info("Admin OTP issued for %s", email)
