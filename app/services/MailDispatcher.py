"""Outbound mail for the contact pipeline."""

import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid, parseaddr
from typing import Set

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from app.constants.constants import FailureReason
from app.core.config import Settings
from app.core.exceptions import to_delivery_error
from app.schemas.contactSchema import DispatchOutcome, OutboundMessage
from app.services.SmtpConnectionPool import SmtpConnectionPool

logger = logging.getLogger(__name__)


class MailDispatcher:
    """Sends contact emails through a shared SMTP connection pool."""

    def __init__(
        self,
        pool: SmtpConnectionPool,
        verify_attempts: int = 4,
        verify_backoff: float = 2.0,
    ):
        self.pool = pool
        self.verify_attempts = verify_attempts
        self.verify_backoff = verify_backoff
        self._background: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailDispatcher":
        pool = SmtpConnectionPool(
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            use_tls=settings.SMTP_SECURE,
            validate_certs=settings.IS_PRODUCTION,
            max_connections=settings.SMTP_MAX_CONNECTIONS,
            max_messages=settings.SMTP_MAX_MESSAGES,
            rate_limit=settings.SMTP_RATE_LIMIT,
            rate_delta=settings.SMTP_RATE_DELTA,
            connect_timeout=settings.SMTP_CONNECT_TIMEOUT,
            socket_timeout=settings.SMTP_SOCKET_TIMEOUT,
        )
        return cls(
            pool,
            verify_attempts=settings.SMTP_VERIFY_ATTEMPTS,
            verify_backoff=settings.SMTP_VERIFY_BACKOFF,
        )

    def _log_verify_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Email verification failed, retrying... "
            f"({retry_state.attempt_number}/{self.verify_attempts - 1}): {error}"
        )

    @property
    def in_flight(self) -> int:
        """Sends still running after their caller stopped waiting."""
        return len(self._background)

    async def verify(self) -> None:
        """
        Check that the relay is reachable and accepts the credentials.

        Retries with exponential backoff; the last failure is raised as a
        MailDeliveryError.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.verify_attempts),
            wait=wait_exponential(multiplier=self.verify_backoff, min=self.verify_backoff, max=self.verify_backoff * 8),
            before_sleep=self._log_verify_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self.pool.verify()
        except Exception as e:
            raise to_delivery_error(e) from e
        logger.info(f"✅ SMTP relay {self.pool.hostname}:{self.pool.port} verified")

    @staticmethod
    def build_mime(message: OutboundMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = message.sender
        mime["To"] = message.to
        if message.reply_to:
            mime["Reply-To"] = message.reply_to
        mime["Date"] = formatdate(localtime=True)
        domain = parseaddr(message.sender)[1].rpartition("@")[2] or None
        mime["Message-ID"] = make_msgid(domain=domain)
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    async def send(self, message: OutboundMessage) -> str:
        """
        Submit one message.

        Returns:
            The Message-ID header the relay accepted.

        Raises:
            MailDeliveryError: with the translated failure reason.
        """
        mime = self.build_mime(message)
        try:
            await self.pool.send_message(mime)
        except Exception as e:
            raise to_delivery_error(e) from e
        return mime["Message-ID"]

    def _track(self, task: asyncio.Task, label: str) -> None:
        self._background.add(task)

        def _finished(done: asyncio.Task) -> None:
            self._background.discard(done)
            if done.cancelled():
                logger.warning(f"{label} email send was cancelled")
                return
            error = done.exception()
            if error is not None:
                logger.warning(f"{label} email send failed: {error}")
            else:
                logger.debug(f"{label} email accepted: {done.result()}")

        task.add_done_callback(_finished)

    async def send_contact_pair(
        self,
        owner_message: OutboundMessage,
        user_message: OutboundMessage,
        timeout: float,
    ) -> DispatchOutcome:
        """
        Send the operator and acknowledgment emails concurrently.

        Waits for both to be accepted, for the first failure, or for the
        timeout. Sends still running on timeout are left to finish in the
        background; their result is only logged.
        """
        owner_task = asyncio.create_task(self.send(owner_message))
        user_task = asyncio.create_task(self.send(user_message))
        self._track(owner_task, "Owner")
        self._track(user_task, "User")

        done, pending = await asyncio.wait(
            {owner_task, user_task},
            timeout=timeout,
            return_when=asyncio.FIRST_EXCEPTION,
        )

        for task in (owner_task, user_task):
            if task in done and task.exception() is not None:
                error = to_delivery_error(task.exception())
                return DispatchOutcome.failed(error.reason, error.detail)

        if pending:
            logger.warning(f"Email sending timeout after {timeout}s, {len(pending)} send(s) left running")
            return DispatchOutcome.failed(FailureReason.timeout, "Email sending timeout")

        return DispatchOutcome.delivered(owner_task.result(), user_task.result())

