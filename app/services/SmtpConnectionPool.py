"""Pooled, rate-limited SMTP connections built on aiosmtplib."""

import asyncio
import logging
import ssl
import time
from collections import deque
from contextlib import asynccontextmanager
from email.message import Message
from typing import AsyncIterator, Callable, Deque, List, Optional

import aiosmtplib

logger = logging.getLogger(__name__)


class _PooledConnection:
    """An open SMTP client and the number of messages it has carried."""

    def __init__(self, client: aiosmtplib.SMTP):
        self.client = client
        self.messages_sent = 0


class SmtpConnectionPool:
    """
    Keeps up to ``max_connections`` authenticated SMTP connections.

    Each connection is recycled after ``max_messages`` messages, and no more
    than ``rate_limit`` messages are handed to the relay per ``rate_delta``
    seconds. Callers wait on the pool when every connection is busy.
    """

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        validate_certs: bool = True,
        max_connections: int = 5,
        max_messages: int = 100,
        rate_limit: int = 5,
        rate_delta: float = 1.0,
        connect_timeout: float = 10.0,
        socket_timeout: float = 15.0,
        smtp_factory: Optional[Callable[[], aiosmtplib.SMTP]] = None,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.validate_certs = validate_certs
        self.max_connections = max_connections
        self.max_messages = max_messages
        self.rate_limit = rate_limit
        self.rate_delta = rate_delta
        self.connect_timeout = connect_timeout
        self.socket_timeout = socket_timeout
        self._smtp_factory = smtp_factory or self._default_smtp

        self._slots = asyncio.Semaphore(max_connections)
        self._idle: List[_PooledConnection] = []
        self._sent_at: Deque[float] = deque()
        self._lock = asyncio.Lock()
        self._rate_lock = asyncio.Lock()

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        if not self.validate_certs:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _default_smtp(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.hostname,
            port=self.port,
            use_tls=self.use_tls,
            timeout=self.socket_timeout,
            tls_context=self._tls_context(),
        )

    async def _open(self) -> aiosmtplib.SMTP:
        """Connect and authenticate a new client."""
        client = self._smtp_factory()
        await client.connect(timeout=self.connect_timeout)
        try:
            if self.username and self.password:
                await client.login(self.username, self.password)
        except BaseException:
            await self._close_client(client)
            raise
        logger.debug(f"Opened SMTP connection to {self.hostname}:{self.port}")
        return client

    @staticmethod
    async def _close_client(client: aiosmtplib.SMTP) -> None:
        if not client.is_connected:
            return
        try:
            await client.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.debug(f"SMTP QUIT failed, closing socket: {e}")
            client.close()

    async def _throttle(self) -> None:
        """Wait until sending one more message stays within the rate limit."""
        async with self._rate_lock:
            while True:
                now = time.monotonic()
                while self._sent_at and now - self._sent_at[0] >= self.rate_delta:
                    self._sent_at.popleft()
                if len(self._sent_at) < self.rate_limit:
                    self._sent_at.append(now)
                    return
                await asyncio.sleep(self.rate_delta - (now - self._sent_at[0]))

    async def _acquire(self) -> _PooledConnection:
        async with self._lock:
            while self._idle:
                pooled = self._idle.pop()
                if pooled.client.is_connected:
                    return pooled
        return _PooledConnection(await self._open())

    async def _release(self, pooled: _PooledConnection, healthy: bool) -> None:
        if healthy and pooled.messages_sent < self.max_messages and pooled.client.is_connected:
            async with self._lock:
                self._idle.append(pooled)
            return
        await self._close_client(pooled.client)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[_PooledConnection]:
        """Borrow a connection; it goes back to the pool unless an error broke it."""
        async with self._slots:
            pooled = await self._acquire()
            healthy = False
            try:
                yield pooled
                healthy = True
            finally:
                await self._release(pooled, healthy)

    async def send_message(self, message: Message) -> str:
        """Hand one message to the relay and return the server response."""
        await self._throttle()
        async with self.connection() as pooled:
            _, response = await pooled.client.send_message(message)
            pooled.messages_sent += 1
            return response

    async def verify(self) -> None:
        """Open, authenticate and close a dedicated connection."""
        client = await self._open()
        await self._close_client(client)

    @property
    def idle_connections(self) -> int:
        return len(self._idle)
