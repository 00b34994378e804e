"""Persistence for guestbook messages.

``MessageStore`` wraps an async SQLAlchemy engine (the connection pool) and
runs the two queries the app needs. ``SchemaInitializer`` creates the table at
startup and keeps re-trying on the event loop until the store answers.
"""
import asyncio
import enum
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from guestbook.config import Settings
from guestbook.log import get_logger
from guestbook.models import Base, Message
from guestbook.schemas import MessageOut

logger = get_logger(__name__)

# Errors raised by the store or its drivers; anything else is a bug.
# asyncpg connect timeouts surface unwrapped, and before 3.11 they are not OSError.
STORE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.database_url, echo=settings.db_echo)


class MessageStore:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session = async_sessionmaker(engine, expire_on_commit=False)

    async def ensure_schema(self) -> None:
        """Create the messages table if it is missing. Safe to call repeatedly."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def list_recent(self, limit: int) -> List[MessageOut]:
        """Up to ``limit`` messages, newest first. Store errors propagate."""
        query = (
            select(Message)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        async with self.session() as session:
            result = await session.execute(query)
            return [MessageOut.model_validate(m) for m in result.scalars().all()]

    async def insert(self, name: str, message: str) -> MessageOut:
        """Store one message. Callers must reject empty fields beforehand."""
        new_msg = Message(name=name, message=message)
        async with self.session() as session:
            session.add(new_msg)
            await session.commit()
            await session.refresh(new_msg)
        logger.debug("Stored message %s from %r", new_msg.id, name)
        return MessageOut.model_validate(new_msg)

    async def count(self) -> int:
        async with self.session() as session:
            result = await session.execute(select(func.count()).select_from(Message))
            return result.scalar_one()

    async def dispose(self) -> None:
        await self.engine.dispose()


class SchemaState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    RETRYING = "retrying"
    READY = "ready"
    FAILED = "failed"


@dataclass
class RetryPolicy:
    """How schema initialization is retried.

    ``delay`` is waited before the first retry and multiplied by ``backoff``
    for each retry after that, never exceeding ``max_delay``.
    ``max_attempts=None`` retries until the process is stopped.
    """

    delay: float = 2.0
    backoff: float = 1.0
    max_delay: float = 60.0
    max_attempts: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            delay=settings.retry_delay,
            backoff=settings.retry_backoff,
            max_delay=settings.retry_max_delay,
            max_attempts=settings.retry_max_attempts,
        )

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return min(self.delay * (self.backoff ** (attempt - 1)), self.max_delay)

    def exhausted(self, attempts: int) -> bool:
        return self.max_attempts is not None and attempts >= self.max_attempts


class SchemaInitializer:
    """Runs ``store.ensure_schema()`` until it succeeds.

    Failures are logged, never raised. Each retry is scheduled with
    ``loop.call_later`` so request handling keeps running meanwhile.
    """

    def __init__(self, store, policy: Optional[RetryPolicy] = None):
        self.store = store
        self.policy = policy or RetryPolicy()
        self.state = SchemaState.UNINITIALIZED
        self.attempts = 0
        self._settled = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    def start(self) -> None:
        """Kick off the first attempt. Must be called from a running loop."""
        if self._task is not None or self.state is not SchemaState.UNINITIALIZED:
            return
        self._spawn()

    def _spawn(self) -> None:
        self._timer = None
        self._task = asyncio.get_running_loop().create_task(self._attempt())

    async def _attempt(self) -> None:
        self.attempts += 1
        try:
            await self.store.ensure_schema()
        except STORE_ERRORS:
            if self.policy.exhausted(self.attempts):
                self.state = SchemaState.FAILED
                logger.exception(
                    "Error initializing database (attempt %d), giving up", self.attempts
                )
                self._settled.set()
                return
            delay = self.policy.delay_after(self.attempts)
            self.state = SchemaState.RETRYING
            logger.exception(
                "Error initializing database (attempt %d), retrying in %.1fs",
                self.attempts,
                delay,
            )
            self._timer = asyncio.get_running_loop().call_later(delay, self._spawn)
            return
        self.state = SchemaState.READY
        logger.info("Database initialized successfully")
        self._settled.set()

    async def wait(self) -> SchemaState:
        """Block until the schema is ready or retries are exhausted."""
        await self._settled.wait()
        return self.state

    async def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
