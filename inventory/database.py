import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Callable, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from inventory.core import config


Base = declarative_base()

T = TypeVar("T")


def create_db_engine(
    url: str = config.DATABASE_URL,
    max_size: int = config.DB_POOL_MAX_SIZE,
    min_idle: int = config.DB_POOL_MIN_IDLE,
    timeout: int = config.DB_POOL_TIMEOUT_SECONDS,
) -> Engine:
    """Build a pooled engine; checking out past ``max_size`` waits ``timeout`` seconds then fails."""
    connect_args = {}
    if url.startswith("sqlite"):
        # Pooled connections are handed between worker threads.
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        pool_size=min_idle,
        max_overflow=max(max_size - min_idle, 0),
        pool_timeout=timeout,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


class InventoryDB:
    """Runs database work on a dedicated, bounded thread pool.

    ``query`` and ``transaction`` return futures so the caller decides whether to
    block (``future.result()``) or await (``run`` / ``run_transaction``). Submitted
    work is never cancelled once it has started.
    """

    def __init__(self, engine: Engine, max_workers: int = config.DB_WORKERS):
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inventory-db")
        self._schema_lock = Lock()
        self._schema_created = False

    def query(self, function: Callable[[Session], T]) -> "Future[T]":
        return self._executor.submit(self._with_session, function)

    def transaction(self, function: Callable[[Session], T]) -> "Future[T]":
        return self._executor.submit(self._with_transaction, function)

    async def run(self, function: Callable[[Session], T]) -> T:
        return await asyncio.wrap_future(self.query(function))

    async def run_transaction(self, function: Callable[[Session], T]) -> T:
        return await asyncio.wrap_future(self.transaction(function))

    def _with_session(self, function: Callable[[Session], T]) -> T:
        with self.session_factory() as session:
            return function(session)

    def _with_transaction(self, function: Callable[[Session], T]) -> T:
        with self.session_factory() as session:
            with session.begin():
                return function(session)

    def create_schema(self) -> None:
        if self._schema_created:
            return

        with self._schema_lock:
            if self._schema_created:
                return

            # Tables register themselves on Base when their models are imported.
            from inventory.models import administrator, locked_user, schema_version, user  # noqa: F401

            Base.metadata.create_all(bind=self.engine)
            self._schema_created = True

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
        self.engine.dispose()
