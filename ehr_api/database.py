# ehr_api/database.py
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Store:
    """
    Handle on the relational store: one engine with a bounded connection pool.

    Built once when the application starts and disposed when it stops. Callers
    queue on the pool when every connection is busy and give up after
    ``pool_timeout`` seconds.
    """

    def __init__(self, settings: Settings):
        url = make_url(settings.database_url)
        self.backend = url.get_backend_name()
        self.query_timeout = settings.db_query_timeout

        connect_args = {}
        if self.backend == "sqlite":
            # file databases only; every pooled connection opens its own handle
            connect_args = {"timeout": settings.db_query_timeout, "check_same_thread": False}
        elif url.get_driver_name() == "mysqlconnector":
            connect_args = {"connection_timeout": settings.db_query_timeout}

        self.engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        event.listen(self.engine, "connect", self._on_connect)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def _on_connect(self, dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            if self.backend == "sqlite":
                cursor.execute("PRAGMA foreign_keys=ON")
            elif self.backend == "mysql":
                cursor.execute(f"SET SESSION max_execution_time = {int(self.query_timeout * 1000)}")
        finally:
            cursor.close()

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        # imported for its side effect of registering the tables on Base
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Store connections released")
