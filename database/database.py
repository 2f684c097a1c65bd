import contextlib
import logging
from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.config_loader import AppConfig, ServiceDatabaseConfig, SERVICE_NAMES
from database.models import Base, tables_for_service

logger = logging.getLogger(__name__)


def _make_engine(url: str, echo: bool = False):
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        # One shared connection so every session sees the same in-memory database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


class ServiceStore:
    """
    The relational store owned by one service.

    Each service gets its own engine; cross-service consistency only ever
    happens through events.
    """

    def __init__(self, name: str, url: str = "sqlite:///:memory:", echo: bool = False):
        self.name = name
        self.url = url
        self.engine = _make_engine(url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_config(cls, name: str, config: ServiceDatabaseConfig) -> "ServiceStore":
        return cls(name, url=config.url, echo=config.echo)

    def create_schema(self) -> None:
        """Create this service's tables (and its event store table)."""
        Base.metadata.create_all(self.engine, tables=tables_for_service(self.name))
        logger.info(f"Schema ready for {self.name} store")

    def new_session(self) -> Session:
        return self.SessionLocal()

    @contextlib.contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"ServiceStore(name={self.name!r})"


def build_stores(config: Optional[AppConfig] = None, create_schema: bool = True) -> Dict[str, ServiceStore]:
    """Create one store per service from config."""
    config = config or AppConfig()
    stores = {}
    for name in SERVICE_NAMES:
        store = ServiceStore.from_config(name, config.database_for(name))
        if create_schema:
            store.create_schema()
        stores[name] = store
    return stores
