import logging
import os
from typing import Optional
from urllib.parse import quote_plus, unquote_plus, urlparse, urlunparse

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

log = logging.getLogger(__name__)


def get_engine(url: Optional[str] = None):
    """Create a SQLAlchemy engine. Defaults to in-memory SQLite when url is None."""
    url = normalize_db_url(url or "sqlite:///:memory:")
    return create_engine(url, echo=False, future=True, pool_pre_ping=True)


def normalize_db_url(value: str) -> str:
    """Turn the accepted connection spellings into a SQLAlchemy URL.

    - URLs (containing '://') pass through; credentials are percent-encoded.
    - `server=...;user=...;database=...` strings become mysql+pymysql URLs.
    - Anything that looks like a filesystem path becomes a sqlite URL.
    """
    if not value:
        return value

    if "://" in value:
        parsed = urlparse(value)
        if not (parsed.username or parsed.password):
            return value
        # Unquote first so already-encoded credentials are not encoded twice.
        userinfo = quote_plus(unquote_plus(parsed.username or ""))
        if parsed.password is not None:
            userinfo = f"{userinfo}:{quote_plus(unquote_plus(parsed.password))}"
        hostport = parsed.hostname or ""
        if parsed.port:
            hostport = f"{hostport}:{parsed.port}"
        return urlunparse(parsed._replace(netloc=f"{userinfo}@{hostport}"))

    if "=" in value and ";" in value:
        kv = {}
        for part in value.split(";"):
            if "=" in part:
                k, v = part.split("=", 1)
                kv[k.strip().lower()] = v.strip()
        host = kv.get("server") or kv.get("host")
        user = kv.get("user") or kv.get("uid") or kv.get("username")
        password = kv.get("password") or kv.get("pwd") or ""
        database = kv.get("database") or kv.get("dbname")
        if host and user and database:
            port = f":{kv['port']}" if kv.get("port") else ""
            return f"mysql+pymysql://{quote_plus(user)}:{quote_plus(password)}@{host}{port}/{database}"

    path = value.replace("\\", "/")
    if os.path.exists(path) or "/" in path or path.endswith(".db"):
        return f"sqlite:///{path}"

    return value


def get_sessionmaker(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine):
    """Create all tables using metadata from the models package."""
    # Import models lazily to avoid circular imports at package import time
    from photoindex.models import Base

    Base.metadata.create_all(engine)
    log.debug("database: schema ready (%d tables)", len(Base.metadata.sorted_tables))


class InMemoryAdapter:
    """A throwaway photoindex database with the full schema.

    SQLite keeps a :memory: database on the engine's single pooled
    connection, so every `session()` of one adapter sees the same rows and
    two adapters never share any. `dispose()` drops the database.
    """

    def __init__(self):
        self.engine = get_engine("sqlite:///:memory:")
        self.Session = get_sessionmaker(self.engine)
        init_db(self.engine)

    def session(self):
        return self.Session()

    def dispose(self) -> None:
        self.engine.dispose()
