"""MySQL connection setup driven by a YAML configuration file."""

from dataclasses import dataclass
from pathlib import Path

import yaml
from sqlalchemy import create_engine
from sqlalchemy.engine import URL

TABLE_PREFIX = "zht_"
CONFIG_NAME = "db"
CONFIG_EXTENSIONS = ("yaml", "yml")
CONNECTION_MAX_LIFETIME = 30
MAX_IDLE_CONNECTIONS = 30
CONNECT_TIMEOUT = 5


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings read from the ``database.dev`` section."""

    username: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    dbname: str = ""

    def url(self):
        """Return the SQLAlchemy URL for a MySQL connection through PyMySQL."""
        port = self.port.strip()
        return URL.create(
            "mysql+pymysql",
            username=self.username or None,
            password=self.password or None,
            host=self.host or None,
            port=int(port) if port else None,
            database=self.dbname or None,
            query={"charset": "utf8mb4"},
        )


def _find_config(config_dir):
    directory = Path(config_dir)
    for extension in CONFIG_EXTENSIONS:
        candidate = directory / f"{CONFIG_NAME}.{extension}"
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"Database config not found in {directory}")


def _as_text(value):
    return "" if value is None else str(value)


def load_config(config_dir="config"):
    """Read ``db.yaml`` (or ``db.yml``) from ``config_dir``.

    Missing keys read as empty strings; a missing file raises FileNotFoundError
    and a malformed one raises ValueError.
    """
    path = _find_config(config_dir)
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid database config {path}: {exc}") from exc
    section = document
    for key in ("database", "dev"):
        section = section.get(key) if isinstance(section, dict) else None
    if not isinstance(section, dict):
        section = {}
    return DatabaseConfig(
        username=_as_text(section.get("username")),
        password=_as_text(section.get("password")),
        host=_as_text(section.get("host")),
        port=_as_text(section.get("port")),
        dbname=_as_text(section.get("dbname")),
    )


class Database:
    """An open connection pool; use as a context manager to close it."""

    def __init__(self, engine):
        self.engine = engine
        self._closed = False

    @classmethod
    def open(cls, config_dir="config"):
        """Load the configuration, build the pool and check that the server answers."""
        config = load_config(config_dir)
        engine = create_engine(
            config.url(),
            pool_recycle=CONNECTION_MAX_LIFETIME,
            pool_size=MAX_IDLE_CONNECTIONS,
            connect_args={"connect_timeout": CONNECT_TIMEOUT},
        )
        try:
            with engine.connect():
                pass
        except Exception:
            engine.dispose()
            raise
        return cls(engine)

    @property
    def closed(self):
        return self._closed

    def close(self):
        """Release every pooled connection."""
        self.engine.dispose()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()