from dataclasses import dataclass
from os import environ

from microlearn.infrastructure.log.main import LoggingLevel

LOGGING_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class MissingDatabaseConfigError(ValueError):

    @property
    def title(self) -> str:
        return "Required MongoDB environment variables are missing"


@dataclass(frozen=True)
class MongoDBConfig:
    host: str
    port: int
    user: str
    password: str
    db_name: str

    @property
    def uri(self) -> str:
        return (
            f"mongodb://{self.user}:{self.password}@{self.host}"
            f":{self.port}/"
        )


@dataclass(frozen=True)
class WatiConfig:
    base_url: str | None = None
    api_key: str | None = None
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.base_url and self.api_key)


@dataclass(frozen=True)
class AuthConfig:
    session_ttl_seconds: int = 86400
    superadmin_email: str | None = None
    superadmin_password: str | None = None
    superadmin_name: str = "Super Admin"

    @property
    def has_superadmin(self) -> bool:
        return bool(self.superadmin_email and self.superadmin_password)


def load_database_config() -> MongoDBConfig:
    host = environ.get("MONGO_HOST")
    port = environ.get("MONGO_PORT")
    user = environ.get("MONGO_INITDB_ROOT_USERNAME")
    password = environ.get("MONGO_INITDB_ROOT_PASSWORD")
    db_name = environ.get("MONGO_DB_NAME")

    if (
            host is None
            or port is None
            or user is None
            or password is None
            or db_name is None
    ):
        raise MissingDatabaseConfigError

    return MongoDBConfig(
        host=host,
        port=int(port),
        user=user,
        password=password,
        db_name=db_name,
    )


def load_wati_config() -> WatiConfig:
    return WatiConfig(
        base_url=environ.get("WATI_BASE_URL") or None,
        api_key=environ.get("WATI_API_KEY") or None,
        timeout=float(environ.get("WATI_TIMEOUT", "10")),
    )


def load_auth_config() -> AuthConfig:
    return AuthConfig(
        session_ttl_seconds=int(environ.get("SESSION_TTL_SECONDS", "86400")),
        superadmin_email=environ.get("SUPERADMIN_EMAIL") or None,
        superadmin_password=environ.get("SUPERADMIN_PASSWORD") or None,
        superadmin_name=environ.get("SUPERADMIN_NAME", "Super Admin"),
    )


def load_log_level() -> LoggingLevel:
    level = environ.get("LOG_LEVEL", "INFO").upper()
    if level not in LOGGING_LEVELS:
        return "INFO"
    return level  # type: ignore[return-value]


@dataclass(frozen=True)
class Config:
    database: MongoDBConfig
    wati: WatiConfig
    auth: AuthConfig
    log_level: LoggingLevel = "INFO"


def load_settings() -> Config:
    return Config(
        database=load_database_config(),
        wati=load_wati_config(),
        auth=load_auth_config(),
        log_level=load_log_level(),
    )
