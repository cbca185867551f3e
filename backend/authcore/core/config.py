"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRET: Final[str] = "CHANGE_ME_JWT_SECRET_KEY_FOR_LOCAL_DEVELOPMENT"
MIN_SECRET_LENGTH: Final[int] = 32

# No-op when .env is absent
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Symmetric key used to sign and verify access/refresh tokens.
    JWT_ALGORITHM: str
        HMAC algorithm for token signatures.
    JWT_ISSUER, JWT_AUDIENCE: str
        Claims every token is bound to; verification rejects mismatches.
    JWT_ACCESS_EXPIRES, JWT_REFRESH_EXPIRES: int
        Token lifetimes in seconds.
    JWT_LEEWAY: int
        Clock skew tolerance in seconds applied to expiry checks (``0``).
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method string including its work factor.
    PASSWORD_SALT_LENGTH: int
        Random salt length for password hashes.
    AUTH_ROLE_OVERRIDE: bool
        Whether the ``admin`` role bypasses resource ownership checks.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "stack-api")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "stack-client")
    JWT_ACCESS_EXPIRES = env_int("JWT_ACCESS_EXPIRES", 60 * 60)
    JWT_REFRESH_EXPIRES = env_int("JWT_REFRESH_EXPIRES", 7 * 24 * 60 * 60)
    JWT_LEEWAY = env_int("JWT_LEEWAY", 0)

    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")
    PASSWORD_SALT_LENGTH = env_int("PASSWORD_SALT_LENGTH", 16)
    AUTH_ROLE_OVERRIDE = env_bool("AUTH_ROLE_OVERRIDE", True)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the password work factor so the suite stays fast.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-secret-key-with-at-least-32-characters"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Process-wide authentication settings, frozen at startup.

    :param secret: Symmetric signing secret.
    :param issuer: ``iss`` claim stamped on and required from every token.
    :param audience: ``aud`` claim stamped on and required from every token.
    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    :param algorithm: JWS algorithm.
    :param leeway: Clock skew tolerance for expiry checks.
    :param hash_method: Werkzeug password hashing method.
    :param salt_length: Password salt length.
    :param role_override: Whether admins bypass ownership checks.
    """

    secret: str
    issuer: str = "stack-api"
    audience: str = "stack-client"
    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    leeway: timedelta = timedelta(0)
    hash_method: str = "scrypt:32768:8:1"
    salt_length: int = 16
    role_override: bool = True

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """Build settings from a Flask-style config mapping."""
        return cls(
            secret=str(config["JWT_SECRET_KEY"]),
            issuer=str(config.get("JWT_ISSUER", "stack-api")),
            audience=str(config.get("JWT_AUDIENCE", "stack-client")),
            access_expires=timedelta(seconds=int(config.get("JWT_ACCESS_EXPIRES", 3600))),
            refresh_expires=timedelta(seconds=int(config.get("JWT_REFRESH_EXPIRES", 604800))),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            leeway=timedelta(seconds=int(config.get("JWT_LEEWAY", 0))),
            hash_method=str(config.get("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")),
            salt_length=int(config.get("PASSWORD_SALT_LENGTH", 16)),
            role_override=bool(config.get("AUTH_ROLE_OVERRIDE", True)),
        )

    def check_secret(self, *, strict: bool) -> None:
        """
        Validate the signing secret.

        :param strict: When ``True`` (production) the placeholder is refused too.
        :raises RuntimeError: If the secret is unusable.
        """
        if not self.secret:
            raise RuntimeError("JWT_SECRET_KEY must be set.")
        if strict and self.secret == PLACEHOLDER_SECRET:
            raise RuntimeError("JWT_SECRET_KEY still holds the development placeholder.")
        if strict and len(self.secret) < MIN_SECRET_LENGTH:
            raise RuntimeError(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters.")
