"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from authcore.core.config import AuthSettings, BaseConfig, get_config
from authcore.core.logger import configure_logging, init_app as init_logging
from authcore.infra.crypto.werkzeug_hasher import WerkzeugPasswordHasher
from authcore.infra.jwt.pyjwt_codec import PyJWTCodec
from authcore.services.credentials.service import CredentialService
from authcore.services.identity.service import IdentityService
from authcore.services.tokens.service import TokenRefreshService
from authcore.services.users.service import UserService

EXTENSION_KEY = "authcore"


@dataclass(frozen=True, slots=True)
class ServiceContainer:
    """Process-wide adapters and services built once from :class:`AuthSettings`."""

    settings: AuthSettings
    hasher: WerkzeugPasswordHasher
    tokens: PyJWTCodec
    credentials: CredentialService
    identity: IdentityService
    refresh: TokenRefreshService
    users: UserService


def build_services(settings: AuthSettings) -> ServiceContainer:
    """Instantiate the hasher, the codec and every service that uses them."""
    hasher = WerkzeugPasswordHasher(settings.hash_method, settings.salt_length)
    tokens = PyJWTCodec(settings)
    override = settings.role_override
    return ServiceContainer(
        settings=settings,
        hasher=hasher,
        tokens=tokens,
        credentials=CredentialService(hasher=hasher, tokens=tokens, role_override=override),
        identity=IdentityService(tokens=tokens, role_override=override),
        refresh=TokenRefreshService(tokens=tokens, role_override=override),
        users=UserService(hasher=hasher, role_override=override),
    )


def get_services(app: Flask | None = None) -> ServiceContainer:
    """Return the container registered on ``app`` (default: the current app)."""
    target = app or current_app
    return target.extensions[EXTENSION_KEY]


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises RuntimeError: If the signing secret is unusable (in production,
        also when it is the development placeholder or too short).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    settings = AuthSettings.from_mapping(app.config)
    strict = not (app.config.get("DEBUG") or app.config.get("TESTING"))
    settings.check_secret(strict=strict)
    app.extensions[EXTENSION_KEY] = build_services(settings)

    from authcore.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authcore.api import init_app as init_api

    init_api(app)

    from authcore.core import errors

    errors.init_app(app)

    from authcore import cli as app_cli

    app_cli.init_app(app)

    return app
