from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """Body of ``POST /auth/refresh``; ``refresh_token`` may be ``None`` when the key was absent."""

    refresh_token: str | None
