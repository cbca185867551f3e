"""Thin HTTP client for the authentication endpoints."""

from __future__ import annotations

from typing import Any

import requests


class ApiError(Exception):
    """
    Non-2xx answer (or transport failure) from the API.

    :param status: HTTP status, ``0`` when no response was received.
    :param message: Server-provided message when available.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class AuthApiClient:
    """
    Calls ``/auth/*`` and unwraps the ``{"data": ...}`` envelope.

    :param base_url: API root including the version, e.g.
        ``https://api.example.com/api/v1``.
    :param session: Optional :class:`requests.Session` to reuse connections.
    :param timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def login(self, email: str, password: str) -> dict[str, Any]:
        return self._request("POST", "/auth/login", json={"email": email, "password": password})

    def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        body = {"name": name, "email": email, "password": password}
        return self._request("POST", "/auth/register", json=body)

    def refresh(self, refresh_token: str) -> dict[str, Any]:
        return self._request("POST", "/auth/refresh", json={"refreshToken": refresh_token})

    def me(self, access_token: str) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {access_token}"}
        return self._request("GET", "/auth/me", headers=headers)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self.session.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise ApiError(0, "Network error") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if not resp.ok:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise ApiError(resp.status_code, message or resp.reason or "Request failed")

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ApiError(resp.status_code, "Malformed response")
        return data
