"""OAuth2 HTTP client for the Honeywell Evohome API.

Thin wrapper around Home Assistant's OAuth2Session exposing the four
primitives the API layer needs: ``async_get``, ``async_put``,
``get_token`` and ``async_refresh_token``.
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_entry_oauth2_flow

from .const import API_DEFAULTS, API_URL
from .infrastructure.errors import RemoteRequestError, TokenRefreshError

_LOGGER = logging.getLogger(__name__)


class HoneywellOAuthClient:
    """Authenticated JSON client for one Honeywell account."""

    def __init__(
        self,
        hass: HomeAssistant,
        oauth_session: config_entry_oauth2_flow.OAuth2Session,
        api_url: str = API_URL,
        read_timeout: int = API_DEFAULTS.READ_TIMEOUT,
        write_timeout: int = API_DEFAULTS.WRITE_TIMEOUT,
    ):
        self.hass = hass
        self.api_url = api_url.rstrip("/")
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._oauth_session = oauth_session

    def get_token(self) -> dict[str, Any]:
        """Return the current OAuth token dict (``access_token``, ``expires_at``, ...)."""
        return self._oauth_session.token

    async def async_get(self, path: str, query: dict[str, Any] | None = None) -> Any:
        """GET a path below the API URL and return the decoded JSON."""
        return await self._async_request("GET", path, params=query, timeout=self.read_timeout)

    async def async_put(self, path: str, json: dict[str, Any]) -> Any:
        """PUT a JSON body; returns the decoded JSON response or None when empty."""
        return await self._async_request("PUT", path, json=json, timeout=self.write_timeout)

    async def _async_request(self, method: str, path: str, timeout: int, **kwargs) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = await self._oauth_session.async_request(
                method, url, timeout=aiohttp.ClientTimeout(total=timeout), **kwargs
            )
            async with response:
                if response.status >= 400:
                    body = await response.text()
                    _LOGGER.debug("%s %s failed (%d): %s", method, path, response.status, body)
                    raise RemoteRequestError(method, path, response.status)
                if response.status == 204 or response.content_length == 0:
                    return None
                try:
                    return await response.json(content_type=None)
                except ValueError:
                    return None
        except (TimeoutError, aiohttp.ClientError) as err:
            raise RemoteRequestError(
                method, path, None, f"{method} {path} failed: {type(err).__name__}: {err}"
            ) from err

    async def async_refresh_token(self) -> None:
        """Force a token refresh and persist the new token in the config entry.

        Raises:
            TokenRefreshError: If the token endpoint rejects the refresh.
        """
        session = self._oauth_session
        try:
            new_token = await session.implementation.async_refresh_token(session.token)
        except (TimeoutError, aiohttp.ClientError, HomeAssistantError) as err:
            raise TokenRefreshError(f"Token refresh failed: {err}") from err

        self.hass.config_entries.async_update_entry(
            session.config_entry, data={**session.config_entry.data, "token": new_token}
        )
        _LOGGER.debug("Token refreshed, expires at %s", new_token.get("expires_at"))
