"""Proactive OAuth token renewal.

Entity state is mostly pushed through the webhook, so hours can pass
without an API request that would renew the token on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_call_later, async_track_time_interval

from .const import API_DEFAULTS, TOKEN_WARNING
from .infrastructure import HoneywellError

_LOGGER = logging.getLogger(__name__)


class TokenRefreshScheduler:
    """Refreshes the token shortly after start and then on a fixed period.

    Attributes:
        interval: Seconds between refreshes
        delay: Seconds before the first refresh
    """

    def __init__(
        self,
        hass: HomeAssistant,
        device_provider: Callable[[], Sequence[Any]],
        interval: int = API_DEFAULTS.TOKEN_REFRESH_INTERVAL,
        delay: int = API_DEFAULTS.TOKEN_REFRESH_DELAY,
    ):
        self.hass = hass
        self.interval = interval
        self.delay = delay
        self._device_provider = device_provider
        self._unsub_delay: CALLBACK_TYPE | None = None
        self._unsub_interval: CALLBACK_TYPE | None = None

    @callback
    def async_start(self) -> None:
        """Schedule the first refresh and the periodic ones."""
        self.async_stop()
        self._unsub_delay = async_call_later(self.hass, self.delay, self._async_delayed_refresh)
        self._unsub_interval = async_track_time_interval(
            self.hass, self._async_scheduled_refresh, timedelta(seconds=self.interval)
        )
        _LOGGER.debug("Token refresh scheduled in %ss, then every %ss", self.delay, self.interval)

    @callback
    def async_stop(self) -> None:
        if self._unsub_delay is not None:
            self._unsub_delay()
            self._unsub_delay = None
        if self._unsub_interval is not None:
            self._unsub_interval()
            self._unsub_interval = None

    async def _async_delayed_refresh(self, _now: datetime) -> None:
        self._unsub_delay = None
        await self.async_refresh()

    async def _async_scheduled_refresh(self, _now: datetime) -> None:
        await self.async_refresh()

    async def async_refresh(self) -> bool:
        """Refresh the token through the first known device.

        Returns:
            True if the token was refreshed.
        """
        devices = list(self._device_provider())
        if not devices:
            _LOGGER.debug("No devices found, not refreshing token")
            return False

        for device in devices:
            device.set_warning(None)

        _LOGGER.debug("Automatic token refresh")
        try:
            await devices[0].api.async_refresh_token()
        except HoneywellError as err:
            _LOGGER.error("Failed to refresh token: %s", err)
            for device in devices:
                device.set_warning(TOKEN_WARNING)
            return False

        _LOGGER.info("Token has been refreshed")
        return True
