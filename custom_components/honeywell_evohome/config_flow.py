import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
import voluptuous as vol
from homeassistant.config_entries import SOURCE_REAUTH, ConfigEntry, OptionsFlow
from homeassistant.core import callback
from homeassistant.helpers import config_entry_oauth2_flow
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    API_DEFAULTS,
    API_URL,
    CONF_CACHE_TTL,
    CONF_TEMP_ROUNDING_MODE,
    DOMAIN,
    OAUTH_SCOPES,
    TemperatureRoundingMode,
)


class HoneywellOAuth2FlowHandler(config_entry_oauth2_flow.AbstractOAuth2FlowHandler, domain=DOMAIN):
    """Config flow linking a Honeywell (Resideo) account."""

    DOMAIN = DOMAIN
    VERSION = 1

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(__name__)

    @property
    def extra_authorize_data(self) -> dict[str, Any]:
        return {"scope": " ".join(OAUTH_SCOPES)}

    async def async_oauth_create_entry(self, data: dict[str, Any]):
        session = async_get_clientsession(self.hass)
        try:
            async with session.get(
                f"{API_URL}/userAccount",
                headers={"Authorization": f"Bearer {data['token']['access_token']}"},
                timeout=aiohttp.ClientTimeout(total=API_DEFAULTS.READ_TIMEOUT),
            ) as resp:
                resp.raise_for_status()
                user = await resp.json(content_type=None)
        except (TimeoutError, aiohttp.ClientError):
            self.logger.exception("Could not retrieve the Honeywell user account")
            return self.async_abort(reason="cannot_connect")

        user_id = str(user["userId"])
        await self.async_set_unique_id(user_id)

        if self.source == SOURCE_REAUTH:
            self._abort_if_unique_id_mismatch(reason="wrong_account")
            return self.async_update_reload_and_abort(self._get_reauth_entry(), data_updates=data)

        self._abort_if_unique_id_configured()
        return self.async_create_entry(title=user.get("username") or f"Honeywell {user_id}", data=data)

    async def async_step_reauth(self, entry_data: Mapping[str, Any]):
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(self, user_input=None):
        if user_input is None:
            return self.async_show_form(step_id="reauth_confirm")
        return await self.async_step_user()

    @staticmethod
    @callback
    def async_get_options_flow(entry: ConfigEntry):
        return HoneywellOptionsFlow(entry)


class HoneywellOptionsFlow(OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_CACHE_TTL,
                        default=self.entry.options.get(CONF_CACHE_TTL, API_DEFAULTS.CACHE_TTL),
                    ): vol.All(vol.Coerce(float), vol.Range(min=0)),
                    vol.Optional(
                        CONF_TEMP_ROUNDING_MODE,
                        default=self.entry.options.get(
                            CONF_TEMP_ROUNDING_MODE, TemperatureRoundingMode.NONE.value
                        ),
                    ): vol.In([mode.value for mode in TemperatureRoundingMode]),
                }
            ),
        )
