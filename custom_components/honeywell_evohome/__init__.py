import logging

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EVENT_HOMEASSISTANT_STOP
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers import config_entry_oauth2_flow

from .auth import HoneywellOAuthClient
from .const import (
    API_DEFAULTS,
    CONF_CACHE_TTL,
    CONF_CLOUD_ADAPTER_CODE,
    CONF_CLOUD_ADAPTER_URL,
    CONF_TOKEN_REFRESH_DELAY,
    CONF_TOKEN_REFRESH_INTERVAL,
    DATA_HUB,
    DOMAIN,
    PLATFORMS,
    DeviceKind,
)
from .coordinator import HoneywellThermostatCoordinator, HoneywellZoneCoordinator
from .entity_base import get_display_name
from .honeywell_api import HoneywellAPI
from .hub import HoneywellHub
from .infrastructure import HoneywellError, RemoteRequestError
from .services import async_register_services

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional(CONF_CLOUD_ADAPTER_URL): cv.url,
                vol.Optional(CONF_CLOUD_ADAPTER_CODE): cv.string,
                vol.Optional(
                    CONF_TOKEN_REFRESH_INTERVAL, default=API_DEFAULTS.TOKEN_REFRESH_INTERVAL
                ): cv.positive_int,
                vol.Optional(
                    CONF_TOKEN_REFRESH_DELAY, default=API_DEFAULTS.TOKEN_REFRESH_DELAY
                ): cv.positive_int,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: dict):
    conf = config.get(DOMAIN, {})
    if not conf.get(CONF_CLOUD_ADAPTER_URL):
        _LOGGER.warning("No %s configured, push notifications are disabled", CONF_CLOUD_ADAPTER_URL)

    hub = HoneywellHub(
        hass,
        cloud_adapter_url=conf.get(CONF_CLOUD_ADAPTER_URL),
        cloud_adapter_code=conf.get(CONF_CLOUD_ADAPTER_CODE),
        token_refresh_interval=conf.get(CONF_TOKEN_REFRESH_INTERVAL, API_DEFAULTS.TOKEN_REFRESH_INTERVAL),
        token_refresh_delay=conf.get(CONF_TOKEN_REFRESH_DELAY, API_DEFAULTS.TOKEN_REFRESH_DELAY),
    )
    hass.data.setdefault(DOMAIN, {})[DATA_HUB] = hub
    await hub.async_start()
    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, hub.async_stop)

    await async_register_services(hass)
    _LOGGER.info("Honeywell Evohome has been initialized")
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    hub = hass.data[DOMAIN][DATA_HUB]
    implementation = await config_entry_oauth2_flow.async_get_config_entry_implementation(hass, entry)
    session = config_entry_oauth2_flow.OAuth2Session(hass, entry, implementation)
    api = HoneywellAPI(
        HoneywellOAuthClient(hass, session),
        cache_ttl=entry.options.get(CONF_CACHE_TTL, API_DEFAULTS.CACHE_TTL),
    )

    @callback
    def on_request_error(err: HoneywellError) -> None:
        if isinstance(err, RemoteRequestError) and err.status == 401:
            entry.async_start_reauth(hass)

    @callback
    def on_request_success() -> None:
        hub.clear_warnings(api)

    api.on_request_error = on_request_error
    api.on_request_success = on_request_success

    try:
        locations = await api.async_get_locations()
        thermostats = await api.async_get_thermostats()
        zones = await api.async_get_zones()
        _LOGGER.debug("Found %d thermostats and %d zones", len(thermostats), len(zones))

        thermostat_coordinators = []
        for thermostat in thermostats:
            coordinator = HoneywellThermostatCoordinator(hass, api, thermostat)
            await coordinator.async_config_entry_first_refresh()
            name = get_display_name(thermostat.name, thermostat.location_id, locations)
            thermostat_coordinators.append((coordinator, name))

        zone_coordinators = []
        for zone in zones:
            coordinator = HoneywellZoneCoordinator(hass, api, zone)
            await coordinator.async_config_entry_first_refresh()
            name = get_display_name(zone.name, zone.location_id, locations)
            zone_coordinators.append((coordinator, name))
    except HoneywellError as e:
        await api.async_shutdown()
        raise ConfigEntryNotReady(f"Error listing Honeywell devices: {e}") from e
    except ConfigEntryNotReady:
        await api.async_shutdown()
        raise

    hass.data[DOMAIN][entry.entry_id] = {
        "api": api,
        "locations": locations,
        "thermostats": thermostat_coordinators,
        "zones": zone_coordinators,
    }

    entry.async_on_unload(entry.add_update_listener(async_update_options))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry):
    """Apply changed options without reloading the entry."""
    api = hass.data[DOMAIN][entry.entry_id]["api"]
    api.set_cache_ttl(entry.options.get(CONF_CACHE_TTL, API_DEFAULTS.CACHE_TTL))

    hub = hass.data[DOMAIN][DATA_HUB]
    for device in hub.devices_of_kind(DeviceKind.ZONE):
        if device.api is api:
            device.apply_rounding_mode()


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        data = hass.data[DOMAIN].pop(entry.entry_id)
        await data["api"].async_shutdown()
    return unload_ok
