"""Service handlers for Honeywell Evohome integration.

This module contains all service call handlers:
- override_temperature: Set a zone setpoint, permanently or for a window
- reset_temperature: Return a zone to its schedule
- override_mode: Set a system mode, permanently or for a window
- reset_all_zones: Set ``AutoWithReset``, returning every zone to its schedule
"""

import logging

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError

from .const import DATA_HUB, DOMAIN, DeviceKind, SystemMode
from .infrastructure import HoneywellError

_LOGGER = logging.getLogger(__name__)

ATTR_TEMPERATURE = "temperature"
ATTR_MODE = "mode"
ATTR_TIME = "time"
ATTR_HOURS = "hours"

SERVICE_OVERRIDE_TEMPERATURE = "override_temperature"
SERVICE_RESET_TEMPERATURE = "reset_temperature"
SERVICE_OVERRIDE_MODE = "override_mode"
SERVICE_RESET_ALL_ZONES = "reset_all_zones"

_OVERRIDE_WINDOW = {
    vol.Exclusive(ATTR_TIME, "override_window"): cv.time,
    vol.Exclusive(ATTR_HOURS, "override_window"): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
}

OVERRIDE_TEMPERATURE_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENTITY_ID): cv.entity_id,
        vol.Required(ATTR_TEMPERATURE): vol.Coerce(float),
        **_OVERRIDE_WINDOW,
    }
)

OVERRIDE_MODE_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENTITY_ID): cv.entity_id,
        vol.Required(ATTR_MODE): cv.string,
        **_OVERRIDE_WINDOW,
    }
)

ENTITY_SCHEMA = vol.Schema({vol.Required(ATTR_ENTITY_ID): cv.entity_id})


async def async_register_services(hass: HomeAssistant, domain: str = DOMAIN):
    """Register all Honeywell Evohome services.

    Args:
        hass: Home Assistant instance
        domain: Integration domain (default: honeywell_evohome)
    """

    def find_entity(entity_id: str, kind: DeviceKind):
        hub = hass.data[domain][DATA_HUB]
        for device in hub.devices_of_kind(kind):
            if device.entity_id == entity_id:
                return device
        raise HomeAssistantError(
            f"Honeywell {kind} entity '{entity_id}' not found. "
            f"Make sure the entity exists and belongs to the Honeywell Evohome integration."
        )

    async def handle_override_temperature(call: ServiceCall):
        """Handle override_temperature service call."""
        entity = find_entity(call.data[ATTR_ENTITY_ID], DeviceKind.ZONE)
        temperature = call.data[ATTR_TEMPERATURE]
        try:
            await entity.async_override_temperature(
                temperature, call.data.get(ATTR_TIME), call.data.get(ATTR_HOURS)
            )
        except (HoneywellError, ValueError) as e:
            _LOGGER.exception("Error overriding temperature of %s", entity.entity_id)
            raise HomeAssistantError(f"Failed to override temperature of {entity.entity_id}: {e}") from e

    async def handle_reset_temperature(call: ServiceCall):
        """Handle reset_temperature service call."""
        entity = find_entity(call.data[ATTR_ENTITY_ID], DeviceKind.ZONE)
        try:
            await entity.async_reset_temperature()
        except HoneywellError as e:
            _LOGGER.exception("Error resetting temperature of %s", entity.entity_id)
            raise HomeAssistantError(f"Failed to reset temperature of {entity.entity_id}: {e}") from e

    async def handle_override_mode(call: ServiceCall):
        """Handle override_mode service call."""
        entity = find_entity(call.data[ATTR_ENTITY_ID], DeviceKind.THERMOSTAT)
        mode = call.data[ATTR_MODE]
        try:
            await entity.async_override_mode(mode, call.data.get(ATTR_TIME), call.data.get(ATTR_HOURS))
        except (HoneywellError, ValueError) as e:
            _LOGGER.exception("Error overriding mode of %s", entity.entity_id)
            raise HomeAssistantError(f"Failed to set mode '{mode}' on {entity.entity_id}: {e}") from e

    async def handle_reset_all_zones(call: ServiceCall):
        """Handle reset_all_zones service call."""
        entity = find_entity(call.data[ATTR_ENTITY_ID], DeviceKind.THERMOSTAT)
        try:
            await entity.async_override_mode(SystemMode.AUTO_WITH_RESET)
        except HoneywellError as e:
            _LOGGER.exception("Error resetting zones of %s", entity.entity_id)
            raise HomeAssistantError(f"Failed to reset all zones of {entity.entity_id}: {e}") from e

    # Register all services
    hass.services.async_register(
        domain, SERVICE_OVERRIDE_TEMPERATURE, handle_override_temperature, schema=OVERRIDE_TEMPERATURE_SCHEMA
    )
    hass.services.async_register(
        domain, SERVICE_RESET_TEMPERATURE, handle_reset_temperature, schema=ENTITY_SCHEMA
    )
    hass.services.async_register(domain, SERVICE_OVERRIDE_MODE, handle_override_mode, schema=OVERRIDE_MODE_SCHEMA)
    hass.services.async_register(domain, SERVICE_RESET_ALL_ZONES, handle_reset_all_zones, schema=ENTITY_SCHEMA)

    _LOGGER.debug(
        "Registered Honeywell Evohome services: override_temperature, reset_temperature, "
        "override_mode, reset_all_zones"
    )
