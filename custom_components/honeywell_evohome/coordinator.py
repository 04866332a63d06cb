import logging
from datetime import timedelta

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import API_DEFAULTS
from .honeywell_api import find_system_status
from .infrastructure import HoneywellError

_LOGGER = logging.getLogger(__name__)


class HoneywellZoneCoordinator(DataUpdateCoordinator):
    """Polls the status and setpoint limits of one zone."""

    def __init__(self, hass, api, zone, update_interval=API_DEFAULTS.POLLING_INTERVAL):
        super().__init__(
            hass,
            _LOGGER,
            name=f"Honeywell Zone {zone.name}",
            update_interval=timedelta(seconds=update_interval),
        )
        self.api = api
        self.zone = zone

    async def _async_update_data(self):
        try:
            return await self.api.async_get_zone_information(self.zone.location_id, self.zone.id)
        except HoneywellError as e:
            raise UpdateFailed(f"Error fetching status of zone {self.zone.id}: {e}") from e


class HoneywellThermostatCoordinator(DataUpdateCoordinator):
    """Polls the status of one temperature control system."""

    def __init__(self, hass, api, thermostat, update_interval=API_DEFAULTS.POLLING_INTERVAL):
        super().__init__(
            hass,
            _LOGGER,
            name=f"Honeywell Thermostat {thermostat.name}",
            update_interval=timedelta(seconds=update_interval),
        )
        self.api = api
        self.thermostat = thermostat

    async def _async_update_data(self):
        try:
            location_status = await self.api.async_get_location_status(self.thermostat.location_id)
        except HoneywellError as e:
            _LOGGER.warning("Error fetching status of location %s: %s", self.thermostat.location_id, e)
            raise UpdateFailed(f"Error fetching status of location {self.thermostat.location_id}: {e}") from e

        system = find_system_status(location_status, self.thermostat.id)
        if system is None:
            _LOGGER.warning("Thermostat %s not found in location status", self.thermostat.id)
        return system
