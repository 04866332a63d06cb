# honeywell_api.py
"""Domain client for the Honeywell Evohome (Resideo TCC EMEA) API.

Every remote call of one HoneywellAPI instance goes through a single
RequestQueue, so the account never sees two requests in flight from this
integration. Location status reads are additionally cached for a short
time because a thermostat and all of its zones poll the same location.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .const import API_DEFAULTS
from .infrastructure import (
    HoneywellError,
    RequestQueue,
    ShortTTLCache,
    api_get,
    api_put,
)
from .models import ModeUpdate, SetpointUpdate, Thermostat, Zone, ZoneInformation

_LOGGER = logging.getLogger(__name__)


def find_zone_status(location_status: dict[str, Any] | None, zone_id: str) -> dict[str, Any] | None:
    """Find the status of a zone in a location status tree.

    Searches gateways -> temperature control systems -> zones and returns
    the first zone whose ``zoneId`` matches.
    """
    for gateway in (location_status or {}).get("gateways", []):
        for system in gateway.get("temperatureControlSystems", []):
            for zone in system.get("zones", []):
                if zone.get("zoneId") == zone_id:
                    return zone
    return None


def find_system_status(location_status: dict[str, Any] | None, system_id: str) -> dict[str, Any] | None:
    """Find the status of a temperature control system in a location status tree."""
    for gateway in (location_status or {}).get("gateways", []):
        for system in gateway.get("temperatureControlSystems", []):
            if system.get("systemId") == system_id:
                return system
    return None


class HoneywellAPI:
    """Queued, cached access to one Honeywell account.

    Attributes:
        on_request_error: Called with the error before a failed request propagates
        on_request_success: Called after every successful request
    """

    def __init__(
        self,
        client,
        cache_ttl: float = API_DEFAULTS.CACHE_TTL,
        on_request_error: Callable[[HoneywellError], None] | None = None,
        on_request_success: Callable[[], None] | None = None,
    ):
        """Initialize the API.

        Args:
            client: OAuth2 HTTP client (``async_get``, ``async_put``, ``get_token``,
                ``async_refresh_token``)
            cache_ttl: Seconds a location status stays cached (0 = disabled)
            on_request_error: Hook invoked before a request failure propagates
            on_request_success: Hook invoked after every successful request
        """
        self._client = client
        self._queue = RequestQueue(name="api")
        self._status_cache = ShortTTLCache(cache_ttl=cache_ttl, name="location_status")
        self.on_request_error = on_request_error
        self.on_request_success = on_request_success

    # -------------------------------------------------------------------------
    # Request hooks (used by the api_get/api_put decorators)
    # -------------------------------------------------------------------------

    def _handle_request_error(self, err: HoneywellError) -> None:
        _LOGGER.debug("Request failed: %s", err)
        if self.on_request_error is not None:
            self.on_request_error(err)

    def _handle_request_success(self) -> None:
        if self.on_request_success is not None:
            self.on_request_success()

    # -------------------------------------------------------------------------
    # Token handling
    # -------------------------------------------------------------------------

    def get_token(self) -> dict[str, Any]:
        """Return the current OAuth token of the account."""
        return self._client.get_token()

    async def async_refresh_token(self) -> None:
        """Refresh the access token.

        The refresh is queued like any request, so it never overlaps an API
        call that is still using the old token.
        """

        async def _refresh():
            try:
                await self._client.async_refresh_token()
            except HoneywellError as err:
                self._handle_request_error(err)
                raise
            self._handle_request_success()

        await self._queue.submit(_refresh)

    # -------------------------------------------------------------------------
    # Account and locations
    # -------------------------------------------------------------------------

    @api_get("/userAccount")
    async def async_get_user(self, response_data) -> dict[str, Any]:
        """Return the user account (contains ``userId``)."""
        return response_data

    async def async_get_locations(self, user_id: str | None = None) -> list[dict[str, Any]]:
        """Return the locations of the user, looking up the user id when not given."""
        if not user_id:
            user_id = (await self.async_get_user())["userId"]
        return await self._async_get_locations(user_id)

    @api_get("/location", query={"userId": "{user_id}"})
    async def _async_get_locations(self, response_data, user_id: str) -> list[dict[str, Any]]:
        return response_data or []

    @api_get(
        "/location/installationInfo",
        query={"userId": "{user_id}", "includeTemperatureControlSystems": "true"},
    )
    async def _async_get_installation_info(self, response_data, user_id: str) -> list[dict[str, Any]]:
        return response_data or []

    # -------------------------------------------------------------------------
    # Thermostats and zones
    # -------------------------------------------------------------------------

    async def async_get_thermostats(self) -> list[Thermostat]:
        """Return every temperature control system of every gateway of every location."""
        user_id = (await self.async_get_user())["userId"]
        installations = await self._async_get_installation_info(user_id)

        thermostats = []
        for installation in installations:
            location_info = installation["locationInfo"]
            postcode = location_info.get("postcode")
            for gateway in installation.get("gateways", []):
                for system in gateway.get("temperatureControlSystems", []):
                    thermostats.append(
                        Thermostat(
                            id=system["systemId"],
                            mac=gateway["gatewayInfo"]["mac"],
                            name=f"{system.get('modelType')} ({postcode})",
                            postcode=postcode,
                            zones=system.get("zones", []),
                            allowed_system_modes=system.get("allowedSystemModes", []),
                            location_id=location_info["locationId"],
                        )
                    )
        return thermostats

    async def async_get_zones(self) -> list[Zone]:
        """Return every zone of every thermostat."""
        zones = []
        for thermostat in await self.async_get_thermostats():
            for zone in thermostat.zones:
                zones.append(
                    Zone(
                        id=zone["zoneId"],
                        mac=thermostat.mac,
                        name=f"{zone.get('name')} ({thermostat.postcode})",
                        setpoint_capabilities=zone.get("setpointCapabilities") or {},
                        location_id=thermostat.location_id,
                    )
                )
        return zones

    async def async_get_thermostat(self, system_id: str) -> Thermostat | None:
        """Return the thermostat with the given id, or None."""
        return next((t for t in await self.async_get_thermostats() if t.id == system_id), None)

    async def async_get_zone(self, zone_id: str) -> Zone | None:
        """Return the zone with the given id, or None."""
        return next((z for z in await self.async_get_zones() if z.id == zone_id), None)

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    async def async_get_location_status(self, location_id: str) -> dict[str, Any]:
        """Return the status tree of a location, cached for ``cache_ttl`` seconds."""
        return await self._status_cache.get_or_fetch(
            location_id, lambda: self._async_fetch_location_status(location_id)
        )

    @api_get(
        "/location/{location_id}/status",
        query={"includeTemperatureControlSystems": "true"},
    )
    async def _async_fetch_location_status(self, response_data, location_id: str) -> dict[str, Any]:
        return response_data

    async def async_get_zone_information(self, location_id: str, zone_id: str) -> ZoneInformation:
        """Return the status and the listing of a zone.

        Both halves are looked up independently; a failing half is logged
        and left empty without affecting the other.
        """
        status = None
        zone = None
        try:
            status = find_zone_status(await self.async_get_location_status(location_id), zone_id)
        except HoneywellError as err:
            _LOGGER.warning("Could not retrieve status of zone %s: %s", zone_id, err)
        try:
            zone = await self.async_get_zone(zone_id)
        except HoneywellError as err:
            _LOGGER.warning("Could not retrieve information of zone %s: %s", zone_id, err)
        return ZoneInformation(status=status, zone=zone)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @api_put("/temperatureZone/{zone_id}/heatSetpoint")
    async def async_set_temperature(self, zone_id: str, value: float, until: datetime | None = None) -> dict:
        """Override the setpoint of a zone, permanently or until the given instant."""
        return SetpointUpdate(heat_setpoint_value=value, until=until).to_api_payload()

    @api_put("/temperatureZone/{zone_id}/heatSetpoint")
    async def async_reset_temperature(self, zone_id: str) -> dict:
        """Clear any manual override of a zone."""
        return {"setpointMode": "FollowSchedule"}

    @api_put("/temperatureControlSystem/{system_id}/mode")
    async def async_set_mode(self, system_id: str, mode: str, until: datetime | None = None) -> dict:
        """Change the system mode, permanently or until the given instant."""
        return ModeUpdate(system_mode=mode, until=until).to_api_payload()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def set_cache_ttl(self, cache_ttl: float) -> None:
        """Change the status cache lifetime, dropping what is cached."""
        self._status_cache.cache_ttl = cache_ttl
        self._status_cache.clear()

    def invalidate_status(self, location_id: str) -> None:
        """Drop the cached status of a location."""
        self._status_cache.invalidate(location_id)

    async def async_shutdown(self) -> None:
        """Stop the request and cache workers."""
        await self._status_cache.async_shutdown()
        await self._queue.async_shutdown()
