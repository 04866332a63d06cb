"""Process-wide state shared by every Honeywell Evohome config entry.

One HoneywellHub lives in ``hass.data[DOMAIN][DATA_HUB]``. It owns the
collaborators that exist once per Home Assistant instance regardless of how
many accounts are configured: the registration sequencer and its registry,
the webhook router and the token refresh scheduler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components import persistent_notification, webhook
from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers import instance_id
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import API_DEFAULTS, DOMAIN, WEBHOOK_NAME, DeviceKind
from .infrastructure import HoneywellError, RegistrationError
from .registration import CloudAdapterClient, CloudAdapterRegistry, RegistrationSequencer
from .token_refresh import TokenRefreshScheduler
from .webhook import WebhookRouter

if TYPE_CHECKING:
    from .entity_base import HoneywellBaseEntity

_LOGGER = logging.getLogger(__name__)


class HoneywellHub:
    """Shared collaborators and the set of live Honeywell entities."""

    def __init__(
        self,
        hass: HomeAssistant,
        cloud_adapter_url: str | None = None,
        cloud_adapter_code: str | None = None,
        token_refresh_interval: int = API_DEFAULTS.TOKEN_REFRESH_INTERVAL,
        token_refresh_delay: int = API_DEFAULTS.TOKEN_REFRESH_DELAY,
    ):
        self.hass = hass
        self._entities: dict[DeviceKind, list[HoneywellBaseEntity]] = {kind: [] for kind in DeviceKind}
        self.registry = CloudAdapterRegistry()
        self.sequencer = RegistrationSequencer(
            CloudAdapterClient(async_get_clientsession(hass), cloud_adapter_url, cloud_adapter_code),
            self.async_get_hub_id,
            registry=self.registry,
            error_reporter=self._report_error,
        )
        self.router = WebhookRouter(self.devices_of_kind, hass.bus.async_fire)
        self.token_refresher = TokenRefreshScheduler(
            hass, self.devices, interval=token_refresh_interval, delay=token_refresh_delay
        )
        self.webhook_id: str | None = None

    async def async_get_hub_id(self) -> str:
        """Return the id identifying this instance towards the cloud adapter."""
        return await instance_id.async_get(self.hass)

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def devices(self) -> list[HoneywellBaseEntity]:
        """All live entities, thermostats first."""
        return [*self._entities[DeviceKind.THERMOSTAT], *self._entities[DeviceKind.ZONE]]

    def devices_of_kind(self, kind: DeviceKind) -> list[HoneywellBaseEntity]:
        return list(self._entities[kind])

    @callback
    def clear_warnings(self, api: Any = None) -> None:
        """Clear the warning of every entity, or only of those using ``api``."""
        for device in self.devices():
            if api is None or device.api is api:
                device.set_warning(None)

    async def async_add_device(self, device: HoneywellBaseEntity) -> None:
        """Track an entity and enroll it for push notifications.

        A registration failure is logged and reported; the entity stays
        usable through polling.
        """
        self._entities[device.kind].append(device)
        # The account works if a device could be set up with it
        self.clear_warnings()
        identity = device.identity
        try:
            await self.sequencer.async_register_device(identity.id, identity.mac, device.api)
        except HoneywellError as err:
            _LOGGER.warning("Push notifications unavailable for %s: %s", device.entity_id, err)

    async def async_remove_device(self, device: HoneywellBaseEntity) -> None:
        if device in self._entities[device.kind]:
            self._entities[device.kind].remove(device)
        identity = device.identity
        try:
            await self.sequencer.async_unregister_device(identity.id, identity.mac)
        except HoneywellError as err:
            _LOGGER.warning("Could not remove push notifications for %s: %s", device.entity_id, err)

    @callback
    def _report_error(self, err: HoneywellError) -> None:
        notification_id = f"{DOMAIN}_registration"
        if isinstance(err, RegistrationError):
            notification_id = f"{DOMAIN}_registration_{err.mac}"
        persistent_notification.async_create(
            self.hass,
            f"Honeywell push notifications could not be set up: {err}",
            title="Honeywell Evohome",
            notification_id=notification_id,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def async_start(self) -> None:
        """Register the webhook and start the token refresh timer.

        The webhook id is the instance id sent to the cloud adapter with every
        registration, so the adapter forwards to ``/api/webhook/<HomeyId>``.
        """
        self.webhook_id = await self.async_get_hub_id()
        webhook.async_register(
            self.hass,
            DOMAIN,
            WEBHOOK_NAME,
            self.webhook_id,
            self.router.async_handle_request,
        )
        _LOGGER.info("Webhook registered")
        self.token_refresher.async_start()

    async def async_stop(self, _event: Event | None = None) -> None:
        self.token_refresher.async_stop()
        if self.webhook_id is not None:
            webhook.async_unregister(self.hass, self.webhook_id)
            self.webhook_id = None
        await self.sequencer.async_shutdown()
