"""Routing of cloud adapter push notifications to Honeywell Evohome entities."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from aiohttp import web
from homeassistant.core import HomeAssistant, callback

from .const import (
    CAPABILITY_MEASURE_TEMPERATURE,
    CAPABILITY_TARGET_TEMPERATURE,
    CAPABILITY_THERMOSTAT_MODE,
    EVENT_GATEWAY_LOST,
    EVENT_GATEWAY_RESTORED,
    EVENT_THERMOSTAT_MODE,
    DeviceKind,
    NotificationType,
)
from .infrastructure import UnknownDeviceError, UnknownNotificationError
from .models import WebhookEvent

_LOGGER = logging.getLogger(__name__)


class WebhookRouter:
    """Dispatches push notifications to the entity that owns the device.

    Args:
        device_provider: Returns the live entities of a device kind
        fire_event: Fires an event on the Home Assistant bus (``hass.bus.async_fire``)
    """

    def __init__(
        self,
        device_provider: Callable[[DeviceKind], Iterable[Any]],
        fire_event: Callable[[str, dict[str, Any]], None],
    ):
        self._device_provider = device_provider
        self._fire_event = fire_event
        self._handlers: dict[NotificationType, Callable[[WebhookEvent], None]] = {
            NotificationType.SENSOR_STATUS: self._handle_sensor_status,
            NotificationType.SETPOINT_STATUS: self._handle_setpoint_status,
            NotificationType.QUICK_ACTION: self._handle_quick_action,
            NotificationType.GATEWAY_LOST: self._handle_gateway_lost,
            NotificationType.GATEWAY_ALIVE: self._handle_gateway_alive,
        }

    async def async_handle_request(self, hass: HomeAssistant, webhook_id: str, request: web.Request) -> None:
        """Webhook handler registered with the Home Assistant webhook component."""
        try:
            body = await request.json()
            event = WebhookEvent.from_webhook_body(body)
        except (ValueError, AttributeError) as err:
            _LOGGER.warning("Ignoring malformed webhook payload: %s", err)
            return None

        _LOGGER.debug("Incoming webhook: %s", body)
        self.async_handle_event(event)
        return None

    @callback
    def async_handle_event(self, event: WebhookEvent) -> None:
        """Dispatch an event, logging and dropping it when it cannot be routed."""
        try:
            self.async_dispatch(event)
        except UnknownDeviceError as err:
            _LOGGER.error("%s", err)
        except UnknownNotificationError as err:
            _LOGGER.error("%s", err)

    @callback
    def async_dispatch(self, event: WebhookEvent) -> None:
        """Dispatch an event.

        Raises:
            UnknownNotificationError: If the notification type is not supported.
            UnknownDeviceError: If no entity matches the event's MAC and device id.
        """
        handler = self._handlers.get(event.known_type)
        if handler is None:
            raise UnknownNotificationError(event.notification_type)
        handler(event)

    def find_device(self, kind: DeviceKind, mac: str | None, device_id: str | None) -> Any:
        """Return the entity of the given kind matching both MAC and id.

        Raises:
            UnknownDeviceError: If there is none.
        """
        for device in self._device_provider(kind):
            identity = device.identity
            if identity.mac == mac and identity.id == device_id:
                return device
        raise UnknownDeviceError(kind, mac, device_id)

    def _handle_sensor_status(self, event: WebhookEvent) -> None:
        device = self.find_device(DeviceKind.ZONE, event.mac, event.device_id)
        if device.has_capability(CAPABILITY_MEASURE_TEMPERATURE) and event.indoor_temperature is not None:
            device.set_measured_temperature(event.indoor_temperature if event.temperature_available else None)

    def _handle_setpoint_status(self, event: WebhookEvent) -> None:
        device = self.find_device(DeviceKind.ZONE, event.mac, event.device_id)
        if device.has_capability(CAPABILITY_TARGET_TEMPERATURE) and event.heat_setpoint is not None:
            device.set_target_temperature(event.heat_setpoint)

    def _handle_quick_action(self, event: WebhookEvent) -> None:
        device = self.find_device(DeviceKind.THERMOSTAT, event.mac, event.device_id)
        mode = event.quick_action
        if not device.has_capability(CAPABILITY_THERMOSTAT_MODE) or not mode or mode == device.current_mode:
            return
        device.set_mode(mode)
        self._fire_event(
            EVENT_THERMOSTAT_MODE,
            {"entity_id": device.entity_id, "device_id": device.identity.id, "mode": mode},
        )

    def _handle_gateway_lost(self, event: WebhookEvent) -> None:
        _LOGGER.info("Gateway communications lost (%s)", event.mac)
        self._fire_event(EVENT_GATEWAY_LOST, {"mac": event.mac})

    def _handle_gateway_alive(self, event: WebhookEvent) -> None:
        _LOGGER.info("Gateway communications restored (%s)", event.mac)
        self._fire_event(EVENT_GATEWAY_RESTORED, {"mac": event.mac})
