"""Cloud adapter registration for Honeywell Evohome push notifications.

The cloud adapter forwards push notifications of one gateway (MAC) to the
webhook of this Home Assistant instance. A thermostat and all of its zones
share that MAC, so forwarding is set up when the first device of a MAC is
added and torn down when the last one is removed.

All registrations and removals, for every MAC and every account, run one at
a time and in call order through a single RequestQueue.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

import aiohttp

from .const import API_DEFAULTS
from .infrastructure import HoneywellError, RegistrationError, RequestQueue
from .models import CloudAdapterRegistration, CloudAdapterRemoval

_LOGGER = logging.getLogger(__name__)


class RegistrationState(StrEnum):
    """Forwarding state of one MAC."""

    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"
    UNREGISTERING = "unregistering"


class CloudAdapterRegistry:
    """Which device ids currently rely on forwarding for each MAC.

    Only mutated from tasks of the RegistrationSequencer queue.
    """

    def __init__(self):
        self._devices: dict[str, list[str]] = {}
        self._states: dict[str, RegistrationState] = {}

    def state(self, mac: str) -> RegistrationState:
        return self._states.get(mac, RegistrationState.UNREGISTERED)

    def set_state(self, mac: str, state: RegistrationState) -> None:
        _LOGGER.debug("Forwarding state of %s: %s -> %s", mac, self.state(mac), state)
        self._states[mac] = state

    def device_ids(self, mac: str) -> list[str]:
        """Return the registered device ids of a MAC, in registration order."""
        return list(self._devices.get(mac, []))

    def contains(self, mac: str, device_id: str) -> bool:
        return device_id in self._devices.get(mac, [])

    def add(self, mac: str, device_id: str) -> None:
        ids = self._devices.setdefault(mac, [])
        if device_id not in ids:
            ids.append(device_id)

    def discard(self, mac: str, device_id: str) -> bool:
        """Remove a device id; returns False when it was not registered."""
        ids = self._devices.get(mac, [])
        if device_id not in ids:
            return False
        ids.remove(device_id)
        if not ids:
            del self._devices[mac]
        return True


class CloudAdapterClient:
    """POSTs register/unregister requests to the cloud adapter."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str | None,
        code: str | None,
        timeout: int = API_DEFAULTS.WRITE_TIMEOUT,
    ):
        self._session = session
        self.url = url.rstrip("/") if url else None
        self.code = code
        self.timeout = timeout

    async def async_register(self, registration: CloudAdapterRegistration) -> None:
        await self._async_post("register", registration.device_mac, registration.to_api_payload())

    async def async_unregister(self, removal: CloudAdapterRemoval) -> None:
        await self._async_post("unregister", removal.device_mac, removal.to_api_payload())

    async def _async_post(self, action: str, mac: str, payload: dict) -> None:
        if not self.url:
            raise RegistrationError(mac, f"Cannot {action} {mac}: no cloud adapter URL configured")

        try:
            async with self._session.post(
                f"{self.url}/{action}",
                params={"code": self.code or ""},
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise RegistrationError(
                        mac,
                        f"Device event forwarding {action} failed ({mac} - {response.status} - {response.reason})",
                        response.status,
                    )
        except (TimeoutError, aiohttp.ClientError) as err:
            raise RegistrationError(mac, f"Device event forwarding {action} failed ({mac} - {err})") from err


class RegistrationSequencer:
    """Establishes forwarding exactly once per MAC, one request at a time.

    Args:
        adapter: Client for the cloud adapter endpoints
        hub_id_provider: Coroutine function returning the id of this instance
        registry: Shared registry, a new one is created when omitted
        error_reporter: Called with every registration failure
    """

    def __init__(
        self,
        adapter: CloudAdapterClient,
        hub_id_provider: Callable[[], Awaitable[str]],
        registry: CloudAdapterRegistry | None = None,
        error_reporter: Callable[[HoneywellError], None] | None = None,
    ):
        self._adapter = adapter
        self._hub_id_provider = hub_id_provider
        self.registry = registry or CloudAdapterRegistry()
        self._error_reporter = error_reporter
        self._queue = RequestQueue(name="registration")

    async def async_register_device(self, device_id: str, mac: str, api) -> None:
        """Enroll a device for push notifications of its MAC.

        Raises:
            RegistrationError: If the remote registration failed.
        """
        _LOGGER.debug("Registration of %s (%s) scheduled, %d pending", device_id, mac, self._queue.pending)
        try:
            await self._queue.submit(lambda: self._async_execute_registration(device_id, mac, api))
        except HoneywellError as err:
            self._report(err)
            raise

    async def async_unregister_device(self, device_id: str, mac: str) -> None:
        """Remove a device; forwarding stops when it was the last one of its MAC.

        Raises:
            RegistrationError: If the remote removal failed.
        """
        _LOGGER.debug("Removal of %s (%s) scheduled, %d pending", device_id, mac, self._queue.pending)
        try:
            await self._queue.submit(lambda: self._async_execute_removal(device_id, mac))
        except HoneywellError as err:
            self._report(err)
            raise

    async def _async_execute_registration(self, device_id: str, mac: str, api) -> None:
        registry = self.registry
        if registry.contains(mac, device_id):
            _LOGGER.debug("Device %s already registered", device_id)
            return
        if registry.state(mac) is RegistrationState.REGISTERED:
            _LOGGER.debug("MAC %s already registered, adding %s", mac, device_id)
            registry.add(mac, device_id)
            return

        registry.set_state(mac, RegistrationState.REGISTERING)
        try:
            user = await api.async_get_user()
            _LOGGER.info("Registering %s for event forwarding", mac)
            await self._adapter.async_register(
                CloudAdapterRegistration(
                    user_id=str(user["userId"]),
                    auth_token=api.get_token()["access_token"],
                    device_mac=mac,
                    hub_id=await self._hub_id_provider(),
                )
            )
        except RegistrationError:
            registry.set_state(mac, RegistrationState.UNREGISTERED)
            raise
        except (HoneywellError, KeyError, TypeError, ValueError) as err:
            # pydantic ValidationError is a ValueError
            registry.set_state(mac, RegistrationState.UNREGISTERED)
            raise RegistrationError(mac, f"Device event forwarding registration failed ({mac} - {err})") from err

        registry.add(mac, device_id)
        registry.set_state(mac, RegistrationState.REGISTERED)
        _LOGGER.info("Event forwarding registered for %s", mac)

    async def _async_execute_removal(self, device_id: str, mac: str) -> None:
        registry = self.registry
        if not registry.discard(mac, device_id):
            _LOGGER.debug("Device %s was not registered", device_id)
            return
        if registry.device_ids(mac) or registry.state(mac) is not RegistrationState.REGISTERED:
            return

        registry.set_state(mac, RegistrationState.UNREGISTERING)
        try:
            _LOGGER.info("Removing event forwarding for %s", mac)
            await self._adapter.async_unregister(
                CloudAdapterRemoval(device_mac=mac, hub_id=await self._hub_id_provider())
            )
        finally:
            registry.set_state(mac, RegistrationState.UNREGISTERED)
        _LOGGER.info("Event forwarding removed for %s", mac)

    def _report(self, err: HoneywellError) -> None:
        _LOGGER.error("Event forwarding request failed: %s", err)
        if self._error_reporter is not None:
            self._error_reporter(err)

    async def async_shutdown(self) -> None:
        await self._queue.async_shutdown()
