"""Custom exceptions for Honeywell Evohome integration."""

from __future__ import annotations


class HoneywellError(Exception):
    """Base exception for Honeywell Evohome."""


class RemoteRequestError(HoneywellError):
    """Raised when the remote API answers with a non-success status.

    ``status`` is None when no HTTP response was received at all
    (connection failure or timeout).
    """

    def __init__(self, method: str, path: str, status: int | None, message: str | None = None):
        self.method = method
        self.path = path
        self.status = status
        super().__init__(message or f"{method} {path} failed with status {status}")


class RegistrationError(HoneywellError):
    """Raised when registering or removing cloud event forwarding fails."""

    def __init__(self, mac: str, message: str, status: int | None = None):
        self.mac = mac
        self.status = status
        super().__init__(message)


class UnknownDeviceError(HoneywellError):
    """Raised when a push notification references a device that is not set up."""

    def __init__(self, kind: str, mac: str | None, device_id: str | None):
        self.kind = kind
        self.mac = mac
        self.device_id = device_id
        super().__init__(f"Webhook for unknown {kind} received (mac={mac}, id={device_id})")


class UnknownNotificationError(HoneywellError):
    """Raised when a push notification has an unsupported type."""

    def __init__(self, notification_type: str | None):
        self.notification_type = notification_type
        super().__init__(f"Unknown notification type: {notification_type}")


class TokenRefreshError(HoneywellError):
    """Raised when the OAuth access token cannot be refreshed."""
