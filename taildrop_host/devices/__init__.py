"""Device listing module."""

from taildrop_host.devices.service import Device, DeviceService

__all__ = ["Device", "DeviceService"]
