"""
BLE Desk Scanner

Scans for nearby desks driven by a Jiecang controller, which advertise the
Lierda module's 0xFE60 service.
"""

from dataclasses import dataclass

from bleak import BleakScanner

from jiecang_controller.const import SCAN_TIMEOUT, UUID_SERVICE


@dataclass
class ScannedDevice:
    """Information about a discovered BLE device."""

    name: str | None
    address: str
    rssi: int
    service_uuids: list[str] | None = None

    @property
    def is_desk(self) -> bool:
        """Check if this device advertises the Lierda desk service."""
        if not self.service_uuids:
            return False
        return any(uuid.lower() == UUID_SERVICE for uuid in self.service_uuids)


async def scan_devices(timeout: float = SCAN_TIMEOUT, filter_desks: bool = True) -> list[ScannedDevice]:
    """
    Scan for BLE devices.

    Args:
        timeout: Scan duration in seconds
        filter_desks: If True, only return devices that appear to be desks

    Returns:
        List of discovered devices, sorted by signal strength (strongest first)
    """
    devices: list[ScannedDevice] = []

    discovered = await BleakScanner.discover(timeout=timeout, return_adv=True)

    for address, (device, adv_data) in discovered.items():
        scanned = ScannedDevice(
            name=device.name or adv_data.local_name,
            address=address,
            rssi=adv_data.rssi,
            service_uuids=adv_data.service_uuids or None,
        )

        if filter_desks and not scanned.is_desk:
            continue

        devices.append(scanned)

    devices.sort(key=lambda d: d.rssi, reverse=True)

    return devices


async def find_desk(name_pattern: str | None = None, timeout: float = SCAN_TIMEOUT) -> ScannedDevice | None:
    """
    Find the desk with the strongest signal, optionally matching a name.

    Args:
        name_pattern: Substring to match in device name (case-insensitive)
        timeout: Scan duration in seconds
    """
    for device in await scan_devices(timeout=timeout):
        if name_pattern is None:
            return device
        if device.name and name_pattern.lower() in device.name.lower():
            return device

    return None


def print_devices(devices: list[ScannedDevice]) -> None:
    """Print a formatted table of discovered desks."""
    if not devices:
        print("No desks found.")
        return

    print(f"\n{'Address':<20} | {'Name':<25} | {'RSSI':>8}")
    print("-" * 60)

    for device in devices:
        name = device.name or "(unknown)"
        if len(name) > 24:
            name = name[:21] + "..."
        print(f"{device.address:<20} | {name:<25} | {device.rssi:>5} dBm")
