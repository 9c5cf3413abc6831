"""Tests for desk detection in scan results."""

from jiecang_controller.scanner import ScannedDevice


def test_is_desk_by_service_uuid():
    device = ScannedDevice(
        name="Desk 1234",
        address="AA:BB:CC:DD:EE:FF",
        rssi=-60,
        service_uuids=["0000FE60-0000-1000-8000-00805F9B34FB"],
    )
    assert device.is_desk


def test_name_alone_is_not_a_desk():
    device = ScannedDevice(name="Desk", address="AA:BB:CC:DD:EE:FF", rssi=-60)
    assert not device.is_desk


def test_other_services_are_not_desks():
    device = ScannedDevice(
        name=None,
        address="AA:BB:CC:DD:EE:FF",
        rssi=-60,
        service_uuids=["0000180f-0000-1000-8000-00805f9b34fb"],
    )
    assert not device.is_desk
