"""Tests for frame validation and decoding."""

import pytest

from jiecang_controller.protocol import (
    checksum,
    decode_height,
    decode_height_range,
    decode_preset,
    decode_setting,
    mm_to_cm,
    preset_index,
    split_frames,
    validate,
)

HEIGHT = bytes.fromhex("f2f20103033707457e")
HEIGHT_RANGE = bytes.fromhex("f2f2070404f8026c757e")
PRESET_1 = bytes.fromhex("f2f22502044e797e")


def test_validate_known_frames():
    """Frames captured from a real controller should validate."""
    assert validate(HEIGHT)
    assert validate(HEIGHT_RANGE)
    assert validate(PRESET_1)


@pytest.mark.parametrize(
    "buf",
    [
        b"",
        bytes.fromhex("f2f2cafe"),  # too short, no terminator
        bytes.fromhex("deadbeef7e"),  # wrong preamble
        bytes.fromhex("f2f2070404f8026c487e"),  # wrong checksum
        bytes.fromhex("f1f10103033707457e"),  # command preamble
        bytes.fromhex("f2f20103033707457f"),  # wrong terminator
        bytes.fromhex("f2f201ff0337457e"),  # length overruns buffer
        bytes.fromhex("f2f201047e"),  # truncated
    ],
)
def test_validate_rejects_malformed(buf):
    assert validate(buf) is False


def test_validate_detects_corrupted_data_byte():
    """Changing any payload byte without fixing the checksum should fail."""
    for i in range(4, len(HEIGHT_RANGE) - 2):
        corrupted = bytearray(HEIGHT_RANGE)
        corrupted[i] = (corrupted[i] + 1) % 256
        assert not validate(bytes(corrupted)), f"byte {i}"


def test_checksum_wraps():
    assert checksum(0x07, bytes([0x04, 0xF8, 0x02, 0x6C])) == 0x75
    assert checksum(0xFF, bytes([0xFF])) == (0xFF + 1 + 0xFF) % 256


def test_decode_height():
    assert decode_height(HEIGHT) == 82


def test_decode_height_ignores_checksum():
    """The checksum only gates validation, not decoding."""
    bad_checksum = bytes.fromhex("f2f20103033707467e")
    assert not validate(bad_checksum)
    assert decode_height(bad_checksum) == 82


def test_decode_height_wrong_length_is_zero():
    assert decode_height(PRESET_1) == 0
    assert decode_height(b"\xf2\xf2") == 0


def test_decode_height_range():
    # 0x04f8 = 1272mm, 0x026c = 620mm
    assert decode_height_range(HEIGHT_RANGE) == (127, 62)


def test_decode_height_range_wrong_length():
    assert decode_height_range(HEIGHT) == (0, 0)
    assert decode_height_range(b"\xf2\xf2\x07\x04\x04") == (0, 0)


def test_decode_preset():
    assert decode_preset(PRESET_1) == 110


def test_decode_preset_wrong_length():
    assert decode_preset(HEIGHT) == 0


@pytest.mark.parametrize(
    "mm, cm",
    [(0, 0), (820, 82), (824, 82), (825, 83), (826, 83), (1275, 128), (1005, 101)],
)
def test_mm_to_cm_rounds_half_up(mm, cm):
    assert mm_to_cm(mm) == cm


def test_decode_setting():
    assert decode_setting(bytes.fromhex("f2f21901011b7e")) == 1
    assert decode_setting(bytes.fromhex("f2f21d0102207e")) == 2
    assert decode_setting(bytes.fromhex("f2f21900197e")) is None


@pytest.mark.parametrize("msg_type, preset", [(0x25, 1), (0x26, 2), (0x27, 3), (0x28, 4)])
def test_preset_index(msg_type, preset):
    assert preset_index(msg_type) == preset


def test_split_frames_keeps_terminators():
    assert split_frames(HEIGHT + PRESET_1) == [HEIGHT, PRESET_1]


def test_split_frames_drops_trailing_remainder():
    assert split_frames(HEIGHT + b"\xf2\xf2\x01") == [HEIGHT]
    assert split_frames(b"") == []
