"""UBX CFG-MSG commands that switch GPS receiver messages on and off."""

from __future__ import annotations

UBX = 0x01
NAV_PVT = 0x07

NMEA = 0xF0
GGA = 0
GLL = 1
GSA = 2
GSV = 3
RMC = 4
VTG = 5

_SYNC = bytes([0xB5, 0x62])
_CFG_MSG = bytes([0x06, 0x01, 0x08, 0x00])

# Terminal keys of the configuration console: lower case disables a
# message, upper case enables it.
KEY_BINDINGS = {
    "a": (NMEA, GLL, False), "A": (NMEA, GLL, True),
    "b": (NMEA, RMC, False), "B": (NMEA, RMC, True),
    "c": (NMEA, VTG, False), "C": (NMEA, VTG, True),
    "d": (NMEA, GSV, False), "D": (NMEA, GSV, True),
    "e": (NMEA, GSA, False), "E": (NMEA, GSA, True),
    "f": (NMEA, GGA, False), "F": (NMEA, GGA, True),
    "g": (UBX, NAV_PVT, False), "G": (UBX, NAV_PVT, True),
}


def ubx_checksum(data: bytes) -> tuple[int, int]:
    """8-bit Fletcher checksum (CK_A, CK_B) over ``data``."""
    cka = ckb = 0
    for byte in data:
        cka = (cka + byte) & 0xFF
        ckb = (ckb + cka) & 0xFF
    return cka, ckb


def message_rate_command(msg_class: int, msg_id: int, enable: bool) -> bytes:
    """CFG-MSG frame setting the rate of one message on the first UART."""
    payload = bytes([msg_class & 0xFF, msg_id & 0xFF, 0, 1 if enable else 0, 0, 0, 0, 0])
    body = _CFG_MSG + payload
    return _SYNC + body + bytes(ubx_checksum(body))


def enable_message(msg_class: int, msg_id: int) -> bytes:
    """CFG-MSG frame that turns a message on."""
    return message_rate_command(msg_class, msg_id, True)


def disable_message(msg_class: int, msg_id: int) -> bytes:
    """CFG-MSG frame that turns a message off."""
    return message_rate_command(msg_class, msg_id, False)