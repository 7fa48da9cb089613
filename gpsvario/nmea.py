"""NMEA sentences sent to flight software over a serial link.

Two sentence types are produced: LK8EX1 (altitude, climb rate, battery) and
XCTRC (time, position, speed, course, climb rate, pressure, battery).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce


def _c_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def nmea_checksum(sentence: str) -> int:
    """XOR of the characters after the leading '$' up to '*' or the end."""
    body = sentence[1:].split("*", 1)[0]
    return reduce(lambda acc, ch: acc ^ (ord(ch) & 0xFF), body, 0)


def _finish(sentence: str) -> str:
    return f"{sentence}{nmea_checksum(sentence):02X}\r\n"


def lk8ex1(alt_m: int, climbrate_cps: int, battery_voltage: float) -> str:
    """LK8EX1 sentence; pressure and temperature are sent as not available."""
    return _finish(f"$LK8EX1,999999,{alt_m},{climbrate_cps},99,{battery_voltage:.1f}*")


@dataclass
class NavFix:
    """GPS navigation solution fields used in the XCTRC sentence."""

    lat_deg7: int = 0
    lon_deg7: int = 0
    height_msl_mm: int = 0
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanoseconds: int = 0
    ground_speed_mmps: int = 0


def xctrc(fix: NavFix, course_deg: float, climbrate_cps: float,
          pressure_pa: float, supply_voltage: float) -> str:
    """XCTRC sentence.

    The battery indication is the supply voltage as a percentage of 5 V,
    clamped to 0..100.
    """
    battery_percent = min(max(int(supply_voltage * 100.0 / 5.0), 0), 100)
    lat = fix.lat_deg7 / 1e7
    lon = fix.lon_deg7 / 1e7
    alt_m = fix.height_msl_mm / 1000.0
    centisecond = _c_div(fix.nanoseconds, 10000000)
    sog_kph = fix.ground_speed_mmps * 0.0036
    sentence = (
        f"$XCTRC,{fix.year},{fix.month},{fix.day},{fix.hour},{fix.minute},"
        f"{fix.second},{centisecond},{lat:.6f},{lon:.6f},{alt_m:.2f},"
        f"{sog_kph:.2f},{course_deg:.1f},{climbrate_cps / 100.0:.2f},,,,"
        f"{pressure_pa / 100.0:.2f},{battery_percent}*"
    )
    return _finish(sentence)