"""Waypoint routes read from FormatGEO ``.wpt`` files.

Each line after the ``$FormatGEO`` header holds an identifier, a latitude
and a longitude in degrees, minutes and seconds with a hemisphere letter,
an altitude in metres and an optional waypoint radius in metres.  Malformed
lines are skipped; a missing radius takes the default.
"""

from __future__ import annotations

import argparse
import logging
import math
import re
import sys
from dataclasses import dataclass, field
from itertools import pairwise
from typing import Iterable

logger = logging.getLogger(__name__)

MAX_WAYPOINTS = 100
MAX_ID_CHARS = 10
WAYPT_RADIUS_MIN = 5
WAYPT_RADIUS_MAX = 99999
WAYPT_RADIUS_DFLT = 50

PI_DIV_180 = 0.017453292
EARTH_RADIUS_M = 6371009.0

_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class RouteFormatError(ValueError):
    """Raised when a route file is not in FormatGEO format."""


@dataclass
class Waypoint:
    """A route waypoint; coordinates in degrees, altitude and radius in metres."""

    id: str
    lat_deg: float
    lon_deg: float
    alt_m: float
    radius_m: float = float(WAYPT_RADIUS_DFLT)


@dataclass
class Route:
    """An ordered list of waypoints."""

    waypoints: list[Waypoint] = field(default_factory=list)

    def total_distance_m(self) -> int:
        """Sum of the great-circle distances between consecutive waypoints."""
        return sum(
            haversine_distance_m(a.lat_deg, a.lon_deg, b.lat_deg, b.lon_deg)
            for a, b in pairwise(self.waypoints)
        )


class _Splitter:
    """Splits a line into fields, with a delimiter set chosen per field."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self, delims: str) -> str | None:
        d = re.escape(delims)
        match = re.compile(f"[{d}]*([^{d}]+)[{d}]?").match(self._text, self._pos)
        if match is None:
            self._pos = len(self._text)
            return None
        self._pos = match.end()
        return match.group(1)


def _scan_int(text: str | None) -> int | None:
    if text is None:
        return None
    match = _INT.match(text)
    return int(match.group(1)) if match else None


def _scan_float(text: str | None) -> float | None:
    if text is None:
        return None
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else None


def _parse_coordinate(fields: _Splitter, negative: str) -> float | None:
    hemisphere = fields.next(" \t")
    if hemisphere is None or len(hemisphere) != 1:
        return None
    degrees = _scan_int(fields.next(" \t"))
    if degrees is None:
        return None
    minutes = _scan_int(fields.next(" \t"))
    if minutes is None:
        return None
    seconds = _scan_float(fields.next(" \t"))
    if seconds is None:
        return None
    value = seconds / 3600.0 + minutes / 60.0 + degrees
    return -value if hemisphere in negative else value


def _parse_waypoint(line: str) -> Waypoint | None:
    fields = _Splitter(line)
    ident = fields.next(" ")
    if ident is None:
        return None
    lat = _parse_coordinate(fields, "Ss")
    if lat is None:
        return None
    lon = _parse_coordinate(fields, "Ww")
    if lon is None:
        return None
    alt = _scan_float(fields.next(" \t\r\n"))
    if alt is None:
        return None
    radius_text = fields.next(" \t\r\n")
    if radius_text is None:
        radius = float(WAYPT_RADIUS_DFLT)
    else:
        radius = _scan_float(radius_text)
        if radius is None:
            return None
    return Waypoint(ident[:MAX_ID_CHARS - 1], lat, lon, alt, radius)


def parse_route(lines: Iterable[str]) -> Route:
    """Build a route from the lines of a FormatGEO waypoint file."""
    it = iter(lines)
    first = next(it, None)
    if first is None or _Splitter(first).next(" \r\n") != "$FormatGEO":
        raise RouteFormatError("incorrect format, expected $FormatGEO header")
    route = Route()
    for number, line in enumerate(it, start=2):
        waypoint = _parse_waypoint(line)
        if waypoint is None:
            logger.debug("skipping malformed waypoint on line %d", number)
            continue
        if len(route.waypoints) >= MAX_WAYPOINTS:
            raise RouteFormatError(f"route has more than {MAX_WAYPOINTS} waypoints")
        route.waypoints.append(waypoint)
    return route


def load_route(path) -> Route:
    """Read a FormatGEO waypoint file."""
    with open(path, newline="") as f:
        return parse_route(f)


def haversine_distance_m(lat1deg: float, lon1deg: float,
                         lat2deg: float, lon2deg: float) -> int:
    """Great-circle distance in whole metres, using the mean earth radius."""
    dlat = (lat2deg - lat1deg) * PI_DIV_180
    dlon = (lon2deg - lon1deg) * PI_DIV_180
    lat1 = lat1deg * PI_DIV_180
    lat2 = lat2deg * PI_DIV_180
    sin_dlat = math.sin(dlat / 2.0)
    sin_dlon = math.sin(dlon / 2.0)
    a = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlon * sin_dlon
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return int(EARTH_RADIUS_M * c + 0.5)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="testroute", description="Show a FormatGEO route.")
    parser.add_argument("route")
    args = parser.parse_args(argv)
    try:
        route = load_route(args.route)
    except OSError as exc:
        print(f"error opening file {args.route}: {exc}", file=sys.stderr)
        return 1
    except RouteFormatError as exc:
        print(exc, file=sys.stderr)
        return 2
    for index, w in enumerate(route.waypoints):
        print(f"{index} : ID {w.id} lat {w.lat_deg:f} lon {w.lon_deg:f} "
              f"alt {w.alt_m:f} radius {w.radius_m:f}")
    print(f"Route distance : {route.total_distance_m() / 1000.0:.1f}km")
    return 0


if __name__ == "__main__":
    sys.exit(main())