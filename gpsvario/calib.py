"""Sensor calibration parameters kept in a ``calib.txt`` text file.

Each line holds a parameter name and an integer value.  Lines starting with
'#' and blank lines are ignored, as are unknown names.  Values are stored
as signed 16-bit integers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_CALIB_PARAMS = 12
DEFAULT_MAG_SENS = 280

# File parameter names, in file order, and the attributes they set.
_FILE_NAMES = {
    "axBias": "ax_bias",
    "ayBias": "ay_bias",
    "azBias": "az_bias",
    "gxBias": "gx_bias",
    "gyBias": "gy_bias",
    "gzBias": "gz_bias",
    "mxBias": "mx_bias",
    "myBias": "my_bias",
    "mzBias": "mz_bias",
    "mxSens": "mx_sens",
    "mySens": "my_sens",
    "mzSens": "mz_sens",
}

_NAME_DELIMS = " ,=\t"
_VALUE_DELIMS = " \t[\r\n"
_LONG_MIN = -(2 ** 63)
_LONG_MAX = 2 ** 63 - 1
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class Calibration:
    """Accelerometer, gyroscope and magnetometer biases and magnetometer sensitivity."""

    ax_bias: int = 0
    ay_bias: int = 0
    az_bias: int = 0
    gx_bias: int = 0
    gy_bias: int = 0
    gz_bias: int = 0
    mx_bias: int = 0
    my_bias: int = 0
    mz_bias: int = 0
    mx_sens: int = DEFAULT_MAG_SENS
    my_sens: int = DEFAULT_MAG_SENS
    mz_sens: int = DEFAULT_MAG_SENS

    def is_calibrated(self) -> bool:
        """False if the accelerometer or the magnetometer biases are all zero."""
        accel_unset = self.ax_bias == 0 and self.ay_bias == 0 and self.az_bias == 0
        mag_unset = self.mx_bias == 0 and self.my_bias == 0 and self.mz_bias == 0
        return not (accel_unset or mag_unset)


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _to_int16(token: str) -> int:
    """Leading decimal integer of ``token`` (0 if none), wrapped to 16 bits."""
    match = _LEADING_INT.match(token)
    if match is None:
        return 0
    value = min(max(int(match.group(1)), _LONG_MIN), _LONG_MAX)
    return _int16(value)


def _next_token(text: str, pos: int, delims: str) -> tuple[str | None, int]:
    d = re.escape(delims)
    match = re.compile(f"[{d}]*([^{d}]+)[{d}]?").match(text, pos)
    if match is None:
        return None, len(text)
    return match.group(1), match.end()


def parse_calibration(text: str) -> Calibration:
    """Build a calibration from the text of a calibration file.

    Parameters that do not appear keep their default values.
    """
    calib = Calibration()
    for line in text.split("\n"):
        body = line.lstrip(" \t")
        if body[:1] in ("#", "\r"):
            continue
        name, pos = _next_token(body, 0, _NAME_DELIMS)
        if name is None:
            continue
        value, _ = _next_token(body, pos, _VALUE_DELIMS)
        if value is None:
            continue
        attr = _FILE_NAMES.get(name)
        if attr is None:
            logger.debug("ignoring unknown calibration parameter %s", name)
            continue
        setattr(calib, attr, _to_int16(value))
    return calib


def format_calibration(calib: Calibration) -> str:
    """Text of a calibration file holding every parameter."""
    return "".join(
        f"{name} {getattr(calib, attr)}\r\n" for name, attr in _FILE_NAMES.items()
    )


def save_calibration(calib: Calibration, path) -> None:
    """Write the calibration file, replacing any existing one."""
    Path(path).write_text(format_calibration(calib), newline="")


def load_calibration(path) -> Calibration:
    """Read the calibration file.

    If it does not exist, a file with default values is created and the
    defaults are returned.
    """
    try:
        text = Path(path).read_text(newline="")
    except FileNotFoundError:
        logger.debug("%s not found, creating with defaults", path)
        calib = Calibration()
        save_calibration(calib, path)
        return calib
    return parse_calibration(text)


assert len(_FILE_NAMES) == MAX_CALIB_PARAMS == len(fields(Calibration))