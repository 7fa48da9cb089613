"""Binary record layouts of the flash data log.

The log holds two kinds of records, told apart by a 16-bit magic value at
the start of each header:

* IBG records (IMU + baro + GPS), written at the IMU sample rate.  The baro
  part is present when either flag is set; the GPS part only when the GPS
  flag is set.
* GPS track records, written at the track logging interval.

All values are little-endian with natural alignment.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Union

IBG_MAGIC = 0xA55A
GPS_MAGIC = 0x9043

RECORD_MAX_BYTES = 80

_HEADER = struct.Struct("<HBB")
_IMU = struct.Struct("<9f")
_BARO = struct.Struct("<i")
_GPS = struct.Struct("<IiiiIiiiI")
_TRKPT = struct.Struct("<HHBBBBB3xiiii")

HEADER_SIZE = _HEADER.size
IMU_SIZE = _IMU.size
BARO_SIZE = _BARO.size
GPS_SIZE = _GPS.size
TRKPT_SIZE = _TRKPT.size
IBG_RECORD_MAX_SIZE = HEADER_SIZE + IMU_SIZE + BARO_SIZE + GPS_SIZE
TRACK_RECORD_SIZE = HEADER_SIZE + TRKPT_SIZE


class LogFormatError(ValueError):
    """Raised when log data does not have the expected layout."""


@dataclass
class IbgHeader:
    """Header of an IBG record: which optional parts follow the IMU part."""

    gps_flags: int = 0
    baro_flags: int = 0

    @property
    def has_baro_record(self) -> bool:
        return bool(self.baro_flags or self.gps_flags)

    @property
    def has_gps_record(self) -> bool:
        return bool(self.gps_flags)

    def body_size(self) -> int:
        """Number of bytes that follow the header."""
        size = IMU_SIZE
        if self.has_baro_record:
            size += BARO_SIZE
        if self.has_gps_record:
            size += GPS_SIZE
        return size


@dataclass
class ImuRecord:
    """Gyro (deg/s), accel (milli-g) and magnetometer samples in the NED frame."""

    gx_dps: float = 0.0
    gy_dps: float = 0.0
    gz_dps: float = 0.0
    ax_mg: float = 0.0
    ay_mg: float = 0.0
    az_mg: float = 0.0
    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0

    def _values(self) -> tuple:
        return (self.gx_dps, self.gy_dps, self.gz_dps,
                self.ax_mg, self.ay_mg, self.az_mg,
                self.mx, self.my, self.mz)


@dataclass
class GpsRecord:
    """GPS navigation sample stored in an IBG record."""

    time_of_week_ms: int = 0
    lon_deg7: int = 0
    lat_deg7: int = 0
    height_msl_mm: int = 0
    vert_accuracy_mm: int = 0
    vel_north_mmps: int = 0
    vel_east_mmps: int = 0
    vel_down_mmps: int = 0
    vel_accuracy_mmps: int = 0

    def _values(self) -> tuple:
        return (self.time_of_week_ms, self.lon_deg7, self.lat_deg7,
                self.height_msl_mm, self.vert_accuracy_mm,
                self.vel_north_mmps, self.vel_east_mmps,
                self.vel_down_mmps, self.vel_accuracy_mmps)


@dataclass
class IbgRecord:
    """One IMU + baro + GPS log record."""

    header: IbgHeader = field(default_factory=IbgHeader)
    imu: ImuRecord = field(default_factory=ImuRecord)
    baro_height_cm: int = 0
    gps: GpsRecord = field(default_factory=GpsRecord)

    def record_size(self) -> int:
        """Size in bytes of the record as stored in the log."""
        return HEADER_SIZE + self.header.body_size()

    def to_bytes(self) -> bytes:
        parts = [
            _HEADER.pack(IBG_MAGIC, self.header.gps_flags, self.header.baro_flags),
            _IMU.pack(*self.imu._values()),
        ]
        if self.header.has_baro_record:
            parts.append(_BARO.pack(self.baro_height_cm))
        if self.header.has_gps_record:
            parts.append(_GPS.pack(*self.gps._values()))
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "IbgRecord":
        """Parse a record from the start of ``data``."""
        if len(data) < HEADER_SIZE:
            raise LogFormatError("data too short for a record header")
        magic, gps_flags, baro_flags = _HEADER.unpack_from(data, 0)
        if magic != IBG_MAGIC:
            raise LogFormatError(f"not an IBG record, magic 0x{magic:04X}")
        header = IbgHeader(gps_flags=gps_flags, baro_flags=baro_flags)
        if len(data) < HEADER_SIZE + header.body_size():
            raise LogFormatError("data too short for the IBG record")
        offset = HEADER_SIZE
        imu = ImuRecord(*_IMU.unpack_from(data, offset))
        offset += IMU_SIZE
        baro_height_cm = 0
        if header.has_baro_record:
            (baro_height_cm,) = _BARO.unpack_from(data, offset)
            offset += BARO_SIZE
        gps = GpsRecord()
        if header.has_gps_record:
            gps = GpsRecord(*_GPS.unpack_from(data, offset))
        return cls(header=header, imu=imu, baro_height_cm=baro_height_cm, gps=gps)


@dataclass
class TrackPoint:
    """A GPS track point with UTC time and position."""

    pos_dop: int = 0
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanoseconds: int = 0
    lon_deg7: int = 0
    lat_deg7: int = 0
    height_msl_mm: int = 0


@dataclass
class TrackRecord:
    """One GPS track log record."""

    fix_type: int = 0
    num_sv: int = 0
    trkpt: TrackPoint = field(default_factory=TrackPoint)

    def to_bytes(self) -> bytes:
        t = self.trkpt
        return _HEADER.pack(GPS_MAGIC, self.fix_type, self.num_sv) + _TRKPT.pack(
            t.pos_dop, t.year, t.month, t.day, t.hour, t.minute, t.second,
            t.nanoseconds, t.lon_deg7, t.lat_deg7, t.height_msl_mm,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "TrackRecord":
        """Parse a track record from the start of ``data``."""
        if len(data) < TRACK_RECORD_SIZE:
            raise LogFormatError("data too short for a track record")
        magic, fix_type, num_sv = _HEADER.unpack_from(data, 0)
        if magic != GPS_MAGIC:
            raise LogFormatError(f"not a GPS track record, magic 0x{magic:04X}")
        trkpt = TrackPoint(*_TRKPT.unpack_from(data, HEADER_SIZE))
        return cls(fix_type=fix_type, num_sv=num_sv, trkpt=trkpt)


def _read_body(stream: BinaryIO, size: int) -> bytes | None:
    body = stream.read(size)
    return body if len(body) == size else None


def read_ibg_records(stream: BinaryIO) -> Iterator[IbgRecord]:
    """Yield IBG records from a binary stream.

    Iteration ends at the end of the data; an incomplete trailing record is
    dropped.  A header with any other magic raises LogFormatError.
    """
    while True:
        head = stream.read(HEADER_SIZE)
        if len(head) < HEADER_SIZE:
            return
        magic, gps_flags, baro_flags = _HEADER.unpack(head)
        if magic == GPS_MAGIC:
            raise LogFormatError("data log is a GPS track file, not an IBG log file")
        if magic != IBG_MAGIC:
            raise LogFormatError(f"magic not found (0x{magic:04X}), unknown type of file")
        body = _read_body(stream, IbgHeader(gps_flags, baro_flags).body_size())
        if body is None:
            return
        yield IbgRecord.from_bytes(head + body)


def read_log(stream: BinaryIO) -> Iterator[Union[IbgRecord, TrackRecord]]:
    """Yield IBG and GPS track records, in order, from a mixed log stream."""
    while True:
        head = stream.read(HEADER_SIZE)
        if len(head) < HEADER_SIZE:
            return
        magic, flag_a, flag_b = _HEADER.unpack(head)
        if magic == IBG_MAGIC:
            body = _read_body(stream, IbgHeader(flag_a, flag_b).body_size())
            if body is None:
                return
            yield IbgRecord.from_bytes(head + body)
        elif magic == GPS_MAGIC:
            body = _read_body(stream, TRKPT_SIZE)
            if body is None:
                return
            yield TrackRecord.from_bytes(head + body)
        else:
            raise LogFormatError(f"unknown magic value 0x{magic:04X} in header")