"""Data log kept in a SPI NOR flash image.

Records are appended from address 0 upwards.  Erased flash reads as 0xFF, so
the first free address can be found again after a restart by a binary search
for the start of the erased area.
"""

from __future__ import annotations

import struct

from gpsvario.records import (
    HEADER_SIZE,
    IBG_RECORD_MAX_SIZE,
    RECORD_MAX_BYTES,
    TRACK_RECORD_SIZE,
    IbgHeader,
    IbgRecord,
    TrackRecord,
)

FLASH_SIZE_BYTES = 16777216
FLASH_SECTOR_SIZE = 4096

_ERASED_MAGIC = 0xFFFF
_ERASED_WORD = 0xFFFFFFFF
_WORD = struct.Struct("<I")
_HEADER = struct.Struct("<HBB")


class FlashLogFull(Exception):
    """Raised when a record no longer fits in the flash."""


class FlashLog:
    """An append-only record log on a flash memory image.

    ``data`` is the raw flash content; a new image starts fully erased.
    Programming can only clear bits, as on real NOR flash.
    """

    def __init__(self, size: int = FLASH_SIZE_BYTES, data: bytes | None = None) -> None:
        self.data = bytearray(b"\xff" * size) if data is None else bytearray(data)
        self.size = len(self.data)
        if self.size < IBG_RECORD_MAX_SIZE + RECORD_MAX_BYTES:
            raise ValueError(f"flash size {self.size} is too small for a data log")
        self.free_address = self.find_free_address()

    @property
    def max_address(self) -> int:
        """Highest address at which a record of maximum size may start."""
        return self.size - RECORD_MAX_BYTES

    def _read(self, address: int, count: int) -> bytes:
        return bytes(self.data[address:address + count])

    def _program(self, address: int, payload: bytes) -> None:
        end = address + len(payload)
        self.data[address:end] = bytes(
            old & new for old, new in zip(self.data[address:end], payload)
        )

    def erase(self, until_address: int) -> None:
        """Erase every sector from address 0 up to the one holding ``until_address``.

        An address of 0 erases the whole flash.
        """
        if until_address == 0:
            until_address = self.size - 1
        last_sector = until_address & 0xFFFFF000
        for sector in range(0, min(last_sector, self.size - 1) + 1, FLASH_SECTOR_SIZE):
            end = min(sector + FLASH_SECTOR_SIZE, self.size)
            self.data[sector:end] = b"\xff" * (end - sector)
        self.free_address = 0

    def is_empty(self) -> bool:
        """True if no record header has been written at address 0."""
        magic, _, _ = _HEADER.unpack_from(self.data, 0)
        return magic == _ERASED_MAGIC

    def num_ibg_records(self) -> int:
        """Count the IBG records from the start of the flash to the erased area."""
        address = 0
        limit = self.size - IBG_RECORD_MAX_SIZE
        count = 0
        while address < limit:
            magic, gps_flags, baro_flags = _HEADER.unpack_from(self.data, address)
            if magic == _ERASED_MAGIC:
                break
            address += HEADER_SIZE + IbgHeader(gps_flags, baro_flags).body_size()
            count += 1
        return count

    def find_free_address(self) -> int:
        """Binary search for the start of the erased area.

        The result is within four bytes of the true end of the written data.
        """
        lo = 0
        hi = self.size - 4
        mid = ((lo + hi) // 2) & ~1
        while hi > lo + 4:
            (word,) = _WORD.unpack_from(self.data, mid)
            if word == _ERASED_WORD:
                hi = mid
            else:
                lo = mid
            mid = ((lo + hi) // 2) & ~1
        return mid

    def write_ibg_record(self, record: IbgRecord) -> None:
        """Append an IBG record, or raise FlashLogFull."""
        if self.free_address > self.max_address - IBG_RECORD_MAX_SIZE:
            raise FlashLogFull("flash data log is full")
        payload = record.to_bytes()
        self._program(self.free_address, payload)
        self.free_address += len(payload)

    def read_ibg_record(self, address: int) -> IbgRecord:
        """Read the IBG record at ``address``; LogFormatError if there is none."""
        return IbgRecord.from_bytes(self._read(address, IBG_RECORD_MAX_SIZE))

    def write_gps_record(self, record: TrackRecord) -> None:
        """Append a GPS track record, or raise FlashLogFull."""
        if self.free_address > self.max_address - TRACK_RECORD_SIZE:
            raise FlashLogFull("flash data log is full")
        payload = record.to_bytes()
        self._program(self.free_address, payload)
        self.free_address += len(payload)

    def percent_used(self) -> int:
        """Used part of the flash, rounded to a whole percentage."""
        return int(0.5 + 100.0 * self.free_address / self.size)