import pytest

from gpsvario.flashlog import FLASH_SECTOR_SIZE, FlashLog, FlashLogFull
from gpsvario.records import (
    TRACK_RECORD_SIZE,
    GpsRecord,
    IbgHeader,
    IbgRecord,
    ImuRecord,
    LogFormatError,
    TrackPoint,
    TrackRecord,
)


def _ibg(gps_flags=0, baro_flags=0, tow=0):
    return IbgRecord(
        header=IbgHeader(gps_flags=gps_flags, baro_flags=baro_flags),
        imu=ImuRecord(1.5, -2.0, 0.25, 10.0, 20.0, 1000.0, 0.5, 0.5, -0.5),
        baro_height_cm=12345 if (gps_flags or baro_flags) else 0,
        gps=GpsRecord(time_of_week_ms=tow, lon_deg7=77000000, lat_deg7=-3000000,
                      height_msl_mm=500000) if gps_flags else GpsRecord(),
    )


def _track():
    return TrackRecord(fix_type=3, num_sv=9, trkpt=TrackPoint(
        pos_dop=120, year=2021, month=6, day=15, hour=10, minute=30, second=5,
        nanoseconds=0, lon_deg7=77000000, lat_deg7=12000000, height_msl_mm=900000))


def test_new_flash_is_empty():
    log = FlashLog(size=8192)
    assert log.is_empty() is True
    assert log.free_address == 0
    assert log.percent_used() == 0
    assert log.num_ibg_records() == 0


def test_full_ibg_record_is_80_bytes_and_reads_back():
    log = FlashLog(size=8192)
    record = _ibg(gps_flags=1, baro_flags=1, tow=1000)
    log.write_ibg_record(record)
    assert log.free_address == 80
    assert log.read_ibg_record(0) == record
    assert log.is_empty() is False


def test_records_of_mixed_sizes_are_appended():
    log = FlashLog(size=8192)
    records = [_ibg(), _ibg(baro_flags=1), _ibg(gps_flags=1, tow=5)]
    address = 0
    for record in records:
        log.write_ibg_record(record)
    for record in records:
        assert log.read_ibg_record(address) == record
        address += record.record_size()
    assert log.free_address == address
    assert log.num_ibg_records() == len(records)


def test_find_free_address_is_close_to_end_of_data():
    log = FlashLog(size=8192)
    for tow in range(7):
        log.write_ibg_record(_ibg(gps_flags=1, baro_flags=1, tow=tow + 1))
    reloaded = FlashLog(data=bytes(log.data))
    assert abs(reloaded.free_address - log.free_address) <= 4


def test_write_fails_when_full():
    log = FlashLog(size=4096)
    record = _ibg()
    written = 0
    with pytest.raises(FlashLogFull):
        while True:
            log.write_ibg_record(record)
            written += 1
    assert log.free_address == written * record.record_size()
    assert log.num_ibg_records() == written


def test_gps_record_written_and_parsed():
    log = FlashLog(size=8192)
    track = _track()
    log.write_gps_record(track)
    assert log.free_address == TRACK_RECORD_SIZE
    assert TrackRecord.from_bytes(bytes(log.data[:TRACK_RECORD_SIZE])) == track


def test_read_ibg_record_rejects_track_record():
    log = FlashLog(size=8192)
    log.write_gps_record(_track())
    with pytest.raises(LogFormatError):
        log.read_ibg_record(0)


def test_erase_whole_chip():
    log = FlashLog(size=8192)
    log.write_ibg_record(_ibg(gps_flags=1, tow=3))
    log.erase(0)
    assert log.data == bytearray(b"\xff" * 8192)
    assert log.free_address == 0
    assert log.is_empty() is True


def test_erase_stops_at_sector_of_address():
    log = FlashLog(size=4 * FLASH_SECTOR_SIZE)
    log.data[2 * FLASH_SECTOR_SIZE] = 0
    log.write_ibg_record(_ibg())
    log.erase(100)
    assert log.is_empty() is True
    assert log.data[2 * FLASH_SECTOR_SIZE] == 0


def test_percent_used():
    log = FlashLog(size=8000)
    log.free_address = 4000
    assert log.percent_used() == 50