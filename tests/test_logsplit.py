import pytest

from gpsvario.logsplit import main, split_ibg_log, split_log
from gpsvario.records import (
    GpsRecord,
    IbgHeader,
    IbgRecord,
    ImuRecord,
    LogFormatError,
    TrackPoint,
    TrackRecord,
)


def _ibg(tow=None):
    if tow is None:
        return IbgRecord(header=IbgHeader(), imu=ImuRecord(az_mg=1000.0))
    return IbgRecord(header=IbgHeader(gps_flags=1, baro_flags=1),
                     imu=ImuRecord(az_mg=1000.0), baro_height_cm=50000,
                     gps=GpsRecord(time_of_week_ms=tow, lon_deg7=1, lat_deg7=2))


def _track(day, hour, minute, second):
    return TrackRecord(fix_type=3, num_sv=8, trkpt=TrackPoint(
        year=2021, month=6, day=day, hour=hour, minute=minute, second=second))


def _write(path, records):
    path.write_bytes(b"".join(r.to_bytes() for r in records))


def test_split_ibg_log_at_gap(tmp_path):
    log = tmp_path / "datalog"
    first = [_ibg(1000), _ibg(), _ibg(1100), _ibg(1200)]
    second = [_ibg(5000), _ibg(), _ibg(5100)]
    _write(log, first + second)
    paths = split_ibg_log(log, 200)
    assert [p.name for p in paths] == ["datalog_00", "datalog_01"]
    assert paths[0].read_bytes() == b"".join(r.to_bytes() for r in first)
    assert paths[1].read_bytes() == b"".join(r.to_bytes() for r in second)


def test_split_ibg_log_single_session(tmp_path):
    log = tmp_path / "datalog"
    records = [_ibg(1000 + 100 * n) for n in range(5)]
    _write(log, records)
    paths = split_ibg_log(log, 200)
    assert len(paths) == 1
    assert paths[0].read_bytes() == log.read_bytes()


def test_split_ibg_log_rejects_track_file(tmp_path):
    log = tmp_path / "track"
    _write(log, [_track(1, 0, 0, 0)])
    with pytest.raises(LogFormatError):
        split_ibg_log(log, 200)


def test_split_ibg_log_rejects_unknown_data(tmp_path):
    log = tmp_path / "junk"
    log.write_bytes(b"\x00" * 64)
    with pytest.raises(LogFormatError):
        split_ibg_log(log, 200)


def test_split_log_rejects_unknown_magic(tmp_path):
    log = tmp_path / "flash"
    log.write_bytes(_ibg(1000).to_bytes() + b"\x12\x34\x00\x00" + b"\x00" * 40)
    with pytest.raises(LogFormatError):
        split_log(log, 1, 10)


def test_main_ibg_mode(tmp_path):
    log = tmp_path / "datalog"
    _write(log, [_ibg(1000), _ibg(9000)])
    assert main(["ibg", str(log), "200"]) == 0
    assert (tmp_path / "datalog_00").exists()
    assert (tmp_path / "datalog_01").exists()


def test_main_reports_missing_file(tmp_path):
    assert main(["all", str(tmp_path / "missing"), "1", "10"]) == 1


def test_main_reports_wrong_file_type(tmp_path):
    log = tmp_path / "track"
    _write(log, [_track(1, 0, 0, 0)])
    assert main(["ibg", str(log), "200"]) == 2