# gpsvario

Offline tools and building blocks for a GPS variometer. The package holds
altitude and climb-rate Kalman filters, readers and writers for the binary
flash data log, a model of the flash log itself, GPX export, log splitting,
FormatGEO route files, calibration files, push-button debouncing, and the
NMEA and UBX messages the instrument sends and receives.

It needs nothing beyond the standard library.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Data log format

The flash log holds two kinds of records, little-endian with natural alignment:

* **IBG records** (magic `0xA55A`) for high-rate IMU + barometer + GPS logging.
  The 4-byte header is always followed by an IMU part; a barometer part
  follows when either the baro or the GPS flag is set; a GPS part follows when
  the GPS flag is set.
* **GPS track records** (magic `0x9043`), one per track point.

`gpsvario.records` has the record types `IbgHeader`, `ImuRecord`,
`GpsRecord`, `IbgRecord`, `TrackPoint` and `TrackRecord`.
`IbgRecord.to_bytes`, `IbgRecord.from_bytes`, `IbgRecord.record_size`,
`TrackRecord.to_bytes` and `TrackRecord.from_bytes` convert to and from the
stored layout. Two generators read records from a binary stream:

* `read_ibg_records(stream)` yields `IbgRecord`s; a GPS track header or any
  other magic raises `LogFormatError`.
* `read_log(stream)` yields `IbgRecord`s and `TrackRecord`s in file order; an
  unknown magic raises `LogFormatError`.

An incomplete record at the end of the data is dropped.

```python
from gpsvario.records import read_log

with open("datalog", "rb") as stream:
    for record in read_log(stream):
        print(record)
```

## Flash log

`gpsvario.flashlog.FlashLog` keeps a flash memory image in memory (16 MiB and
fully erased by default, or built from existing bytes). Records are appended
from address 0; programming can only clear bits, as on NOR flash.

* `write_ibg_record(record)` and `write_gps_record(record)` append a record and
  raise `FlashLogFull` when it no longer fits.
* `read_ibg_record(address)` reads an IBG record back.
* `find_free_address()` finds the start of the erased area by binary search;
  `free_address` holds the current append position.
* `num_ibg_records()`, `is_empty()` and `percent_used()` describe the content.
* `erase(until_address)` erases whole 4096-byte sectors up to the one holding
  the address; 0 erases everything.

## Kalman filters

Each filter has a `predict` step and an `update` step that returns the new
`(altitude, climb_rate)` pair. Filter states and covariances are attributes
of the filter object, and each update is logged at debug level.

* `gpsvario.kf.KalmanFilter2`: altitude and climb rate from altitude
  measurements only; `predict(accel_variance, dt)`, `update(z)`.
* `gpsvario.kf.KalmanFilter3`: also estimates accelerometer bias, using
  acceleration in the predict step; `predict(a, dt)`, `update(zm)`.
* `gpsvario.kf4.KalmanFilter4`: fuses altitude and gravity-compensated
  acceleration in the update step; `predict(dt)`, `update(zm, am)`.
* `gpsvario.kf4.KalmanFilter4D`: as `KalmanFilter4`, with adaptive
  uncertainty injection (`k_adapt`) for high-acceleration situations and a
  bias estimate that moves only when acceleration is low.

`gpsvario.kf` also holds the shared configuration constants, such as
`KF_Z_MEAS_VARIANCE`, `KF_ACCEL_VARIANCE` and `KF_SAMPLE_PERIOD_SECS`.

```python
from gpsvario.kf4 import KalmanFilter4D

kf = KalmanFilter4D(accel_variance=100000.0, k_adapt=1.0, z_initial=120000.0)
kf.predict(0.02)
altitude_cm, climb_cps = kf.update(120010.0, 5.0)
```

## Commands

```
gpsvario-logsplit ibg <log> <max_dropout_ms>
gpsvario-logsplit all <log> <max_ibg_dropout_secs> <max_gps_dropout_secs>
gpsvario-gpx track <log>
gpsvario-gpx ibg <log> <year> <month> <day> <hour> <minute>
gpsvario-parseibg <log>
gpsvario-route <file.wpt>
```

* `gpsvario-logsplit ibg` splits an IBG log at GPS time-of-week gaps into
  `<log>_00`, `<log>_01`, ...; `gpsvario-logsplit all` splits a mixed log into
  `<log>_ibg_NN` and `<log>_gps_NN` files. Each new file is printed.
* `gpsvario-gpx` writes `<log>.gpx` from a GPS track log, or from the GPS parts
  of an IBG log whose start time is given.
* `gpsvario-parseibg` prints the record sizes, the numbers of IMU, baro and GPS
  records, then one line per part of each record.
* `gpsvario-route` prints each waypoint of a FormatGEO file and the total route
  distance in km.

## Library helpers

* `gpsvario.logsplit`: `split_ibg_log` and `split_log` return the paths written.
* `gpsvario.gpx`: `track_to_gpx` and `ibg_to_gpx` return GPX text;
  `convert_track_file` and `convert_ibg_file` write `<path>.gpx` and return its
  path.
* `gpsvario.parseibg`: `count_records` returns a `RecordCounts` (with an
  `error` set if the scan stopped at a bad header); `format_records` yields the
  text lines.
* `gpsvario.route`: `parse_route`, `load_route`, `Route` with
  `total_distance_m()`, `Waypoint` and `haversine_distance_m`. Malformed
  waypoint lines are skipped and a missing radius defaults to 50 m; a missing
  `$FormatGEO` header or more than 100 waypoints raises `RouteFormatError`.
* `gpsvario.nmea`: `nmea_checksum`, `lk8ex1(alt_m, climbrate_cps,
  battery_voltage)` and `xctrc(fix, course_deg, climbrate_cps, pressure_pa,
  supply_voltage)` with a `NavFix` build complete sentences ending in the
  checksum and CR LF.
* `gpsvario.ubx`: `ubx_checksum`, `message_rate_command`, `enable_message` and
  `disable_message` build UBX CFG-MSG frames; `KEY_BINDINGS` maps console keys
  to the messages they switch.
* `gpsvario.calib`: `Calibration` with `is_calibrated()`, `parse_calibration`,
  `format_calibration`, `save_calibration`, and `load_calibration`, which
  creates a file with default values when none exists.
* `gpsvario.buttons`: `Button.sample(level)` and `ButtonPanel.debounce(btn0,
  btnl, btnm, btnr)` latch a press after one high sample followed by three low
  ones; `ButtonPanel.clear()` forgets latched presses.

```python
from gpsvario.nmea import lk8ex1
from gpsvario.route import haversine_distance_m

print(lk8ex1(1250, 85, 4.9))
print(haversine_distance_m(46.0, 7.0, 46.1, 7.1))
```

## What the package does not do

The package works on data and messages only. It does not talk to sensors, a
flash chip, a display, a speaker, a serial port or a Bluetooth link: the UBX
and NMEA helpers build bytes and strings but do not send them, and `FlashLog`
works on an in-memory image. It has no orientation (AHRS) or gravity
compensation code, so it cannot derive vertical acceleration from the IMU
parts of a log and has no command that runs the Kalman filters over a log
file. Instrument option files are not read or written.