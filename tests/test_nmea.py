import pytest

from gpsvario.nmea import NavFix, lk8ex1, nmea_checksum, xctrc


def _split(sentence):
    body, tail = sentence.split("*")
    return body + "*", tail


def test_checksum_of_empty_body():
    assert nmea_checksum("$") == 0


def test_checksum_single_char():
    assert nmea_checksum("$A") == ord("A")


def test_checksum_stops_at_star():
    assert nmea_checksum("$AB*CD") == nmea_checksum("$AB")


def test_checksum_is_xor():
    assert nmea_checksum("$AB") == nmea_checksum("$A") ^ nmea_checksum("$B")


def test_lk8ex1_fields_and_checksum():
    sentence = lk8ex1(123, -45, 4.2)
    body, tail = _split(sentence)
    assert body == "$LK8EX1,999999,123,-45,99,4.2*"
    assert tail.endswith("\r\n")
    digits = tail[:-2]
    assert len(digits) == 2 and digits == digits.upper()
    assert int(digits, 16) == nmea_checksum(body)


def _example_fix(**changes):
    values = dict(year=2015, month=1, day=5, hour=16, minute=34, second=33,
                  nanoseconds=360000000, lat_deg7=469475080, lon_deg7=74531170,
                  height_msl_mm=540320, ground_speed_mmps=0)
    values.update(changes)
    return NavFix(**values)


def test_xctrc_example():
    sentence = xctrc(_example_fix(), 270.4, 278, 96493, 4.9)
    body, tail = _split(sentence)
    assert body == "$XCTRC,2015,1,5,16,34,33,36,46.947508,7.453117,540.32,0.00,270.4,2.78,,,,964.93,98*"
    assert int(tail[:-2], 16) == nmea_checksum(body)


@pytest.mark.parametrize("voltage, expected", [(6.0, "100"), (-1.0, "0")])
def test_xctrc_battery_clamped(voltage, expected):
    body, _ = _split(xctrc(_example_fix(), 0.0, 0, 100000, voltage))
    assert body[:-1].split(",")[-1] == expected


def test_xctrc_centiseconds_truncate():
    body, _ = _split(xctrc(_example_fix(nanoseconds=369999999), 0.0, 0, 100000, 5.0))
    assert body.split(",")[7] == "36"