"""GPS variometer tools: altitude Kalman filters, flash data log records and
tools, GPX export, routes, calibration files, button debouncing and NMEA/UBX
message builders."""

__version__ = "0.1.0"