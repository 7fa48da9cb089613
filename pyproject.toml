[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gpsvario"
version = "0.1.0"
description = "Altitude Kalman filters, flight data log tools, route files and NMEA/UBX message builders for a GPS variometer"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "variometer",
    "gps",
    "kalman-filter",
    "gpx",
    "nmea",
    "ubx",
    "paragliding",
    "flight-log",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gpsvario-logsplit = "gpsvario.logsplit:main"
gpsvario-gpx = "gpsvario.gpx:main"
gpsvario-parseibg = "gpsvario.parseibg:main"
gpsvario-route = "gpsvario.route:main"

[tool.hatch.build.targets.wheel]
packages = ["gpsvario"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
