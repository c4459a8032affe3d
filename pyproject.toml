[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sensorlink"
version = "0.1.0"
description = "Read MPU-6000 accelerometer and TCS3472 colour sensors over I2C and stream batches to a UDP statistics server"
requires-python = ">=3.10"
dependencies = []
keywords = ["i2c", "udp", "sensors", "mpu6000", "tcs3472", "telemetry", "iot"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sensorlink-monitor = "sensorlink.monitor:main"
sensorlink-client = "sensorlink.client:main"
sensorlink-server = "sensorlink.server:main"
sensorlink-legacy-server = "sensorlink.legacy_server:main"
sensorlink-echo-server = "sensorlink.echo_server:main"
sensorlink-legacy-client = "sensorlink.legacy_client:main"

[tool.hatch.build.targets.wheel]
packages = ["sensorlink"]

[tool.pytest.ini_options]
addopts = "-ra"
