"""I2C bus access and drivers for the MPU-6000 accelerometer and TCS3472 color sensor."""

from __future__ import annotations

import fcntl
import os
import struct
import time
from dataclasses import dataclass

DEFAULT_BUS = "/dev/i2c-1"
I2C_SLAVE = 0x0703

# MPU-6000
MPU6050_ADDR = 0x68
PWR_MGMT_1 = 0x6B
ACCEL_XOUT_H = 0x3B
ACCEL_SCALE = 16384.0

# TCS3472
TCS3472_ADDR = 0x29
COMMAND_BIT = 0x80
ENABLE = 0x00
ATIME = 0x01
CONTROL = 0x0F
CDATA = 0x14
ENABLE_PON = 0x01
ENABLE_AEN = 0x02

_POWER_ON_DELAY = 0.003


class SensorError(Exception):
    """Raised when an I2C bus or sensor cannot be used."""


class I2CDevice:
    """A single device on an I2C bus, selected by its slave address."""

    def __init__(self, address, bus_path=DEFAULT_BUS):
        self.address = address
        self.bus_path = bus_path
        try:
            self._fd = os.open(bus_path, os.O_RDWR)
        except OSError as exc:
            raise SensorError(f"cannot open I2C bus {bus_path}: {exc.strerror}") from exc
        try:
            fcntl.ioctl(self._fd, I2C_SLAVE, address)
        except OSError as exc:
            os.close(self._fd)
            self._fd = None
            raise SensorError(
                f"cannot select device 0x{address:02x} on {bus_path}: {exc.strerror}"
            ) from exc

    def _descriptor(self):
        if self._fd is None:
            raise SensorError(f"I2C device 0x{self.address:02x} is closed")
        return self._fd

    def _write(self, data):
        try:
            os.write(self._descriptor(), data)
        except OSError as exc:
            raise SensorError(f"I2C write failed: {exc.strerror}") from exc

    def write_register(self, reg, value):
        """Write one byte to a register."""
        self._write(bytes((reg, value)))

    def read_block(self, reg, length):
        """Read ``length`` bytes starting at register ``reg``."""
        self._write(bytes((reg,)))
        try:
            data = os.read(self._descriptor(), length)
        except OSError as exc:
            raise SensorError(f"I2C read failed: {exc.strerror}") from exc
        if len(data) < length:
            raise SensorError(f"short I2C read: wanted {length} bytes, got {len(data)}")
        return data

    def read_word(self, reg):
        """Read a little-endian 16-bit word from register ``reg``."""
        return decode_word(self.read_block(reg, 2))

    def close(self):
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


@dataclass(frozen=True)
class Acceleration:
    """Raw signed accelerometer counts on three axes."""

    x: int
    y: int
    z: int

    def in_g(self):
        """The three axes converted to g at the ±2g range."""
        return (self.x / ACCEL_SCALE, self.y / ACCEL_SCALE, self.z / ACCEL_SCALE)


@dataclass(frozen=True)
class ColorReading:
    """Raw clear, red, green and blue channel counts."""

    clear: int
    red: int
    green: int
    blue: int

    def percentages(self):
        """Red, green and blue as a percentage of clear, or None when clear is zero."""
        if self.clear == 0:
            return None
        return (
            self.red / self.clear * 100,
            self.green / self.clear * 100,
            self.blue / self.clear * 100,
        )


def decode_acceleration(data):
    """Decode six big-endian bytes into signed X, Y and Z counts."""
    if len(data) != 6:
        raise ValueError(f"acceleration data must be 6 bytes, got {len(data)}")
    return Acceleration(*struct.unpack(">hhh", bytes(data)))


def decode_word(data):
    """Decode two little-endian bytes into an unsigned word."""
    if len(data) != 2:
        raise ValueError(f"word data must be 2 bytes, got {len(data)}")
    return struct.unpack("<H", bytes(data))[0]


class Accelerometer:
    """MPU-6000 accelerometer."""

    def __init__(self, device):
        self.device = device

    def wake(self):
        """Leave sleep mode."""
        self.device.write_register(PWR_MGMT_1, 0x00)

    def read(self):
        return decode_acceleration(self.device.read_block(ACCEL_XOUT_H, 6))


class ColorSensor:
    """TCS3472 color sensor."""

    def __init__(self, device):
        self.device = device

    def power_on(self):
        """Power up, enable the ADC, set 700 ms integration and 1x gain."""
        self.device.write_register(COMMAND_BIT | ENABLE, ENABLE_PON)
        time.sleep(_POWER_ON_DELAY)
        self.device.write_register(COMMAND_BIT | ENABLE, ENABLE_PON | ENABLE_AEN)
        self.device.write_register(COMMAND_BIT | ATIME, 0x00)
        self.device.write_register(COMMAND_BIT | CONTROL, 0x01)

    def read(self):
        clear, red, green, blue = (
            self.device.read_word(COMMAND_BIT | (CDATA + offset)) for offset in (0, 2, 4, 6)
        )
        return ColorReading(clear=clear, red=red, green=green, blue=blue)


def open_accelerometer(bus_path=DEFAULT_BUS):
    """Open the MPU-6000 on ``bus_path`` and wake it."""
    device = I2CDevice(MPU6050_ADDR, bus_path)
    try:
        sensor = Accelerometer(device)
        sensor.wake()
    except Exception:
        device.close()
        raise
    return sensor


def open_color_sensor(bus_path=DEFAULT_BUS):
    """Open the TCS3472 on ``bus_path`` and power it on."""
    device = I2CDevice(TCS3472_ADDR, bus_path)
    try:
        sensor = ColorSensor(device)
        sensor.power_on()
    except Exception:
        device.close()
        raise
    return sensor