"""Binary batch format exchanged between the sensor client and the server."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass

SAMPLES_PER_BATCH = 10
VALUES_PER_SAMPLE = 7
_SAMPLE_FORMAT = "<7h"
SAMPLE_SIZE = struct.calcsize(_SAMPLE_FORMAT)
BATCH_SIZE = SAMPLES_PER_BATCH * SAMPLE_SIZE


def _to_int16(value):
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


@dataclass(frozen=True)
class Sample:
    """One combined reading: color channels followed by acceleration counts."""

    red: int
    green: int
    blue: int
    clear: int
    accel_x: int
    accel_y: int
    accel_z: int

    @staticmethod
    def from_readings(color, acceleration):
        """Combine a color reading and an acceleration into 16-bit signed values."""
        return Sample(
            red=_to_int16(color.red),
            green=_to_int16(color.green),
            blue=_to_int16(color.blue),
            clear=_to_int16(color.clear),
            accel_x=_to_int16(acceleration.x),
            accel_y=_to_int16(acceleration.y),
            accel_z=_to_int16(acceleration.z),
        )


def pack_batch(samples):
    """Encode exactly one batch of samples as little-endian int16 values."""
    samples = list(samples)
    if len(samples) != SAMPLES_PER_BATCH:
        raise ValueError(f"a batch holds {SAMPLES_PER_BATCH} samples, got {len(samples)}")
    try:
        return b"".join(struct.pack(_SAMPLE_FORMAT, *astuple(s)) for s in samples)
    except struct.error as exc:
        raise ValueError(f"sample value out of int16 range: {exc}") from exc


def unpack_batch(data):
    """Decode one batch datagram into its samples."""
    if len(data) != BATCH_SIZE:
        raise ValueError(f"a batch is {BATCH_SIZE} bytes, got {len(data)}")
    return [Sample(*values) for values in struct.iter_unpack(_SAMPLE_FORMAT, bytes(data))]