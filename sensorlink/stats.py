"""Per-batch statistics computed by the server."""

from __future__ import annotations

import math
from dataclasses import dataclass

_ACCEL_MIN_START = 32767.0
_ACCEL_MAX_START = -32768.0
# Color minimums start here and are kept, like maximums and sums, as unsigned 16-bit.
_COLOR_MIN_START = 256
_COLOR_MAX_START = 0


@dataclass(frozen=True)
class ChannelStats:
    """Mean, population standard deviation, minimum and maximum of one channel."""

    mean: float
    stddev: float
    minimum: float
    maximum: float


@dataclass(frozen=True)
class BatchStats:
    """Statistics for the acceleration axes and the color channels of one batch."""

    accel_x: ChannelStats
    accel_y: ChannelStats
    accel_z: ChannelStats
    red: ChannelStats
    green: ChannelStats
    blue: ChannelStats


def _stddev(values, mean):
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def _accel_channel(values):
    mean = sum(values) / len(values)
    return ChannelStats(
        mean=mean,
        stddev=_stddev(values, mean),
        minimum=float(min(_ACCEL_MIN_START, *values)),
        maximum=float(max(_ACCEL_MAX_START, *values)),
    )


def _color_channel(values):
    low, high, total = _COLOR_MIN_START, _COLOR_MAX_START, 0
    for value in values:
        if value > high:
            high = value & 0xFFFF
        if value < low:
            low = value & 0xFFFF
        total = (total + value) & 0xFFFF
    mean = total // len(values)
    return ChannelStats(mean=mean, stddev=_stddev(values, mean), minimum=low, maximum=high)


def compute_batch_stats(samples):
    """Compute statistics over a batch of samples."""
    samples = list(samples)
    if not samples:
        raise ValueError("cannot compute statistics of an empty batch")
    return BatchStats(
        accel_x=_accel_channel([s.accel_x for s in samples]),
        accel_y=_accel_channel([s.accel_y for s in samples]),
        accel_z=_accel_channel([s.accel_z for s in samples]),
        red=_color_channel([s.red for s in samples]),
        green=_color_channel([s.green for s in samples]),
        blue=_color_channel([s.blue for s in samples]),
    )


def format_report(stats):
    """Render the statistics report printed for each batch."""
    lines = ["", "--- Estadísticas completas ---"]
    for axis, channel in (("X", stats.accel_x), ("Y", stats.accel_y), ("Z", stats.accel_z)):
        lines.append(
            "Aceleración %s: Media=%.2f, StdDev=%.2f, Min=%.2f, Max=%.2f"
            % (axis, channel.mean, channel.stddev, channel.minimum, channel.maximum)
        )
    for name, channel in (("Rojo", stats.red), ("Verde", stats.green), ("Azul", stats.blue)):
        lines.append(
            "Color %s: Media=%.2d, StdDev=%.2f, Min=%d, Max=%d"
            % (name, channel.mean, channel.stddev, channel.minimum, channel.maximum)
        )
    return "\n".join(lines) + "\n"