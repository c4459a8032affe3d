"""Windowed UDP statistics server for fixed-layout 10-byte sensor records."""

from __future__ import annotations

import socket
import struct
import sys
from dataclasses import dataclass

from .server import bind_udp

RECORD_SIZE = 10
RECORDS_PER_BATCH = 10
BATCH_BUFFER_SIZE = RECORD_SIZE * RECORDS_PER_BATCH
MPU6000_SCALE_FACTOR = 16384
GRAVITY = 9.81
DEFAULT_BATCHES_PER_WINDOW = 2
_RECORD_FORMAT = ">4B3h"
_COLOR_CHANNELS = ("red", "green", "blue", "light")
_PROG = "sensorlink-legacy-server"


@dataclass(frozen=True)
class Record:
    """One record: 8-bit color channels and big-endian signed acceleration counts."""

    red: int
    green: int
    blue: int
    light: int
    accel_x: int
    accel_y: int
    accel_z: int

    @property
    def accel_ms2(self):
        """The three axes converted to m/s² at the ±2g range."""
        return tuple(
            value * GRAVITY / MPU6000_SCALE_FACTOR
            for value in (self.accel_x, self.accel_y, self.accel_z)
        )


def parse_records(data):
    """Decode a full receive buffer into its records."""
    if len(data) != BATCH_BUFFER_SIZE:
        raise ValueError(f"a record buffer is {BATCH_BUFFER_SIZE} bytes, got {len(data)}")
    return [Record(*values) for values in struct.iter_unpack(_RECORD_FORMAT, bytes(data))]


@dataclass(frozen=True)
class WindowStats:
    """Maximum, minimum and mean of every channel over one window of records."""

    accel_x_max: float
    accel_x_min: float
    accel_x_mean: float
    accel_y_max: float
    accel_y_min: float
    accel_y_mean: float
    accel_z_max: float
    accel_z_min: float
    accel_z_mean: float
    red_max: int
    red_min: int
    red_mean: int
    green_max: int
    green_min: int
    green_mean: int
    blue_max: int
    blue_min: int
    blue_mean: int
    light_max: int
    light_min: int
    light_mean: int


def summarize_window(records):
    """Compute window statistics; color means use 16-bit sums and integer division."""
    records = list(records)
    if not records:
        raise ValueError("cannot summarize an empty window")
    fields = {}
    axes = zip(*(record.accel_ms2 for record in records))
    for axis, values in zip("xyz", axes):
        fields[f"accel_{axis}_max"] = max(values)
        fields[f"accel_{axis}_min"] = min(values)
        fields[f"accel_{axis}_mean"] = sum(values) / len(values)
    for name in _COLOR_CHANNELS:
        values = [getattr(record, name) for record in records]
        fields[f"{name}_max"] = max(values)
        fields[f"{name}_min"] = min(values)
        fields[f"{name}_mean"] = (sum(values) & 0xFFFF) // len(values)
    return WindowStats(**fields)


def format_window_report(stats):
    """Render the report printed when a window is complete."""
    lines = []
    for axis in "XYZ":
        key = f"accel_{axis.lower()}"
        lines.append(f"{axis} axis maximum acceleration: %f" % getattr(stats, f"{key}_max"))
        separator = " " if axis == "X" else ": "
        lines.append(
            f"{axis} axis minimum acceleration{separator}%f" % getattr(stats, f"{key}_min")
        )
        lines.append(f"{axis} axis mean acceleration: %f" % getattr(stats, f"{key}_mean"))
    for name in _COLOR_CHANNELS:
        label = name.capitalize()
        lines.append(f"Max {label}: %d" % getattr(stats, f"{name}_max"))
        lines.append(f"Min {label}: %d" % getattr(stats, f"{name}_min"))
        lines.append(f"Mean {label}: %d" % getattr(stats, f"{name}_mean"))
    return "\n".join(lines) + "\n"


def ack_byte(length):
    """The one-byte acknowledgement: the low byte of the received length."""
    return bytes((length & 0xFF,))


class WindowAggregator:
    """Collects batches into windows and summarizes each window once it is full.

    Short datagrams only overwrite the start of the receive buffer; the remaining
    bytes keep what an earlier datagram left there.
    """

    def __init__(self, batches_per_window=DEFAULT_BATCHES_PER_WINDOW):
        if batches_per_window < 1:
            raise ValueError("a window needs at least one batch")
        self.batches_per_window = batches_per_window
        self._buffer = bytearray(BATCH_BUFFER_SIZE)
        self._records = []

    def add_batch(self, data):
        """Add one datagram; return the window statistics when the window completes."""
        chunk = bytes(data[:BATCH_BUFFER_SIZE])
        self._buffer[: len(chunk)] = chunk
        self._records.extend(parse_records(self._buffer))
        if len(self._records) < self.batches_per_window * RECORDS_PER_BATCH:
            return None
        records, self._records = self._records, []
        return summarize_window(records)


def _serve(sock, aggregator, out):
    while True:
        try:
            data, peer = sock.recvfrom(BATCH_BUFFER_SIZE)
        except OSError:
            if sock.fileno() == -1:
                return
            continue
        try:
            sent = sock.sendto(ack_byte(len(data)), peer)
        except OSError:
            sent = 0
        if sent != 1:
            print("Error sending response", file=sys.stderr)
        try:
            socket.getnameinfo(peer, socket.NI_NUMERICSERV)
        except socket.gaierror as exc:
            print(f"getnameinfo: {exc.strerror or exc}", file=sys.stderr)
            continue
        stats = aggregator.add_batch(data)
        if stats is not None:
            out.write(format_window_report(stats))
            out.flush()


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print(f"Usage: {_PROG} port", file=sys.stderr)
        return 1
    port = args[0]
    try:
        sock = bind_udp(port)
    except socket.gaierror as exc:
        print(f"getaddrinfo: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except OSError:
        print("Could not bind", file=sys.stderr)
        return 1

    print(f"Servidor UDP escuchando en el puerto {port}...", flush=True)
    with sock:
        try:
            _serve(sock, WindowAggregator(), sys.stdout)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())