"""Console monitor that prints accelerometer and color readings periodically."""

from __future__ import annotations

import argparse
import sys
import threading
import time

from .i2c import DEFAULT_BUS, SensorError, open_accelerometer, open_color_sensor

DEFAULT_INTERVAL = 0.5


def format_acceleration(acceleration):
    """Render one accelerometer reading as a console line."""
    gx, gy, gz = acceleration.in_g()
    return "[MPU-6000] Aceleración: X=%d (%.2fg), Y=%d (%.2fg), Z=%d (%.2fg)" % (
        acceleration.x,
        gx,
        acceleration.y,
        gy,
        acceleration.z,
        gz,
    )


def format_color(reading):
    """Render one color reading as console lines; percentages only when clear is non-zero."""
    lines = [
        "[TCS3472] Rojo=%d, Verde=%d, Azul=%d, Claridad=%d"
        % (reading.red, reading.green, reading.blue, reading.clear)
    ]
    percentages = reading.percentages()
    if percentages is not None:
        lines.append("[TCS3472] Rojo=%.2f%%, Verde=%.2f%%, Azul=%.2f%%" % percentages)
    return lines


def _poll(read, render, out, interval, iterations):
    count = 0
    while iterations is None or count < iterations:
        lines = render(read())
        out.write("".join(line + "\n" for line in lines))
        out.flush()
        count += 1
        if iterations is None or count < iterations:
            time.sleep(interval)
    return count


def monitor_accelerometer(sensor, out=None, interval=DEFAULT_INTERVAL, iterations=None):
    """Print accelerometer readings every ``interval`` seconds; return how many were printed."""
    out = out if out is not None else sys.stdout
    return _poll(sensor.read, lambda a: [format_acceleration(a)], out, interval, iterations)


def monitor_color(sensor, out=None, interval=DEFAULT_INTERVAL, iterations=None):
    """Print color readings every ``interval`` seconds; return how many were printed."""
    out = out if out is not None else sys.stdout
    return _poll(sensor.read, format_color, out, interval, iterations)


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="sensorlink-monitor",
        description="Print MPU-6000 and TCS3472 readings.",
    )
    parser.add_argument("--bus", default=DEFAULT_BUS, help="I2C bus device")
    parser.add_argument(
        "--sensor",
        choices=("both", "accel", "color"),
        default="both",
        help="which sensor to monitor",
    )
    parser.add_argument(
        "--interval", type=float, default=DEFAULT_INTERVAL, help="seconds between readings"
    )
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)
    sensors = []
    try:
        if args.sensor in ("both", "accel"):
            sensors.append(("accel", open_accelerometer(args.bus)))
        if args.sensor in ("both", "color"):
            sensors.append(("color", open_color_sensor(args.bus)))
    except SensorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        for _, sensor in sensors:
            sensor.device.close()
        return 1

    workers = {"accel": monitor_accelerometer, "color": monitor_color}
    threads = [
        threading.Thread(
            target=workers[kind],
            args=(sensor, sys.stdout, args.interval, None),
            daemon=True,
        )
        for kind, sensor in sensors
    ]
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        pass
    finally:
        for _, sensor in sensors:
            sensor.device.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())