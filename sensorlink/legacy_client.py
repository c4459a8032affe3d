"""Text-format sensor client: sends newline-separated batches of readings over UDP."""

from __future__ import annotations

import argparse
import ipaddress
import socket
import sys
import threading

from .i2c import SensorError, open_accelerometer, open_color_sensor

SERVER_IP = "192.168.1.211"
SERVER_PORT = 12345
BUFFER_SIZE = 256
SAMPLES_PER_BATCH = 10
GREETING = "Hello WORLD!!!!!!!!!!!!!!"
DEFAULT_INTERVAL = 1.0
_PROG = "sensorlink-legacy-client"


def format_motion_sample(acceleration):
    """Render one accelerometer reading as the three axes in g."""
    return "%.2f %.2f %.2f" % acceleration.in_g()


def format_color_sample(reading):
    """Render raw red, green, blue and their percentages of clear."""
    percentages = reading.percentages()
    if percentages is None:
        raise ValueError("a color sample needs a non-zero clear channel")
    return "%d %d %d %.2f %.2f %.2f" % (
        reading.red,
        reading.green,
        reading.blue,
        *percentages,
    )


def join_batch(lines):
    """Join sample lines into one message, each line ending in a newline."""
    return "".join(line[: BUFFER_SIZE - 1] + "\n" for line in lines)


class TextSensorClient:
    """Samples both sensors in their own loops and sends text batches to the server."""

    def __init__(self, sock, server, accelerometer, color_sensor, out=None):
        self.sock = sock
        self.server = server
        self.accelerometer = accelerometer
        self.color_sensor = color_sensor
        self.out = out if out is not None else sys.stdout
        self._motion_lines = []
        self._color_lines = []
        self._out_lock = threading.Lock()
        self._stopped = threading.Event()

    def _say(self, text):
        with self._out_lock:
            self.out.write(text + "\n")
            self.out.flush()

    def _send(self, text):
        payload = text.encode("ascii", errors="replace")
        try:
            self.sock.sendto(payload, self.server)
        except OSError as exc:
            print(f"Error al enviar: {exc.strerror or exc}", file=sys.stderr)
        return payload

    def send_greeting(self):
        """Send the greeting message that opens the session; return the bytes sent."""
        return self._send(GREETING)

    def motion_step(self):
        """Take one accelerometer sample; return the batch sent when it fills, else None."""
        self._motion_lines.append(format_motion_sample(self.accelerometer.read()))
        if len(self._motion_lines) < SAMPLES_PER_BATCH:
            return None
        lines, self._motion_lines = self._motion_lines, []
        return self._send(join_batch(lines))

    def color_step(self):
        """Take one color sample; send a full batch and wait for its acknowledgement.

        Samples with a zero clear channel are dropped. Returns the batch sent, or None.
        """
        reading = self.color_sensor.read()
        if reading.clear == 0:
            return None
        self._color_lines.append(format_color_sample(reading))
        if len(self._color_lines) < SAMPLES_PER_BATCH:
            return None
        lines, self._color_lines = self._color_lines, []
        payload = self._send(join_batch(lines))
        try:
            data, _ = self.sock.recvfrom(BUFFER_SIZE - 1)
        except OSError:
            data = b""
        if data:
            self._say("ACK recibido del servidor ")
        return payload

    def _loop(self, step, interval):
        while not self._stopped.is_set():
            step()
            self._stopped.wait(interval)

    def run(self, interval=DEFAULT_INTERVAL):
        """Greet the server, then sample both sensors every ``interval`` seconds."""
        self._stopped.clear()
        self.send_greeting()
        threads = [
            threading.Thread(target=self._loop, args=(step, interval), daemon=True)
            for step in (self.motion_step, self.color_step)
        ]
        for thread in threads:
            thread.start()
        try:
            for thread in threads:
                thread.join()
        finally:
            self._stopped.set()


def _port(text):
    value = int(text)
    if not 0 < value <= 65535:
        raise argparse.ArgumentTypeError("port must be between 1 and 65535")
    return value


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog=_PROG,
        description="Send text batches of accelerometer and color readings over UDP.",
    )
    parser.add_argument("server", nargs="?", default=SERVER_IP, help="server IPv4 address")
    parser.add_argument("port", nargs="?", type=_port, default=SERVER_PORT, help="UDP port")
    parser.add_argument(
        "--interval", type=float, default=DEFAULT_INTERVAL, help="seconds between samples"
    )
    args = parser.parse_args(argv)

    try:
        ipaddress.IPv4Address(args.server)
    except ValueError:
        print(f"Dirección IP inválida: {args.server}", file=sys.stderr)
        return 1

    sensors = []
    try:
        sensors.append(open_accelerometer())
        sensors.append(open_color_sensor())
    except SensorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        for sensor in sensors:
            sensor.device.close()
        return 1
    accelerometer, color_sensor = sensors

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            client = TextSensorClient(
                sock, (args.server, args.port), accelerometer, color_sensor
            )
            client.run(args.interval)
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        print(f"Error al crear socket UDP: {exc.strerror or exc}", file=sys.stderr)
        return 1
    finally:
        for sensor in sensors:
            sensor.device.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())