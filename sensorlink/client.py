"""Sensor client: samples both sensors and sends binary batches over UDP."""

from __future__ import annotations

import ipaddress
import re
import socket
import sys
import time

from .i2c import SensorError, open_accelerometer, open_color_sensor
from .protocol import SAMPLES_PER_BATCH, Sample, pack_batch

ACK_TIMEOUT = 2.0
ACK_SIZE = 2
DEFAULT_INTERVAL = 1.0
_PROG = "sensorlink-client"


class _UsageError(ValueError):
    pass


def _atoi(text):
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_args(argv):
    """Parse ``<server ip> <port>`` into an address tuple."""
    argv = list(argv)
    if len(argv) != 2:
        raise _UsageError(f"expected 2 arguments, got {len(argv)}")
    server_ip, port_text = argv
    port = _atoi(port_text)
    if port <= 0 or port > 65535:
        raise ValueError("Puerto inválido. Debe estar entre 1 y 65535")
    try:
        ipaddress.IPv4Address(server_ip)
    except ValueError as exc:
        raise ValueError(f"Dirección IP inválida: {server_ip}") from exc
    return server_ip, port


class SensorClient:
    """Collects samples from both sensors and ships them to the server in batches."""

    def __init__(self, sock, server, accelerometer, color_sensor, out=None):
        self.sock = sock
        self.server = server
        self.accelerometer = accelerometer
        self.color_sensor = color_sensor
        self.out = out if out is not None else sys.stdout

    def _say(self, text):
        self.out.write(text + "\n")
        self.out.flush()

    @staticmethod
    def _error(text):
        print(text, file=sys.stderr)

    def collect(self):
        """Read both sensors once and combine them into a sample."""
        color = self.color_sensor.read()
        acceleration = self.accelerometer.read()
        return Sample.from_readings(color, acceleration)

    def send_batch(self, samples):
        """Send one batch and wait for the acknowledgement; return its text or None."""
        payload = pack_batch(samples)
        try:
            sent = self.sock.sendto(payload, self.server)
        except OSError as exc:
            self._error(f"Error al enviar: {exc.strerror or exc}")
            return None
        if sent != len(payload):
            self._error("Error al enviar")
            return None
        self._say(f"Datos enviados: {SAMPLES_PER_BATCH} muestras")

        try:
            data, _ = self.sock.recvfrom(ACK_SIZE)
        except (TimeoutError, BlockingIOError):
            self._say("Timeout ACK - Continuando...")
            return None
        except OSError as exc:
            self._error(f"Error recibiendo ACK: {exc.strerror or exc}")
            return None
        if not data:
            return None
        ack = data.split(b"\0", 1)[0].decode("ascii", errors="replace")
        self._say(f"ACK recibido: {ack}")
        return ack

    def run(self, batches=None, interval=DEFAULT_INTERVAL):
        """Sample once per ``interval`` and send every full batch; return batches sent."""
        self.sock.settimeout(ACK_TIMEOUT)
        pending = []
        sent = 0
        while batches is None or sent < batches:
            pending.append(self.collect())
            if len(pending) == SAMPLES_PER_BATCH:
                self.send_batch(pending)
                pending = []
                sent += 1
            if batches is None or sent < batches:
                time.sleep(interval)
        return sent


def _usage(prog=_PROG):
    """Return the usage text for the command."""
    return (
        f"Uso: {prog} <IP_SERVIDOR> <PUERTO>\n"
        f"Ejemplo: {prog} 192.168.0.26 12345"
    )


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        server = parse_args(args)
    except _UsageError:
        print(_usage(), file=sys.stderr)
        return 1
    except ValueError as exc:
        print(exc, file=sys.stderr)
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
            SensorClient(sock, server, accelerometer, color_sensor).run()
    except KeyboardInterrupt:
        pass
    except (SensorError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        for sensor in sensors:
            sensor.device.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())