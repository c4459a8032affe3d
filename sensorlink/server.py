"""UDP server that acknowledges sensor batches and prints their statistics."""

from __future__ import annotations

import socket
import subprocess
import sys

from .protocol import BATCH_SIZE, unpack_batch
from .stats import compute_batch_stats, format_report

_PROG = "sensorlink-server"


def bind_udp(port):
    """Bind a datagram socket on the wildcard address, trying each address family offered."""
    infos = socket.getaddrinfo(
        None, str(port), socket.AF_UNSPEC, socket.SOCK_DGRAM, 0, socket.AI_PASSIVE
    )
    for family, socktype, proto, _, address in infos:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError:
            continue
        try:
            sock.bind(address)
        except OSError:
            sock.close()
            continue
        return sock
    raise OSError("Could not bind")


def _clear_terminal():
    try:
        subprocess.run(["clear"], check=False)
    except OSError:
        pass


class StatsServer:
    """Receives batch datagrams, acknowledges them and prints their statistics."""

    def __init__(self, sock, out=None, clear_screen=None):
        self.sock = sock
        self.out = out if out is not None else sys.stdout
        self.clear_screen = clear_screen if clear_screen is not None else _clear_terminal

    def handle_datagram(self, data, peer):
        """Process one datagram; return the batch statistics, or None if it was ignored."""
        if len(data) != BATCH_SIZE:
            return None
        self.out.write(f"Datos recibidos de {peer[0]}\n")
        self.out.flush()
        try:
            self.sock.sendto(b"OK", peer)
        except OSError:
            pass
        stats = compute_batch_stats(unpack_batch(data))
        self.clear_screen()
        self.out.write(format_report(stats))
        self.out.flush()
        return stats

    def serve_forever(self):
        """Handle datagrams until the socket is closed."""
        while True:
            try:
                data, peer = self.sock.recvfrom(BATCH_SIZE)
            except OSError:
                if self.sock.fileno() == -1:
                    return
                continue
            self.handle_datagram(data, peer)


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
            StatsServer(sock).serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())