"""Simple UDP server that prints each message and answers with a fixed reply."""

from __future__ import annotations

import argparse
import socket
import sys

PORT = 12345
BUFFER_SIZE = 1024
REPLY = b"Mensaje recibido por el servidor."


def describe_message(data, peer):
    """Render the lines printed for a received message; the text ends at the first NUL."""
    text = bytes(data).split(b"\0", 1)[0].decode("utf-8", errors="replace")
    return f"Mensaje recibido desde {peer[0]}:{peer[1]}\nContenido: {text}\n"


def serve(sock, out=None, limit=None):
    """Print and answer messages until ``limit`` are handled; return how many were."""
    out = out if out is not None else sys.stdout
    handled = 0
    while limit is None or handled < limit:
        try:
            data, peer = sock.recvfrom(BUFFER_SIZE)
        except OSError as exc:
            if sock.fileno() == -1:
                break
            print(f"Error al recibir: {exc.strerror or exc}", file=sys.stderr)
            continue
        out.write(describe_message(data, peer))
        out.flush()
        try:
            sock.sendto(REPLY, peer)
        except OSError:
            pass
        handled += 1
    return handled


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="sensorlink-echo-server",
        description="Print received UDP messages and acknowledge them.",
    )
    parser.add_argument("port", nargs="?", type=int, default=PORT, help="UDP port")
    args = parser.parse_args(argv)

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        print(f"Error al crear el socket: {exc.strerror or exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            sock.bind(("", args.port))
        except OSError as exc:
            print(f"Error al enlazar: {exc.strerror or exc}", file=sys.stderr)
            return 1
        print(f"Servidor UDP escuchando en el puerto {args.port}...", flush=True)
        try:
            serve(sock)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())