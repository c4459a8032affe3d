import io
import socket
import threading

import pytest

from sensorlink.protocol import BATCH_SIZE, Sample, pack_batch
from sensorlink.server import StatsServer, bind_udp, main
from sensorlink.stats import compute_batch_stats, format_report


def make_samples():
    return [Sample(i, 2 * i, 3, 100, i * 100, -i, 16384) for i in range(10)]


@pytest.fixture
def sockets():
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind(("127.0.0.1", 0))
    peer = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    peer.bind(("127.0.0.1", 0))
    yield server, peer
    server.close()
    peer.close()


def test_bind_udp_picks_a_port():
    sock = bind_udp(0)
    try:
        assert sock.type == socket.SOCK_DGRAM
        assert sock.getsockname()[1] > 0
    finally:
        sock.close()


def test_bind_udp_bad_service():
    with pytest.raises(OSError):
        bind_udp("not-a-port")


def test_handle_datagram_acks_and_reports(sockets):
    server_sock, peer = sockets
    out = io.StringIO()
    clears = []
    server = StatsServer(server_sock, out, lambda: clears.append(1))
    samples = make_samples()

    stats = server.handle_datagram(pack_batch(samples), peer.getsockname())

    assert stats == compute_batch_stats(samples)
    peer.settimeout(2)
    ack, _ = peer.recvfrom(16)
    assert ack == b"OK"
    assert clears == [1]
    text = out.getvalue()
    assert text.startswith("Datos recibidos de 127.0.0.1\n")
    assert text.endswith(format_report(stats))


def test_handle_datagram_ignores_short(sockets):
    server_sock, peer = sockets
    out = io.StringIO()
    clears = []
    server = StatsServer(server_sock, out, lambda: clears.append(1))

    assert server.handle_datagram(b"\x00" * (BATCH_SIZE - 1), peer.getsockname()) is None
    assert out.getvalue() == ""
    assert clears == []
    peer.setblocking(False)
    with pytest.raises(BlockingIOError):
        peer.recvfrom(16)


def test_serve_forever_handles_and_stops_on_close(sockets):
    server_sock, peer = sockets
    server_sock.settimeout(0.05)
    out = io.StringIO()
    server = StatsServer(server_sock, out, lambda: None)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    samples = make_samples()
    peer.sendto(pack_batch(samples), server_sock.getsockname())
    peer.settimeout(2)
    ack, _ = peer.recvfrom(16)
    assert ack == b"OK"

    server_sock.close()
    thread.join(2)
    assert not thread.is_alive()
    assert format_report(compute_batch_stats(samples)) in out.getvalue()


@pytest.mark.parametrize("argv", [[], ["1", "2"]])
def test_main_usage(capsys, argv):
    assert main(argv) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_bad_port(capsys):
    assert main(["not-a-port"]) == 1
    assert "getaddrinfo:" in capsys.readouterr().err