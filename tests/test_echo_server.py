import io
import socket

import pytest

from sensorlink.echo_server import REPLY, describe_message, main, serve


def test_describe_message_format():
    text = describe_message(b"hola", ("127.0.0.1", 5000))
    assert text == "Mensaje recibido desde 127.0.0.1:5000\nContenido: hola\n"


def test_describe_message_stops_at_nul():
    text = describe_message(b"abc\0def", ("10.0.0.1", 1))
    assert text.endswith("Contenido: abc\n")
    assert "def" not in text


def test_serve_prints_and_replies():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server, socket.socket(
        socket.AF_INET, socket.SOCK_DGRAM
    ) as client:
        server.bind(("127.0.0.1", 0))
        client.bind(("127.0.0.1", 0))
        client.settimeout(5)
        client.sendto(b"Hello WORLD", server.getsockname())
        out = io.StringIO()
        assert serve(server, out, limit=1) == 1
        reply, _ = client.recvfrom(1024)
        assert reply == REPLY
        port = client.getsockname()[1]
        assert out.getvalue() == (
            f"Mensaje recibido desde 127.0.0.1:{port}\nContenido: Hello WORLD\n"
        )


def test_serve_with_zero_limit_handles_nothing():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server:
        out = io.StringIO()
        assert serve(server, out, limit=0) == 0
        assert out.getvalue() == ""


def test_main_rejects_non_numeric_port():
    with pytest.raises(SystemExit):
        main(["abc"])


def test_main_reports_bind_failure(capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as taken:
        taken.bind(("", 0))
        port = taken.getsockname()[1]
        assert main([str(port)]) == 1
    assert "Error al enlazar" in capsys.readouterr().err