import io

import pytest

from sensorlink.i2c import Acceleration, ColorReading
from sensorlink.legacy_client import (
    GREETING,
    SAMPLES_PER_BATCH,
    TextSensorClient,
    format_color_sample,
    format_motion_sample,
    join_batch,
    main,
)

SERVER = ("127.0.0.1", 12345)


class FakeSocket:
    def __init__(self, replies=()):
        self.sent = []
        self.replies = list(replies)

    def sendto(self, data, address):
        self.sent.append((bytes(data), address))
        return len(data)

    def recvfrom(self, size):
        if not self.replies:
            raise TimeoutError("no reply")
        return self.replies.pop(0)[:size], SERVER


class FakeSensor:
    def __init__(self, readings):
        self.readings = list(readings)

    def read(self):
        return self.readings.pop(0)


def make_client(accel_readings=(), color_readings=(), replies=()):
    sock = FakeSocket(replies)
    out = io.StringIO()
    client = TextSensorClient(
        sock, SERVER, FakeSensor(accel_readings), FakeSensor(color_readings), out
    )
    return client, sock, out


def test_format_motion_sample_matches_g_values():
    acceleration = Acceleration(16384, -8192, 4096)
    parts = format_motion_sample(acceleration).split(" ")
    assert len(parts) == 3
    for text, expected in zip(parts, acceleration.in_g()):
        assert float(text) == pytest.approx(expected, abs=0.005)


def test_format_motion_sample_one_g():
    assert format_motion_sample(Acceleration(16384, 0, 0)) == "1.00 0.00 0.00"


def test_format_color_sample_fields():
    reading = ColorReading(clear=200, red=100, green=50, blue=20)
    parts = format_color_sample(reading).split(" ")
    assert parts[:3] == ["100", "50", "20"]
    for text, expected in zip(parts[3:], reading.percentages()):
        assert float(text) == pytest.approx(expected, abs=0.005)


def test_format_color_sample_rejects_zero_clear():
    with pytest.raises(ValueError):
        format_color_sample(ColorReading(clear=0, red=1, green=2, blue=3))


def test_join_batch_terminates_each_line():
    assert join_batch(["a", "b c"]) == "a\nb c\n"
    assert join_batch([]) == ""


def test_send_greeting():
    client, sock, _ = make_client()
    payload = client.send_greeting()
    assert payload == GREETING.encode()
    assert sock.sent == [(b"Hello WORLD!!!!!!!!!!!!!!", SERVER)]


def test_motion_step_sends_full_batch():
    readings = [Acceleration(i * 100, -i, 16384) for i in range(SAMPLES_PER_BATCH)]
    client, sock, _ = make_client(accel_readings=readings)
    results = [client.motion_step() for _ in range(SAMPLES_PER_BATCH)]
    assert results[:-1] == [None] * (SAMPLES_PER_BATCH - 1)
    assert len(sock.sent) == 1
    payload, address = sock.sent[0]
    assert address == SERVER
    assert payload == results[-1]
    expected = join_batch(format_motion_sample(a) for a in readings).encode()
    assert payload == expected
    assert payload.count(b"\n") == SAMPLES_PER_BATCH


def test_motion_step_starts_new_batch_after_send():
    readings = [Acceleration(0, 0, 0)] * (SAMPLES_PER_BATCH * 2)
    client, sock, _ = make_client(accel_readings=readings)
    for _ in range(SAMPLES_PER_BATCH * 2 - 1):
        client.motion_step()
    assert len(sock.sent) == 1
    client.motion_step()
    assert len(sock.sent) == 2


def test_color_step_skips_zero_clear():
    readings = [ColorReading(clear=0, red=5, green=5, blue=5)] * SAMPLES_PER_BATCH
    client, sock, _ = make_client(color_readings=readings)
    assert [client.color_step() for _ in range(SAMPLES_PER_BATCH)] == [None] * SAMPLES_PER_BATCH
    assert sock.sent == []


def test_color_step_sends_and_reports_ack():
    readings = [ColorReading(clear=100, red=i, green=2 * i, blue=3) for i in range(1, 11)]
    client, sock, out = make_client(color_readings=readings, replies=[b"\x8c"])
    results = [client.color_step() for _ in range(SAMPLES_PER_BATCH)]
    assert results[-1] == join_batch(format_color_sample(r) for r in readings).encode()
    assert [payload for payload, _ in sock.sent] == [results[-1]]
    assert "ACK recibido del servidor" in out.getvalue()


def test_color_step_without_ack_prints_nothing():
    readings = [ColorReading(clear=10, red=1, green=1, blue=1)] * SAMPLES_PER_BATCH
    client, sock, out = make_client(color_readings=readings)
    for _ in range(SAMPLES_PER_BATCH):
        client.color_step()
    assert len(sock.sent) == 1
    assert out.getvalue() == ""


def test_main_rejects_invalid_address():
    assert main(["not-an-address", "12345"]) == 1


def test_main_rejects_port_out_of_range():
    with pytest.raises(SystemExit):
        main(["127.0.0.1", "70000"])