# sensorlink

Tools for a small sensor network. A Linux board that has an MPU-6000
accelerometer and a TCS3472 colour sensor on the I2C bus `/dev/i2c-1`
reads both sensors. It packs the samples into binary batches and sends
them over UDP to a server, which prints statistics for each batch.

The sensor side talks to the bus through `/dev/i2c-*` device files and
`ioctl`, so it runs on Linux only. The servers run on any POSIX system.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

### Sensor client

```
sensorlink-client <SERVER_IP> <PORT>
```

`SERVER_IP` must be an IPv4 address and `PORT` must lie between 1 and
65535. The client reads both sensors on `/dev/i2c-1` once a second.
After every ten samples it sends one datagram of ten records. Each
record holds red, green, blue, clear and the X, Y and Z acceleration as
little-endian signed 16-bit values, which makes a 140-byte datagram.
The client then waits up to two seconds for an acknowledgement and
prints it, or prints a timeout message and carries on.

### Statistics server

```
sensorlink-server <PORT>
```

The server binds on the wildcard address and tries each address family
it is offered. It ignores any datagram that is not exactly one batch.
For each batch it answers `OK` to the sender and clears the terminal by
running `clear`. It then prints the mean, the population standard
deviation, the minimum and the maximum of each acceleration axis and of
the red, green and blue channels.

### Local monitor

```
sensorlink-monitor [--bus /dev/i2c-1] [--sensor both|accel|color] [--interval 0.5]
```

Prints readings to the console, with no networking:

* accelerometer readings, raw and in g;
* colour readings, raw and as percentages of the clear channel. The
  percentages are left out when the clear channel is zero.

When both sensors are selected, each one is polled in its own thread.

### Text protocol and older tools

* `sensorlink-legacy-client [SERVER_IP] [PORT] [--interval 1.0]`
  defaults to `192.168.1.211` and port `12345`.
  * It first sends a greeting.
  * It then samples each sensor in its own loop and sends text batches
    of ten lines.
  * A motion line holds the three axes in g.
  * A colour line holds raw red, green and blue and their percentages of
    clear. Samples with a zero clear channel are dropped.
  * After each colour batch it waits for an acknowledgement.
* `sensorlink-legacy-server <PORT>` reads 100-byte buffers of ten
  10-byte records.
  * A record holds four 8-bit colour channels followed by three
    big-endian signed acceleration counts.
  * For every datagram it sends back a one-byte acknowledgement: the
    low byte of the received length.
  * Once a window of two batches is complete, it prints the maximum,
    minimum and mean of each axis in m/s² and of each colour channel.
* `sensorlink-echo-server [PORT]` listens on port 12345 by default.
  It prints every message with its sender and answers with a fixed
  confirmation text.

## Library use

The building blocks can be used directly:

```python
from sensorlink.i2c import open_accelerometer, open_color_sensor
from sensorlink.protocol import Sample, pack_batch, unpack_batch
from sensorlink.stats import compute_batch_stats, format_report

accel = open_accelerometer("/dev/i2c-1")
color = open_color_sensor("/dev/i2c-1")
try:
    samples = [Sample.from_readings(color.read(), accel.read()) for _ in range(10)]
finally:
    accel.device.close()
    color.device.close()

payload = pack_batch(samples)
print(format_report(compute_batch_stats(unpack_batch(payload))))
```

Each module has its own job:

* `sensorlink.i2c` provides `I2CDevice`, which is a context manager, and
  the `Accelerometer` and `ColorSensor` drivers. Readings come back as
  `Acceleration` and `ColorReading`.
* `sensorlink.protocol` defines the binary batch format.
* `sensorlink.stats` computes `BatchStats` and formats the report.
* `sensorlink.legacy_server` provides `parse_records`, `WindowAggregator`
  and `summarize_window` for the record format.

Failures to open the bus or to address a sensor raise `SensorError`.

## What it does not do

* Statistics are only printed. They are not stored or exported.
* `sensorlink-client` and `sensorlink-legacy-client` always use
  `/dev/i2c-1`. Only `sensorlink-monitor` lets you pick another bus.
* Acknowledgements are not retried. A batch that is lost or gets no
  answer is not sent again.