"""Sensor readout over I2C, UDP batch transport and server-side statistics."""

__version__ = "0.1.0"