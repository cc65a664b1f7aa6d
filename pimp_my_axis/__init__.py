"""Remap and combine joystick axes through arithmetic expressions."""

__version__ = "0.1.0"
