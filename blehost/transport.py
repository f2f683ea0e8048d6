"""Byte transports that carry HCI packets between the host and a controller."""

from __future__ import annotations

import abc
import time
from typing import Any

import serial

DEFAULT_BAUDRATE = 912600
SLOW_BAUDRATE = 119600

_WAIT_STEP = 0.001


class HCITransport(abc.ABC):
    """Interface of a byte stream to an HCI controller."""

    @abc.abstractmethod
    def begin(self) -> None:
        """Open the transport."""

    @abc.abstractmethod
    def end(self) -> None:
        """Close the transport."""

    @abc.abstractmethod
    def wait(self, timeout: float) -> None:
        """Block for up to ``timeout`` seconds until data is available."""

    @abc.abstractmethod
    def available(self) -> int:
        """Return the number of bytes that can be read without blocking."""

    @abc.abstractmethod
    def peek(self) -> int | None:
        """Return the next byte without consuming it, or None if there is none."""

    @abc.abstractmethod
    def read(self) -> int | None:
        """Consume and return the next byte, or None if there is none."""

    @abc.abstractmethod
    def write(self, data: bytes) -> int:
        """Send ``data`` and return the number of bytes written."""


class UartTransport(HCITransport):
    """HCI transport over a serial line.

    ``port`` is either a device path or URL understood by pyserial, or an
    unopened serial-port object with the pyserial interface.
    """

    def __init__(self, port: Any, baudrate: int = DEFAULT_BAUDRATE) -> None:
        self._port = port
        self._baudrate = baudrate
        self._serial: Any = None
        self._lookahead: int | None = None

    @property
    def baudrate(self) -> int:
        return self._baudrate

    @property
    def _uart(self) -> Any:
        if self._serial is None:
            raise RuntimeError("transport has not been started")
        return self._serial

    def begin(self) -> None:
        if isinstance(self._port, str):
            self._serial = serial.serial_for_url(self._port, baudrate=self._baudrate)
        else:
            self._serial = self._port
            self._serial.baudrate = self._baudrate
            if not self._serial.is_open:
                self._serial.open()
        self._lookahead = None

    def end(self) -> None:
        if self._serial is not None:
            self._serial.close()
            self._serial = None
        self._lookahead = None

    def wait(self, timeout: float) -> None:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.available():
                return
            time.sleep(_WAIT_STEP)

    def available(self) -> int:
        pending = 1 if self._lookahead is not None else 0
        return pending + self._uart.in_waiting

    def peek(self) -> int | None:
        if self._lookahead is None:
            self._lookahead = self._read_from_port()
        return self._lookahead

    def read(self) -> int | None:
        if self._lookahead is not None:
            value, self._lookahead = self._lookahead, None
            return value
        return self._read_from_port()

    def write(self, data: bytes) -> int:
        uart = self._uart
        written = uart.write(bytes(data))
        uart.flush()
        return len(data) if written is None else written

    def _read_from_port(self) -> int | None:
        uart = self._uart
        if not uart.in_waiting:
            return None
        chunk = uart.read(1)
        return chunk[0] if chunk else None