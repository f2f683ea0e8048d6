"""Bluetooth Low Energy HCI building blocks: UART transport, packet framing and decoding."""

__version__ = "0.1.0"
__all__ = ["transport", "hci_packets"]