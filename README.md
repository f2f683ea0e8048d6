# blehost

Building blocks for talking to a Bluetooth Low Energy controller over HCI:
a serial-line transport, framing of HCI command and ACL data packets,
encoding of LE command parameters, decoding of command responses, and a
reader that reassembles incoming event and ACL packets from a byte stream.

## Installation

```
pip install blehost
```

## Modules

### `blehost.transport`

- `HCITransport` is the abstract interface of a byte stream to a controller:
  `begin()`, `end()`, `wait(timeout)`, `available()`, `peek()`, `read()` and
  `write(data)`.
- `UartTransport(port, baudrate=912600)` implements it with pyserial. `port`
  is a device path or pyserial URL (opened with `serial.serial_for_url`), or
  an unopened serial-port object, which `begin()` configures and opens.
  `end()` closes it. `wait(timeout)` blocks for up to `timeout` seconds until
  a byte is available. `peek()` and `read()` return a single byte as an int,
  or `None` when nothing is waiting. `write(data)` writes, flushes and returns
  the number of bytes written. Using the transport before `begin()` raises
  `RuntimeError`. The module also defines `DEFAULT_BAUDRATE` (912600) and
  `SLOW_BAUDRATE` (119600).

### `blehost.hci_packets`

- `PacketType`: the packet indicators `COMMAND`, `ACL_DATA` and `EVENT`.
- `make_opcode(ogf, ocf)` builds a 16-bit opcode; the module defines the
  `OGF_*` and `OCF_*` values for the commands it supports, and the `EVT_*`
  event codes.
- `encode_command(opcode, parameters)` frames a command packet;
  `encode_acl_packet(handle, cid, payload)` frames an L2CAP payload as an ACL
  data packet. Both raise `ValueError` for more than 255 bytes of payload.
- Parameter builders: `advertising_parameters`, `advertising_data` (length
  byte plus data zero-padded to 31 bytes; longer data raises `ValueError`),
  `scan_parameters`, `scan_enable`, `create_connection_parameters`,
  `connection_update_parameters` (connection event lengths fixed at 0x0004
  and 0x0006) and `disconnect_parameters` (reason 0x13, remote user ended
  connection). Device addresses must be exactly 6 bytes.
- Response parsers: `parse_local_version` returns a `LocalVersion`,
  `parse_le_buffer_size` returns a `LeBufferSize`, and
  `parse_read_rssi(data, handle)` returns the RSSI, or 127 if the response
  names a different connection handle. Short responses raise `ValueError`.
- `PacketReader.feed(byte)` returns `(PacketType, payload)` when a byte
  completes an event or ACL data packet (the payload excludes the indicator
  byte), and `None` otherwise. Bytes that start no known packet are dropped
  and kept in `last_discarded`; `overflows` counts receive-buffer restarts;
  `reset()` drops a partial packet.
- `format_packet(prefix, data)` renders bytes as upper-case hex after a
  prefix, for logging.

## Example

```python
from blehost.hci_packets import (
    OCF_RESET, OGF_HOST_CTL, PacketReader, encode_command, make_opcode,
)
from blehost.transport import UartTransport

transport = UartTransport("/dev/ttyUSB0")
transport.begin()
transport.write(encode_command(make_opcode(OGF_HOST_CTL, OCF_RESET)))

reader = PacketReader()
transport.wait(1.0)
while transport.available():
    byte = transport.read()
    if byte is None:
        break
    packet = reader.feed(byte)
    if packet is not None:
        kind, payload = packet
        print(kind.name, payload.hex())

transport.end()
```

## What this package does not do

It provides the pieces, not a running host stack. There is no controller
driver that sends commands and waits for their completion status, no
dispatching of received events or ACL data to upper layers, no flow control
of outgoing ACL packets, and no L2CAP signaling (connection parameter update
requests are neither sent nor answered). Those are left to the application
built on top of these modules.

## Tests

```
pip install -e .[test]
pytest
```