"""HCI packet framing, command parameter encoding and response decoding."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass


class PacketType(enum.IntEnum):
    """HCI packet indicator sent ahead of every packet on a UART link."""

    COMMAND = 0x01
    ACL_DATA = 0x02
    EVENT = 0x04


EVT_DISCONN_COMPLETE = 0x05
EVT_CMD_COMPLETE = 0x0E
EVT_CMD_STATUS = 0x0F
EVT_NUM_COMP_PKTS = 0x13
EVT_LE_META_EVENT = 0x3E

EVT_LE_CONN_COMPLETE = 0x01
EVT_LE_ADVERTISING_REPORT = 0x02

OGF_LINK_CTL = 0x01
OGF_HOST_CTL = 0x03
OGF_INFO_PARAM = 0x04
OGF_STATUS_PARAM = 0x05
OGF_LE_CTL = 0x08

OCF_DISCONNECT = 0x0006

OCF_SET_EVENT_MASK = 0x0001
OCF_RESET = 0x0003

OCF_READ_LOCAL_VERSION = 0x0001
OCF_READ_BD_ADDR = 0x0009

OCF_READ_RSSI = 0x0005

OCF_LE_READ_BUFFER_SIZE = 0x0002
OCF_LE_SET_RANDOM_ADDRESS = 0x0005
OCF_LE_SET_ADVERTISING_PARAMETERS = 0x0006
OCF_LE_SET_ADVERTISING_DATA = 0x0008
OCF_LE_SET_SCAN_RESPONSE_DATA = 0x0009
OCF_LE_SET_ADVERTISE_ENABLE = 0x000A
OCF_LE_SET_SCAN_PARAMETERS = 0x000B
OCF_LE_SET_SCAN_ENABLE = 0x000C
OCF_LE_CREATE_CONN = 0x000D
OCF_LE_CANCEL_CONN = 0x000E
OCF_LE_CONN_UPDATE = 0x0013

HCI_OE_USER_ENDED_CONNECTION = 0x13

MAX_ADVERTISING_DATA = 31
RSSI_UNAVAILABLE = 127
RECEIVE_BUFFER_SIZE = 3 + 255
BD_ADDR_LENGTH = 6

_COMMAND_HEADER = struct.Struct("<BHB")
_ACL_HEADER = struct.Struct("<BHHHH")
_LOCAL_VERSION = struct.Struct("<BHBHH")
_LE_BUFFER_SIZE = struct.Struct("<HB")
_READ_RSSI = struct.Struct("<Hb")
_ADVERTISING_PARAMETERS = struct.Struct("<HHBBB6sBB")
_ADVERTISING_DATA = struct.Struct("<B31s")
_SCAN_PARAMETERS = struct.Struct("<BHHBB")
_SCAN_ENABLE = struct.Struct("<BB")
_CREATE_CONNECTION = struct.Struct("<HHBB6sBHHHHHH")
_CONNECTION_UPDATE = struct.Struct("<HHHHHHH")
_DISCONNECT = struct.Struct("<HB")

_MIN_CE_LENGTH = 0x0004
_MAX_CE_LENGTH = 0x0006


@dataclass(frozen=True)
class LocalVersion:
    """Result of the Read Local Version Information command."""

    hci_ver: int
    hci_rev: int
    lmp_ver: int
    manufacturer: int
    lmp_sub_ver: int


@dataclass(frozen=True)
class LeBufferSize:
    """Result of the LE Read Buffer Size command."""

    pkt_len: int
    max_pkt: int


class PacketReader:
    """Reassembles ACL data and event packets from a byte stream.

    ``feed`` returns ``(packet_type, payload)`` once a packet is complete,
    where ``payload`` excludes the packet indicator byte. Bytes that do not
    start a known packet are dropped and remembered in ``last_discarded``;
    ``overflows`` counts how often the receive buffer had to be restarted.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.overflows = 0
        self.last_discarded: int | None = None

    def reset(self) -> None:
        """Drop any partially received packet."""
        self._buffer.clear()

    def feed(self, byte: int) -> tuple[PacketType, bytes] | None:
        """Add one byte; return the packet it completes, if any."""
        buffer = self._buffer
        if len(buffer) >= RECEIVE_BUFFER_SIZE:
            buffer.clear()
            self.overflows += 1
        buffer.append(byte & 0xFF)

        kind = buffer[0]
        count = len(buffer)
        if kind == PacketType.ACL_DATA:
            if count > 5 and count >= 5 + (buffer[3] | (buffer[4] << 8)):
                return self._complete(PacketType.ACL_DATA)
        elif kind == PacketType.EVENT:
            if count > 3 and count >= 3 + buffer[2]:
                return self._complete(PacketType.EVENT)
        else:
            buffer.clear()
            self.last_discarded = byte & 0xFF
        return None

    def _complete(self, kind: PacketType) -> tuple[PacketType, bytes]:
        payload = bytes(self._buffer[1:])
        self._buffer.clear()
        return kind, payload


def make_opcode(ogf: int, ocf: int) -> int:
    """Combine an opcode group and command field into a 16-bit opcode."""
    return ((ogf << 10) | ocf) & 0xFFFF


def encode_command(opcode: int, parameters: bytes = b"") -> bytes:
    """Frame an HCI command packet with its indicator and header."""
    parameters = bytes(parameters)
    if len(parameters) > 0xFF:
        raise ValueError("command parameters may not exceed 255 bytes")
    return _COMMAND_HEADER.pack(PacketType.COMMAND, opcode, len(parameters)) + parameters


def encode_acl_packet(handle: int, cid: int, payload: bytes) -> bytes:
    """Frame an L2CAP payload as an HCI ACL data packet."""
    payload = bytes(payload)
    if len(payload) > 0xFF:
        raise ValueError("ACL payload may not exceed 255 bytes")
    header = _ACL_HEADER.pack(
        PacketType.ACL_DATA, handle, (len(payload) + 4) & 0xFF, len(payload), cid
    )
    return header + payload


def format_packet(prefix: str, data: bytes) -> str:
    """Render a packet as ``prefix`` followed by upper-case hex bytes."""
    return prefix + "".join(f"{b:02X}" for b in data)


def _unpack(layout: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < layout.size:
        raise ValueError(f"{what} response needs {layout.size} bytes, got {len(data)}")
    return layout.unpack_from(bytes(data))


def _bdaddr(addr: bytes) -> bytes:
    addr = bytes(addr)
    if len(addr) != BD_ADDR_LENGTH:
        raise ValueError("a device address is exactly 6 bytes")
    return addr


def parse_local_version(data: bytes) -> LocalVersion:
    """Decode the return parameters of Read Local Version Information."""
    return LocalVersion(*_unpack(_LOCAL_VERSION, data, "local version"))


def parse_le_buffer_size(data: bytes) -> LeBufferSize:
    """Decode the return parameters of LE Read Buffer Size."""
    return LeBufferSize(*_unpack(_LE_BUFFER_SIZE, data, "LE buffer size"))


def parse_read_rssi(data: bytes, handle: int) -> int:
    """Return the RSSI for ``handle``, or 127 if the response is for another link."""
    response_handle, rssi = _unpack(_READ_RSSI, data, "read RSSI")
    return rssi if response_handle == handle else RSSI_UNAVAILABLE


def advertising_parameters(
    min_interval: int,
    max_interval: int,
    adv_type: int,
    own_bdaddr_type: int,
    direct_bdaddr_type: int,
    direct_bdaddr: bytes,
    chan_map: int,
    filter_policy: int,
) -> bytes:
    """Parameters of LE Set Advertising Parameters."""
    return _ADVERTISING_PARAMETERS.pack(
        min_interval,
        max_interval,
        adv_type,
        own_bdaddr_type,
        direct_bdaddr_type,
        _bdaddr(direct_bdaddr),
        chan_map,
        filter_policy,
    )


def advertising_data(data: bytes) -> bytes:
    """Parameters of LE Set Advertising Data or Scan Response Data."""
    data = bytes(data)
    if len(data) > MAX_ADVERTISING_DATA:
        raise ValueError("advertising data may not exceed 31 bytes")
    return _ADVERTISING_DATA.pack(len(data), data)


def scan_parameters(
    scan_type: int, interval: int, window: int, own_bdaddr_type: int, filter_policy: int
) -> bytes:
    """Parameters of LE Set Scan Parameters."""
    return _SCAN_PARAMETERS.pack(scan_type, interval, window, own_bdaddr_type, filter_policy)


def scan_enable(enabled: int, duplicates: int) -> bytes:
    """Parameters of LE Set Scan Enable."""
    return _SCAN_ENABLE.pack(enabled, duplicates)


def create_connection_parameters(
    interval: int,
    window: int,
    initiator_filter: int,
    peer_bdaddr_type: int,
    peer_bdaddr: bytes,
    own_bdaddr_type: int,
    min_interval: int,
    max_interval: int,
    latency: int,
    supervision_timeout: int,
    min_ce_length: int,
    max_ce_length: int,
) -> bytes:
    """Parameters of LE Create Connection."""
    return _CREATE_CONNECTION.pack(
        interval,
        window,
        initiator_filter,
        peer_bdaddr_type,
        _bdaddr(peer_bdaddr),
        own_bdaddr_type,
        min_interval,
        max_interval,
        latency,
        supervision_timeout,
        min_ce_length,
        max_ce_length,
    )


def connection_update_parameters(
    handle: int, min_interval: int, max_interval: int, latency: int, supervision_timeout: int
) -> bytes:
    """Parameters of LE Connection Update, with fixed connection event lengths."""
    return _CONNECTION_UPDATE.pack(
        handle,
        min_interval,
        max_interval,
        latency,
        supervision_timeout,
        _MIN_CE_LENGTH,
        _MAX_CE_LENGTH,
    )


def disconnect_parameters(handle: int) -> bytes:
    """Parameters of Disconnect, giving 'remote user terminated' as the reason."""
    return _DISCONNECT.pack(handle, HCI_OE_USER_ENDED_CONNECTION)