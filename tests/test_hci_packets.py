import struct

import pytest

from blehost.hci_packets import (
    HCI_OE_USER_ENDED_CONNECTION,
    MAX_ADVERTISING_DATA,
    OCF_RESET,
    OGF_HOST_CTL,
    RECEIVE_BUFFER_SIZE,
    RSSI_UNAVAILABLE,
    LeBufferSize,
    LocalVersion,
    PacketReader,
    PacketType,
    advertising_data,
    advertising_parameters,
    connection_update_parameters,
    create_connection_parameters,
    disconnect_parameters,
    encode_acl_packet,
    encode_command,
    format_packet,
    make_opcode,
    parse_le_buffer_size,
    parse_local_version,
    parse_read_rssi,
    scan_enable,
    scan_parameters,
)

ADDR = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x01])


def feed_all(reader, data):
    return [reader.feed(b) for b in data]


def test_reset_command_wire_bytes():
    opcode = make_opcode(OGF_HOST_CTL, OCF_RESET)
    assert opcode == 0x0C03
    assert encode_command(opcode) == bytes([0x01, 0x03, 0x0C, 0x00])


def test_command_header_carries_parameter_length():
    params = bytes(range(7))
    packet = encode_command(0x2006, params)
    assert packet[0] == PacketType.COMMAND
    assert struct.unpack_from("<H", packet, 1)[0] == 0x2006
    assert packet[3] == len(params)
    assert packet[4:] == params


def test_command_parameters_too_long():
    with pytest.raises(ValueError):
        encode_command(0x2008, bytes(256))


def test_acl_packet_header_and_payload():
    payload = b"\x12\x01\x08\x00"
    packet = encode_acl_packet(0x0040, 0x0005, payload)
    kind, handle, dlen, plen, cid = struct.unpack_from("<BHHHH", packet)
    assert kind == PacketType.ACL_DATA
    assert handle == 0x0040
    assert dlen == len(payload) + 4
    assert plen == len(payload)
    assert cid == 0x0005
    assert packet[9:] == payload


def test_acl_packet_round_trips_through_reader():
    payload = bytes(range(20))
    packet = encode_acl_packet(0x0001, 0x0004, payload)
    results = feed_all(PacketReader(), packet)
    assert all(r is None for r in results[:-1])
    kind, body = results[-1]
    assert kind is PacketType.ACL_DATA
    assert body == packet[1:]
    assert body[8:] == payload


def test_acl_payload_too_long():
    with pytest.raises(ValueError):
        encode_acl_packet(1, 4, bytes(300))


def test_reader_assembles_event():
    event = bytes([0x04, 0x0E, 0x04, 0x01, 0x03, 0x0C, 0x00])
    results = feed_all(PacketReader(), event)
    assert results[:-1] == [None] * (len(event) - 1)
    assert results[-1] == (PacketType.EVENT, event[1:])


def test_reader_discards_unknown_indicator():
    reader = PacketReader()
    assert reader.feed(0x99) is None
    assert reader.last_discarded == 0x99
    event = bytes([0x04, 0x0E, 0x04, 0x01, 0x03, 0x0C, 0x00])
    assert feed_all(reader, event)[-1] == (PacketType.EVENT, event[1:])


def test_reader_reset_drops_partial_packet():
    reader = PacketReader()
    feed_all(reader, [0x04, 0x0E, 0x04, 0x01])
    reader.reset()
    event = bytes([0x04, 0x0F, 0x04, 0x00, 0x01, 0x06, 0x04])
    assert feed_all(reader, event)[-1] == (PacketType.EVENT, event[1:])


def test_reader_overflow_restarts_buffer():
    reader = PacketReader()
    header = [0x02, 0x00, 0x00, 0xFF, 0xFF]
    filler = [0x00] * (RECEIVE_BUFFER_SIZE - len(header))
    results = feed_all(reader, header + filler)
    assert all(r is None for r in results)
    assert reader.overflows == 0
    event = bytes([0x04, 0x0E, 0x04, 0x01, 0x03, 0x0C, 0x00])
    last = feed_all(reader, event)[-1]
    assert reader.overflows == 1
    assert last == (PacketType.EVENT, event[1:])


def test_format_packet_upper_hex():
    assert format_packet("HCI COMMAND TX -> ", b"\x01\x03\x0c\x00") == "HCI COMMAND TX -> 01030C00"


def test_parse_local_version_round_trip():
    data = struct.pack("<BHBHH", 9, 0x1234, 9, 0x0059, 0x4321)
    assert parse_local_version(data) == LocalVersion(9, 0x1234, 9, 0x0059, 0x4321)


def test_parse_local_version_short():
    with pytest.raises(ValueError):
        parse_local_version(b"\x01\x02")


def test_parse_le_buffer_size():
    assert parse_le_buffer_size(struct.pack("<HB", 251, 8)) == LeBufferSize(251, 8)
    with pytest.raises(ValueError):
        parse_le_buffer_size(b"\x01")


def test_parse_read_rssi_matching_and_other_handle():
    data = struct.pack("<Hb", 0x0040, -60)
    assert parse_read_rssi(data, 0x0040) == -60
    assert parse_read_rssi(data, 0x0041) == RSSI_UNAVAILABLE


def test_advertising_parameters_fields():
    params = advertising_parameters(0x00A0, 0x00A0, 0x00, 0x00, 0x00, ADDR, 0x07, 0x00)
    fields = struct.unpack("<HHBBB6sBB", params)
    assert fields == (0x00A0, 0x00A0, 0, 0, 0, ADDR, 0x07, 0)


def test_advertising_parameters_bad_address():
    with pytest.raises(ValueError):
        advertising_parameters(1, 2, 0, 0, 0, b"\x00\x01", 7, 0)


def test_advertising_data_padded():
    data = b"\x02\x01\x06"
    params = advertising_data(data)
    assert len(params) == 1 + MAX_ADVERTISING_DATA
    assert params[0] == len(data)
    assert params[1:4] == data
    assert set(params[4:]) == {0}


def test_advertising_data_too_long():
    with pytest.raises(ValueError):
        advertising_data(bytes(range(32)))


def test_scan_parameters_and_enable():
    assert struct.unpack("<BHHBB", scan_parameters(1, 0x0010, 0x0010, 0, 0)) == (1, 16, 16, 0, 0)
    assert scan_enable(1, 0) == bytes([1, 0])


def test_create_connection_parameters_fields():
    params = create_connection_parameters(
        0x0060, 0x0030, 0x00, 0x00, ADDR, 0x00, 0x0006, 0x0C80, 0x0000, 0x0C80, 0x0004, 0x0006
    )
    fields = struct.unpack("<HHBB6sBHHHHHH", params)
    assert fields == (0x0060, 0x0030, 0, 0, ADDR, 0, 0x0006, 0x0C80, 0, 0x0C80, 0x0004, 0x0006)


def test_connection_update_uses_fixed_event_lengths():
    params = connection_update_parameters(0x0040, 6, 12, 0, 400)
    assert struct.unpack("<HHHHHHH", params) == (0x0040, 6, 12, 0, 400, 0x0004, 0x0006)


def test_disconnect_parameters_reason():
    params = disconnect_parameters(0x0040)
    assert struct.unpack("<HB", params) == (0x0040, HCI_OE_USER_ENDED_CONNECTION)