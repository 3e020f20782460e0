import pytest

from qqproto.tlv import TLV, Decoder, MessageTooShortError, Record


def test_decode_two_byte_records():
    decoder = Decoder(2, 2)
    data = b"\x00\x01\x00\x02ab" + b"\x00\x05\x00\x00"
    records = decoder.decode(data)
    assert records == [Record(1, 2, b"ab"), Record(5, 0, b"")]


def test_decode_empty_input():
    assert Decoder(2, 2).decode(b"") == []


def test_decode_mixed_sizes():
    decoder = Decoder(4, 1)
    data = b"\x00\x00\x01\x00\x03xyz"
    records = decoder.decode(data)
    assert len(records) == 1
    assert records[0].tag == 0x100
    assert records[0].value == b"xyz"
    assert records[0].length == len(records[0].value)


def test_decode_truncated_head():
    with pytest.raises(MessageTooShortError):
        Decoder(2, 2).decode(b"\x00\x01\x00")


def test_decode_truncated_value():
    with pytest.raises(MessageTooShortError):
        Decoder(2, 2).decode(b"\x00\x01\x00\x05abc")


@pytest.mark.parametrize("tag_size,len_size", [(3, 2), (2, 0), (8, 1)])
def test_invalid_sizes(tag_size, len_size):
    with pytest.raises(ValueError):
        Decoder(tag_size, len_size)


def test_record_map_later_tag_wins():
    decoder = Decoder(1, 1)
    data = b"\x07\x01a" + b"\x08\x01b" + b"\x07\x01c"
    mapping = decoder.decode_record_map(data)
    assert mapping == {7: b"c", 8: b"b"}
    assert 8 in mapping
    assert 9 not in mapping


def test_record_map_propagates_error():
    with pytest.raises(MessageTooShortError):
        Decoder(1, 1).decode_record_map(b"\x07\x02a")


def test_tlv_marshal():
    tlv = TLV(0x0009, [b"\x01", b"\x02\x03"])
    assert tlv.marshal() == b"\x00\x09\x00\x02\x01\x02\x03"


def test_tlv_append_and_count():
    tlv = TLV(0x0810)
    tlv.append(b"ab", b"cd")
    tlv.append(b"ef")
    out = tlv.marshal()
    assert out[:2] == b"\x08\x10"
    assert int.from_bytes(out[2:4], "big") == 3
    assert out[4:] == b"abcdef"