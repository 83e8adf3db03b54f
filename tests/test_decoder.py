import struct

import pytest

from conftest import MAC_TS, MINIMAL_TAGS, be_block, minimal_ts
from tsfile_core.errors import ClampedBlock, TruncatedBlock, UnknownBlockType
from tsfile_dump.decoder import StreamDecoder, check_leading_tag, decode


def test_flat_sequence_in_file_order(minimal_bytes):
    blocks = decode(minimal_bytes)
    assert [b.tag for b in blocks] == MINIMAL_TAGS


def test_container_lengths_and_offsets(minimal_bytes):
    blocks = {b.tag: b for b in decode(minimal_bytes)}
    assert blocks[b"AQLV"].length == len(minimal_bytes) - 16
    assert blocks[b"HEAD"].offset == 8
    assert blocks[b"HEAD"].length == 216 + 12 + 24 + 40 + 16
    assert blocks[b"BODY"].length == 12 + 12 + 12 + 24 + 12
    assert blocks[b"END "].length == 0
    assert all(not b.payload for b in blocks.values() if b.is_container)


def test_payload_scalars_are_host_order(minimal_bytes):
    blocks = {b.tag: b for b in decode(minimal_bytes)}

    version, _, _, flags = struct.unpack_from("=4I", blocks[b"sign"].payload)
    assert version == int.from_bytes(b"CSv4", "big")
    assert flags == 1
    assert blocks[b"sign"].payload[16:20] == b"desc"

    assert struct.unpack("=I", blocks[b"mcda"].payload) == (MAC_TS,)
    assert struct.unpack("=2d", blocks[b"scal"].payload) == (0.5, 0.5)
    assert struct.unpack("=hh", blocks[b"alvl"].payload) == (100, -200)


def test_clamps_overlong_leaf_and_keeps_it():
    buf = be_block(b"gtag", b"\x00\x00\x00\x07", length=100)
    with pytest.warns(ClampedBlock):
        blocks = decode(buf)
    assert len(blocks) == 1
    assert blocks[0].length == 4
    assert blocks[0].declared_length == 100
    assert blocks[0].clamped
    assert struct.unpack("=I", blocks[0].payload) == (7,)


def test_truncated_file_clamps_every_enclosing_container():
    buf = minimal_ts(pairs=((1, 2), (3, 4)))
    chopped = buf[:-10]  # END header plus half of the last sample pair

    with pytest.warns(ClampedBlock):
        decoder = StreamDecoder(chopped)

    blocks = decoder.blocks
    assert [b.tag for b in blocks] == MINIMAL_TAGS[:-1]
    clamped = [b.tag for b in blocks if b.clamped]
    assert clamped == [b"AQLV", b"BODY", b"alvl"]

    alvl = blocks[-1]
    assert alvl.length == 6
    assert len(alvl.payload) == 6
    assert struct.unpack_from("=hh", alvl.payload) == (1, 2)
    assert decoder.get_scan_stats()["clamped"] == 3


def test_clamped_length_equals_remaining_bytes():
    payload = bytes(range(40))
    buf = be_block(b"alvl", payload, length=4000)
    with pytest.warns(ClampedBlock):
        (block,) = decode(buf)
    assert block.length == len(buf) - 8


def test_torn_trailing_header_is_dropped_with_warning(minimal_bytes):
    with pytest.warns(ClampedBlock):
        decoder = StreamDecoder(minimal_bytes + b"\x00\x01\x02")
    assert [b.tag for b in decoder.blocks] == MINIMAL_TAGS
    assert decoder.get_scan_stats()["trailing_bytes"] == 3


def test_truncated_fixed_layout_block():
    buf = be_block(b"sign", b"x" * 100)
    with pytest.raises(TruncatedBlock) as exc:
        decode(buf)
    assert exc.value.tag == b"sign"
    assert exc.value.offset == 0


def test_truncated_sample_block():
    with pytest.raises(TruncatedBlock):
        decode(be_block(b"alvl", b"\x00\x01"))


def test_unknown_tag_halts_decode():
    buf = be_block(b"HEAD", be_block(b"cnst", bytes(16)) + be_block(b"wxyz", b"abcd"))
    with pytest.raises(UnknownBlockType) as exc:
        decode(buf)
    assert exc.value.offset == 8 + 24
    assert "wxyz" in str(exc.value)


def test_zero_tag_is_unknown():
    with pytest.raises(UnknownBlockType):
        decode(be_block(b"\x00\x00\x00\x00"))


def test_scan_stats():
    decoder = StreamDecoder(minimal_ts(pairs=((1, 1), (2, 2), (3, 3))))
    stats = decoder.get_scan_stats()
    assert stats["blocks"] == len(MINIMAL_TAGS)
    assert stats["samples"] == 3
    assert stats["clamped"] == 0
    assert stats["tags"]["alvl"] == 1
    assert stats["tags"]["END "] == 1


def test_leading_tag_must_be_outer_container(minimal_bytes):
    check_leading_tag(minimal_bytes)
    check_leading_tag(be_block(b"END "))  # a lone header is not checked
    with pytest.raises(UnknownBlockType):
        check_leading_tag(minimal_bytes[8:])


def test_deeply_nested_containers():
    buf = b"HEAD\xff\xff\xff\xff" * 1200
    with pytest.warns(ClampedBlock):
        decoder = StreamDecoder(buf)
    assert [b.tag for b in decoder.blocks] == [b"HEAD"] * 1200
    assert decoder.scan_stats["clamped"] == 1200
    assert decoder.blocks[0].length == len(buf) - 8
    assert decoder.blocks[-1].length == 0


def test_siblings_after_nested_run_keep_file_order():
    gtag = be_block(b"gtag", struct.pack(">I", 1))
    atag = be_block(b"atag", struct.pack(">I", 2))
    body = be_block(b"BODY", gtag)
    buf = be_block(b"AQLV", be_block(b"HEAD", body) + atag) + be_block(b"END ")
    blocks = decode(buf)
    assert [b.tag for b in blocks] == [b"AQLV", b"HEAD", b"BODY", b"gtag", b"atag", b"END "]
    assert [b.offset for b in blocks] == [0, 8, 16, 24, 36, 48]
