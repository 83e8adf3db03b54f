import struct

import pytest

UNIX_TS = 1541030400  # 2018-11-01 00:00:00 UTC
MAC_TS = UNIX_TS + 2082844800


def be_block(tag: bytes, payload: bytes = b"", length: int | None = None) -> bytes:
    """One block exactly as it sits on disk."""
    return struct.pack(">4sI", tag, len(payload) if length is None else length) + payload


def sign_payload(version=b"CSv4", filetype=b"TSsd", sitecode=b"BML1", flags=0x1,
                 description=b"desc", owner=b"owner", comment=b"comment") -> bytes:
    return struct.pack(">4s4s4sI64s64s64s", version, filetype, sitecode, flags,
                       description, owner, comment)


def header_blocks(bin_type=b"fix2", timestamp=MAC_TS, sign=None) -> bytes:
    return (
        be_block(b"sign", sign_payload() if sign is None else sign)
        + be_block(b"mcda", struct.pack(">I", timestamp))
        + be_block(b"cnst", struct.pack(">4i", 3, 1, 1, 2))
        + be_block(b"swep", struct.pack(">i3di", 1, 4.53e6, -25733.0, 2.0, 0))
        + be_block(b"fbin", b"cviq" + bin_type)
    )


def body_blocks(pairs=((100, -200),), scale=(0.5, 0.5)) -> bytes:
    samples = b"".join(struct.pack(">hh", i, q) for i, q in pairs)
    return (
        be_block(b"gtag", struct.pack(">I", 0))
        + be_block(b"atag", struct.pack(">I", 7))
        + be_block(b"indx", struct.pack(">I", 3))
        + be_block(b"scal", struct.pack(">2d", *scale))
        + be_block(b"alvl", samples)
    )


def ts_file(head: bytes, body: bytes) -> bytes:
    outer = be_block(b"HEAD", head) + be_block(b"BODY", body)
    return be_block(b"AQLV", outer) + be_block(b"END ")


def minimal_ts(pairs=((100, -200),), scale=(0.5, 0.5), bin_type=b"fix2", timestamp=MAC_TS, sign=None) -> bytes:
    return ts_file(header_blocks(bin_type, timestamp, sign), body_blocks(pairs, scale))


MINIMAL_TAGS = [
    b"AQLV", b"HEAD", b"sign", b"mcda", b"cnst", b"swep", b"fbin",
    b"BODY", b"gtag", b"atag", b"indx", b"scal", b"alvl", b"END ",
]


@pytest.fixture
def minimal_bytes() -> bytes:
    return minimal_ts()
