import pytest

from conftest import minimal_ts
from tsfile_core.blocks import Block
from tsfile_core.errors import MissingContainer
from tsfile_core.protocol import TAG_AQLV, TAG_BODY, TAG_END, TAG_HEAD
from tsfile_dump.decoder import decode
from tsfile_gen.reconcile import reconcile, region_sizes


def leaf(tag: bytes, n: int) -> Block:
    return Block(tag, n, bytearray(n))


def enclosed(blocks, opener: bytes, closers: set[bytes]) -> int:
    """Bytes between `opener` and its first closer, computed the slow way."""
    start = next(i for i, b in enumerate(blocks) if b.tag == opener) + 1
    total = 0
    for b in blocks[start:]:
        if b.tag in closers:
            break
        total += b.length + 8
    return total


def test_lengths_from_enclosed_blocks():
    blocks = [
        Block(TAG_AQLV),
        Block(TAG_HEAD),
        leaf(b"sign", 208),
        leaf(b"fbin", 8),
        Block(TAG_BODY),
        leaf(b"scal", 16),
        leaf(b"alvl", 400),
        Block(TAG_END),
    ]
    reconcile(blocks)
    assert blocks[1].length == 216 + 16
    assert blocks[4].length == 24 + 408
    assert blocks[0].length == (216 + 16) + 8 + (24 + 408) + 8
    assert blocks[-1].length == 0


def test_matches_lengths_on_disk():
    pairs = tuple((n, -n) for n in range(50))
    decoded = decode(minimal_ts(pairs=pairs))
    expected = [b.length for b in decoded]
    for b in decoded:
        if b.is_container and b.tag != TAG_END:
            b.length = 0
    reconcile(decoded)
    assert [b.length for b in decoded] == expected


def test_container_invariant_holds():
    blocks = decode(minimal_ts(pairs=((1, 1),) * 9))
    reconcile(blocks)
    head = next(b for b in blocks if b.tag == TAG_HEAD)
    body = next(b for b in blocks if b.tag == TAG_BODY)
    aqlv = next(b for b in blocks if b.tag == TAG_AQLV)
    assert head.length == enclosed(blocks, TAG_HEAD, {TAG_BODY, TAG_END})
    assert body.length == enclosed(blocks, TAG_BODY, {TAG_END})
    assert aqlv.length == enclosed(blocks, TAG_AQLV, {TAG_END})


def test_body_closes_header_and_end_closes_body():
    blocks = [
        Block(TAG_AQLV),
        Block(TAG_HEAD),
        leaf(b"cnst", 16),
        Block(TAG_BODY),
        leaf(b"indx", 4),
        Block(TAG_END),
        leaf(b"gtag", 4),  # outside every region
    ]
    assert region_sizes(blocks) == (24, 12)


@pytest.mark.parametrize("missing", [TAG_AQLV, TAG_HEAD, TAG_BODY])
def test_missing_container(missing):
    blocks = [Block(t) for t in (TAG_AQLV, TAG_HEAD, TAG_BODY, TAG_END) if t != missing]
    with pytest.raises(MissingContainer) as exc:
        reconcile(blocks)
    assert exc.value.tag == missing
