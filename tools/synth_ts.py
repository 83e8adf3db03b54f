import math
import random
import struct
from datetime import datetime, timezone
from pathlib import Path

from tsfile_core.blocks import Block
from tsfile_core.protocol import (
    BIN_FORMAT_CVIQ,
    BIN_TYPE_FIX2,
    FULL_SCALE,
    MAC_EPOCH_OFFSET,
    TAG_ALVL,
    TAG_AQLV,
    TAG_ATAG,
    TAG_BODY,
    TAG_CNST,
    TAG_END,
    TAG_FBIN,
    TAG_GTAG,
    TAG_HEAD,
    TAG_INDX,
    TAG_MCDA,
    TAG_SCAL,
    TAG_SIGN,
    TAG_SWEP,
)
from tsfile_core.registry import REGISTRY
from tsfile_core.samples import pack_pairs, to_fixed
from tsfile_gen.reconcile import reconcile
from tsfile_gen.serializer import serialize

# --- CONFIGURATION ---
NCHANNELS = 3
SWEEP_START_HZ = 4.53e6
SWEEP_BANDWIDTH_HZ = -25733.0
SWEEP_RATE_HZ = 2.0
SCALE = 0.25


def fourcc(code: bytes) -> int:
    return int.from_bytes(code, "big")


def text_field(s: str, size: int = 64) -> bytes:
    return s.encode("latin-1")[:size].ljust(size, b"\x00")


def record(tag: bytes, *values) -> Block:
    """Host-order fixed-layout block packed with the registry's own layout."""
    handler = REGISTRY[tag]
    payload = bytearray(struct.pack(handler.fmt, *values))
    return Block(tag, len(payload), payload)


def tone(n: int, samples: int, rng: random.Random) -> list[tuple[int, int]]:
    """A noisy complex tone, quantized as fix2."""
    full = FULL_SCALE[BIN_TYPE_FIX2]
    pairs = []
    for k in range(samples):
        phase = 2 * math.pi * (n + 1) * k / samples
        i = 0.6 * SCALE * math.cos(phase) + rng.gauss(0.0, 0.01 * SCALE)
        q = 0.6 * SCALE * math.sin(phase) + rng.gauss(0.0, 0.01 * SCALE)
        pairs.append((to_fixed(i, full, SCALE), to_fixed(q, full, SCALE)))
    return pairs


def generate_ts(out_path, sweeps: int = 2, samples: int = 64, seed: int = 1904) -> Path:
    rng = random.Random(seed)
    started = datetime(2018, 11, 1, tzinfo=timezone.utc)

    blocks = [
        Block(TAG_AQLV),
        Block(TAG_HEAD),
        record(
            TAG_SIGN,
            fourcc(b"CSv4"),
            fourcc(b"TSsd"),
            fourcc(b"BML1"),
            0x1,
            text_field("Synthetic time series"),
            text_field("Bodega Marine Laboratory"),
            text_field(f"seed {seed}"),
        ),
        record(TAG_MCDA, int(started.timestamp()) + MAC_EPOCH_OFFSET),
        record(TAG_CNST, NCHANNELS, sweeps, samples, 2),
        record(TAG_SWEP, samples, SWEEP_START_HZ, SWEEP_BANDWIDTH_HZ, SWEEP_RATE_HZ, 0),
        record(TAG_FBIN, fourcc(BIN_FORMAT_CVIQ), fourcc(BIN_TYPE_FIX2)),
        Block(TAG_BODY),
    ]

    for sweep in range(sweeps):
        blocks.append(record(TAG_GTAG, 0))
        blocks.append(record(TAG_ATAG, 0))
        blocks.append(record(TAG_INDX, sweep))
        blocks.append(record(TAG_SCAL, SCALE, SCALE))
        for channel in range(NCHANNELS):
            payload = pack_pairs(tone(channel, samples, rng))
            blocks.append(Block(TAG_ALVL, len(payload), payload))

    blocks.append(Block(TAG_END))
    reconcile(blocks)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(serialize(blocks))
    print(f"GENERATED: {out} ({sweeps} sweeps x {NCHANNELS} channels x {samples} samples)")
    return out


if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/synth_ts.py OUT_FILE [--sweeps N] [--samples N] [--seed S]

    args = [a for a in sys.argv[1:] if a]

    def pop_value(arg_list: list[str], flag: str, default: int) -> tuple[int, list[str]]:
        """Remove `flag VALUE` from an argv-style list."""
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    sweeps, args = pop_value(args, "--sweeps", 2)
    samples, args = pop_value(args, "--samples", 64)
    seed, args = pop_value(args, "--seed", 1904)

    out = args[0] if args else "synthetic.ts"
    generate_ts(out, sweeps=sweeps, samples=samples, seed=seed)
