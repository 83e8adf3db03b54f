from __future__ import annotations

import hashlib
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from tsfile_core.blocks import Block
from tsfile_core.protocol import HEADER_LEN
from tsfile_core.registry import lookup


def inventory_rows(blocks: list[Block]) -> list[dict]:
    rows: list[dict] = []
    for n, block in enumerate(blocks):
        # Hash the payload as it sits on disk so the inventory is host independent.
        on_disk = lookup(block.tag, offset=block.offset).serialize(block)[HEADER_LEN:]
        rows.append(
            {
                "index": n,
                "tag": block.name,
                "offset": int(block.offset) if block.offset is not None else -1,
                "declared_length": int(
                    block.declared_length if block.declared_length is not None else block.length
                ),
                "length": int(block.length),
                "status": "CLAMPED" if block.clamped else "VERIFIED",
                "content_hash": hashlib.sha256(on_disk).hexdigest(),
            }
        )
    return rows


def compile_inventory(blocks: list[Block], out_path: Path) -> int:
    """Write one Parquet row per decoded block. Returns the row count."""
    rows = inventory_rows(blocks)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    schema = pa.schema(
        [
            ("index", pa.int32()),
            ("tag", pa.string()),
            ("offset", pa.int64()),
            ("declared_length", pa.int64()),
            ("length", pa.int64()),
            ("status", pa.string()),
            ("content_hash", pa.string()),
        ]
    )

    df = pd.DataFrame(rows, columns=schema.names)
    table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    pq.write_table(table, out_path)
    return len(rows)
