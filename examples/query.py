"""Query a block inventory - per-tag counts and clamped blocks."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <inventory.parquet>")
        print("Example: tsdump --inventory blocks.parquet in.ts out.txt && python query.py blocks.parquet")
        sys.exit(1)

    inventory = Path(sys.argv[1])

    con = duckdb.connect(":memory:")
    con.execute("CREATE VIEW blocks AS SELECT * FROM read_parquet(?)", [str(inventory)])

    print(f"--- Block Summary: {inventory} ---\n")

    df = con.execute(
        """
        SELECT
            tag,
            COUNT(*) AS blocks,
            CAST(SUM(length) AS BIGINT) AS payload_bytes
        FROM blocks
        GROUP BY tag
        ORDER BY MIN("index")
        """
    ).fetchdf()
    for _, row in df.iterrows():
        print(f"{row['tag']:<4}  blocks={row['blocks']:<6} bytes={row['payload_bytes']}")

    clamped = con.execute(
        """
        SELECT "index", tag, "offset", declared_length, length
        FROM blocks
        WHERE status = 'CLAMPED'
        ORDER BY "index"
        """
    ).fetchdf()
    print()
    if clamped.empty:
        print("No clamped blocks.")
    else:
        print("--- Clamped Blocks (file is suspect) ---")
        for _, row in clamped.iterrows():
            print(
                f"#{row['index']} '{row['tag']}' at offset {row['offset']}: "
                f"declared {row['declared_length']}, kept {row['length']}"
            )


if __name__ == "__main__":
    main()
