"""tsdump - binary TS file to editable text."""
from __future__ import annotations

import json
from pathlib import Path

import click

from tsfile_core.errors import IOFailure, TSFileError
from tsfile_dump.decoder import StreamDecoder, check_leading_tag
from tsfile_dump.inventory import compile_inventory
from tsfile_dump.render import render


def dump_file(
    in_path: Path,
    out_path: Path,
    header_only: bool = False,
    inventory_path: Path | None = None,
) -> dict:
    """Decode `in_path` and write its text form to `out_path`. Returns scan stats."""
    try:
        raw = Path(in_path).read_bytes()
    except OSError as e:
        raise IOFailure(f"cannot read '{in_path}': {e.strerror}") from e

    check_leading_tag(raw)
    decoder = StreamDecoder(raw)

    # Render fully before touching the output file.
    text = render(decoder.blocks, header_only=header_only)
    try:
        Path(out_path).write_text(text, encoding="latin-1", newline="\n")
    except OSError as e:
        raise IOFailure(f"cannot write '{out_path}': {e.strerror}") from e

    if inventory_path is not None:
        compile_inventory(decoder.blocks, inventory_path)

    return decoder.get_scan_stats()


@click.command()
@click.argument("infile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("outfile", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-h", "--header-only", is_flag=True, help="Stop before the BODY block (omit samples)")
@click.option(
    "--inventory",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a Parquet inventory of the decoded blocks",
)
@click.option("--stats", is_flag=True, help="Print decoder scan statistics as JSON")
def main(infile: Path, outfile: Path, header_only: bool, inventory: Path | None, stats: bool) -> None:
    """Read a binary TS INFILE and write a text version to OUTFILE."""
    try:
        scan = dump_file(infile, outfile, header_only=header_only, inventory_path=inventory)
    except TSFileError as e:
        # Fail closed, with a single-line reason.
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)

    if stats:
        click.echo(json.dumps(scan, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


if __name__ == "__main__":
    main()
