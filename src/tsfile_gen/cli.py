"""tsgen - editable text back to a binary TS file."""
from __future__ import annotations

from pathlib import Path

import click

from tsfile_core.errors import IOFailure, TSFileError
from tsfile_gen.builder import TextBuilder, split_lines
from tsfile_gen.reconcile import reconcile
from tsfile_gen.serializer import serialize


def gen_file(in_path: Path, out_path: Path) -> int:
    """Build, reconcile and serialize `in_path` into `out_path`. Returns lines read."""
    try:
        with open(in_path, encoding="latin-1", newline="") as f:
            text = f.read()
    except OSError as e:
        raise IOFailure(f"cannot read '{in_path}': {e.strerror}") from e

    builder = TextBuilder(split_lines(text))
    blocks = builder.build()
    reconcile(blocks)
    data = serialize(blocks)

    try:
        Path(out_path).write_bytes(data)
    except OSError as e:
        raise IOFailure(f"cannot write '{out_path}': {e.strerror}") from e
    return builder.line_count


@click.command()
@click.argument("infile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("outfile", type=click.Path(dir_okay=False, path_type=Path))
def main(infile: Path, outfile: Path) -> None:
    """Read a text TS INFILE and write a binary version to OUTFILE."""
    try:
        lines = gen_file(infile, outfile)
    except TSFileError as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)
    click.echo(f"Read {lines} lines")


if __name__ == "__main__":
    main()
