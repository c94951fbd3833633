"""CLI implementation for httpseek."""

import base64
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from . import open_reader
from .core.model import HTTPSeekError

app = typer.Typer(add_completion=False, help="Read byte ranges from a URL or local file without fetching all of it.")


def parse_range(spec: str) -> tuple[int, int]:
    """Parse 'OFFSET:LENGTH' into integers."""
    offset, sep, length = spec.partition(":")
    if not sep:
        raise typer.BadParameter(f"expected OFFSET:LENGTH, got {spec!r}")
    try:
        return int(offset), int(length)
    except ValueError:
        raise typer.BadParameter(f"expected OFFSET:LENGTH, got {spec!r}")


def range_asdict(reader, offset: int, data: bytes, eof: bool) -> dict:
    """Return a JSON-serialisable dict describing one range read."""
    return {
        "success": True,
        "offset": offset,
        "bytes_read": len(data),
        "eof": eof,
        "data": base64.b64encode(data).decode("ascii"),
        "bytes_fetched": reader.bytes_fetched,
        "requests_made": reader.requests_made,
    }


@app.command()
def main(
    source: str = typer.Argument(..., help="URL or local path to read from"),
    ranges: Optional[list[str]] = typer.Option(None, "-r", "--range", help="OFFSET:LENGTH to read (repeatable)"),
    block_size: int = typer.Option(0, "--block-size", min=0, help="Cache block size in bytes, 0 disables buffering"),
    raw: bool = typer.Option(False, "--raw", help="Write the raw bytes instead of JSON"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log every seek, fetch and cache fill"),
):
    """Read one or many byte ranges from SOURCE."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")

    spans = [parse_range(r) for r in (ranges or ["0:64"])]

    try:
        reader = open_reader(source, block_size=block_size)
    except (HTTPSeekError, OSError) as e:
        typer.echo(json.dumps({"success": False, "error": str(e)}), err=True)
        raise typer.Exit(code=1)

    chunks: list[bytes] = []
    results: list[dict] = []
    try:
        with reader:
            for offset, length in spans:
                buffer = bytearray(length)
                count, eof = reader.read_at(buffer, offset)
                chunks.append(bytes(buffer[:count]))
                results.append(range_asdict(reader, offset, chunks[-1], eof))
    except (HTTPSeekError, OSError, ValueError) as e:
        typer.echo(json.dumps({"success": False, "error": str(e)}), err=True)
        raise typer.Exit(code=1)

    if raw:
        payload = b"".join(chunks)
        if output:
            output.write_bytes(payload)
        else:
            typer.echo(payload, nl=False)
        return

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        if len(results) == 1 and not jsonl:
            json.dump(results[0], sink, indent=2)
            sink.write("\n")
        else:
            for obj in results:
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()


if __name__ == "__main__":
    app()
