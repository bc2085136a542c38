from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as package_version
import json
import logging
from pathlib import Path
from typing import Any, Callable, NoReturn

import typer

from valuepack.collection import HashedSet
from valuepack.core import HashFailure
from valuepack.core.types import SupportsHash
from valuepack.hashers import (
    HasherConfigError,
    HasherRegistryError,
    get_hasher,
    list_hasher_keys,
    resolve_default_hasher,
)

logger = logging.getLogger(__name__)

app = typer.Typer(help="ValueSet CLI: content-equality set operations over JSON records.")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

SetOperation = Callable[[HashedSet, HashedSet], HashedSet]


def _resolve_cli_version() -> str:
    try:
        return package_version("valueset")
    except PackageNotFoundError:
        from valueset import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show ValueSet version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug details to stderr.",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.stable_json = stable_json
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT, datefmt="%H:%M:%S")


def _echo(message: str, *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err:
        return
    typer.echo(message, err=err)


def _dump_record(value: Any) -> str:
    return json.dumps(value, ensure_ascii=True, sort_keys=True, separators=(",", ":"))


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = _dump_record(payload)
    else:
        rendered = json.dumps(payload, ensure_ascii=True, sort_keys=True, indent=2)
    typer.echo(rendered, err=err)


def _fail(message: str, *, exit_code: int, json_output: bool, error: Exception) -> NoReturn:
    logger.debug("command failed: %s", message)
    if json_output:
        _echo_json({"status": "error", "exit_code": exit_code, "message": message})
    else:
        _echo(message, err=True)
    raise typer.Exit(code=exit_code) from error


def read_records(path: Path) -> list[Any]:
    """Read a JSON array file or a JSON Lines file into a list of records."""
    text = path.read_text(encoding="utf-8")
    stripped = text.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        records = json.loads(stripped)
        if not isinstance(records, list):
            raise ValueError(f"expected a JSON array in {path}")
        return records

    records = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as error:
            raise ValueError(f"{path}:{line_number}: invalid JSON line: {error.msg}") from error
    return records


def write_records(path: Path, records: list[Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [_dump_record(record) for record in records]
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


def _resolve_hasher(key: str | None, *, json_output: bool) -> SupportsHash:
    try:
        if key is None:
            return resolve_default_hasher()
        return get_hasher(key)
    except (HasherConfigError, HasherRegistryError, FileNotFoundError) as error:
        _fail(f"hasher error: {error}", exit_code=2, json_output=json_output, error=error)


def _emit_records(
    command: str,
    records: list[Any],
    *,
    out: Path | None,
    json_output: bool,
    extra: dict[str, Any],
) -> None:
    if out is not None:
        write_records(out, records)

    if json_output:
        payload: dict[str, Any] = {
            "status": "pass",
            "exit_code": 0,
            "command": command,
            "size": len(records),
            **extra,
        }
        if out is None:
            payload["records"] = records
        else:
            payload["out"] = str(out)
        _echo_json(payload)
        return

    if out is not None:
        _echo(f"{command}: wrote {len(records)} record(s) to {out}")
        return
    for record in records:
        _echo(_dump_record(record))


_HASHER_OPTION_HELP = "Registered hasher key (defaults to VALUESET_HASHER or sha256)."


@app.command(name="hash")
def hash_command(
    source: Path = typer.Argument(..., help="JSON array or JSON Lines file."),
    hasher_key: str | None = typer.Option(None, "--hasher", help=_HASHER_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """Print the content hash of every record."""
    hasher = _resolve_hasher(hasher_key, json_output=json_output)
    try:
        hashes = [hasher.hash(record) for record in read_records(source)]
    except (HashFailure, FileNotFoundError, ValueError) as error:
        _fail(f"hash failed: {error}", exit_code=1, json_output=json_output, error=error)

    if json_output:
        _echo_json({"status": "pass", "exit_code": 0, "command": "hash", "hashes": hashes})
        return
    for digest in hashes:
        _echo(digest)


@app.command()
def dedupe(
    source: Path = typer.Argument(..., help="JSON array or JSON Lines file."),
    out: Path | None = typer.Option(None, "--out", help="Write distinct records as JSON Lines."),
    hasher_key: str | None = typer.Option(None, "--hasher", help=_HASHER_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """Drop records whose content was already seen, keeping first-seen order."""
    hasher = _resolve_hasher(hasher_key, json_output=json_output)
    try:
        records = read_records(source)
        distinct = HashedSet(records, hasher=hasher)
    except (HashFailure, FileNotFoundError, ValueError) as error:
        _fail(f"dedupe failed: {error}", exit_code=1, json_output=json_output, error=error)

    _emit_records(
        "dedupe",
        list(distinct),
        out=out,
        json_output=json_output,
        extra={"input_size": len(records), "duplicates": len(records) - distinct.size},
    )


def _run_set_operation(
    command: str,
    operation: SetOperation,
    *,
    left: Path,
    right: Path,
    out: Path | None,
    hasher_key: str | None,
    json_output: bool,
) -> None:
    hasher = _resolve_hasher(hasher_key, json_output=json_output)
    try:
        left_set = HashedSet(read_records(left), hasher=hasher)
        right_set = HashedSet(read_records(right), hasher=hasher)
        result = operation(left_set, right_set)
    except (HashFailure, FileNotFoundError, ValueError) as error:
        _fail(f"{command} failed: {error}", exit_code=1, json_output=json_output, error=error)

    _emit_records(
        command,
        list(result),
        out=out,
        json_output=json_output,
        extra={"left_size": left_set.size, "right_size": right_set.size},
    )


@app.command()
def union(
    left: Path = typer.Argument(..., help="Left JSON array or JSON Lines file."),
    right: Path = typer.Argument(..., help="Right JSON array or JSON Lines file."),
    out: Path | None = typer.Option(None, "--out", help="Write result records as JSON Lines."),
    hasher_key: str | None = typer.Option(None, "--hasher", help=_HASHER_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """Records in either file (left order first)."""
    _run_set_operation(
        "union",
        HashedSet.union,
        left=left,
        right=right,
        out=out,
        hasher_key=hasher_key,
        json_output=json_output,
    )


@app.command()
def intersection(
    left: Path = typer.Argument(..., help="Left JSON array or JSON Lines file."),
    right: Path = typer.Argument(..., help="Right JSON array or JSON Lines file."),
    out: Path | None = typer.Option(None, "--out", help="Write result records as JSON Lines."),
    hasher_key: str | None = typer.Option(None, "--hasher", help=_HASHER_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """Records of the left file whose content also appears in the right file."""
    _run_set_operation(
        "intersection",
        HashedSet.intersection,
        left=left,
        right=right,
        out=out,
        hasher_key=hasher_key,
        json_output=json_output,
    )


@app.command()
def difference(
    left: Path = typer.Argument(..., help="Left JSON array or JSON Lines file."),
    right: Path = typer.Argument(..., help="Right JSON array or JSON Lines file."),
    out: Path | None = typer.Option(None, "--out", help="Write result records as JSON Lines."),
    hasher_key: str | None = typer.Option(None, "--hasher", help=_HASHER_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """Records of the left file whose content is absent from the right file."""
    _run_set_operation(
        "difference",
        HashedSet.difference,
        left=left,
        right=right,
        out=out,
        hasher_key=hasher_key,
        json_output=json_output,
    )


@app.command()
def hashers(
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable output."),
) -> None:
    """List registered hasher keys."""
    keys = list(list_hasher_keys())
    if json_output:
        _echo_json({"status": "pass", "exit_code": 0, "hashers": keys})
        return
    for key in keys:
        _echo(key)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
