"""CLI entry point for response2files."""

import sys
from pathlib import Path

import click
import structlog

from .config import settings
from .detection import detect_format
from .errors import InputTooLargeError
from .pipeline import parse
from .repair.auto_repair import aggressive_fix, quick_validate, safe_apply
from .repair.json_repair import repair_json
from .schemas.result import ParseResult, ParserOptions
from .streaming import build_continuation_prompt
from .utils.logging_setup import setup_logging
from .utils.token_estimator import count_lines, estimate_tokens

logger = structlog.get_logger(__name__)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
def main(verbose: bool):
    """Response2Files - Extract files from LLM responses."""
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging()


def _read(file_path: Path) -> str:
    return file_path.read_text(encoding="utf-8")


def _parse_or_exit(text: str, aggressive_recovery: bool | None = None) -> ParseResult:
    try:
        return parse(text, ParserOptions(aggressive_recovery=aggressive_recovery))
    except InputTooLargeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _write_files(result: ParseResult, output_dir: Path) -> int:
    """Write extracted files under output_dir; paths escaping it are skipped."""
    root = output_dir.resolve()
    written = 0
    for path, content in result.files.items():
        target = (root / path).resolve()
        if root not in target.parents:
            logger.warning("Skipping path outside output directory", path=path)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content + "\n", encoding="utf-8")
        written += 1
    return written


@main.command("parse")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.option("--no-recovery", is_flag=True, help="Disable recovery through other formats")
@click.option("--stats", is_flag=True, help="Show line and token counts per file")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Write extracted files under this directory",
)
def parse_cmd(file_path: Path, as_json: bool, no_recovery: bool, stats: bool, output_dir: Path | None):
    """Parse a saved model response."""
    result = _parse_or_exit(_read(file_path), aggressive_recovery=False if no_recovery else None)

    if as_json:
        click.echo(result.model_dump_json(by_alias=True, indent=2, exclude_none=True))
    else:
        click.echo(f"Format: {result.format.value}")
        click.echo(f"Files: {result.file_count}")
        for path, content in result.files.items():
            line = f"  {path}"
            if stats:
                line += f" ({count_lines(content)} lines, {estimate_tokens(content):,} tokens)"
            if path in result.recovered_files:
                line += " [recovered]"
            click.echo(line)
        for path in result.incomplete_files:
            click.echo(f"  {path} [incomplete]")
        if result.deleted_files:
            click.echo(f"Deleted: {', '.join(result.deleted_files)}")
        if result.batch:
            status = "complete" if result.batch.is_complete else "incomplete"
            click.echo(f"Batch: {result.batch.current}/{result.batch.total} ({status})")
        click.echo(f"Truncated: {'yes' if result.truncated else 'no'}")
        for warning in result.warnings:
            click.echo(f"Warning: {warning}")
        for error in result.errors:
            click.echo(f"Error: {error}")

    if output_dir:
        written = _write_files(result, output_dir)
        click.echo(f"Wrote {written} files to {output_dir}", err=as_json)

    if result.has_errors and not result.file_count:
        sys.exit(1)


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def detect(file_path: Path):
    """Print the detected response format."""
    click.echo(detect_format(_read(file_path)).value)


@main.command("repair-json")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def repair_json_cmd(file_path: Path):
    """Close truncated JSON and print it."""
    try:
        result = repair_json(_read(file_path))
    except InputTooLargeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(result.json)
    for repair in result.repairs:
        click.echo(f"Repair: {repair}", err=True)


@main.command("fix-code")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--show-fixes", is_flag=True, help="List the repair passes that changed the code")
def fix_code(file_path: Path, show_fixes: bool):
    """Run syntax auto-repair on a source file and print the result."""
    code = _read(file_path)
    fixed = safe_apply(code)
    click.echo(fixed)

    if show_fixes:
        outcome = aggressive_fix(code)
        if fixed == code and outcome.changed:
            click.echo("Repairs reverted: result failed validation", err=True)
        for fix in outcome.fixes_applied:
            click.echo(f"Fix: {fix}", err=True)
        click.echo(f"Valid: {'yes' if quick_validate(fixed) else 'no'}", err=True)


@main.command("continue")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def continue_cmd(file_path: Path):
    """Print the prompt for the next batch of a multi-batch response."""
    result = _parse_or_exit(_read(file_path))
    prompt = build_continuation_prompt(result)
    if prompt is None:
        click.echo("Batch is complete, nothing to continue.", err=True)
        sys.exit(1)
    click.echo(prompt)


if __name__ == "__main__":
    main()
