"""
Command-line interface for OpenAPI function calling.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

import typer

from .config import Settings
from .converter import ConversionResult, ToolSchemaConverter
from .exceptions import FunctionCallingError
from .loader import load_api_description
from .logging_config import setup_logging
from .pipeline import FunctionCallingPipeline

app = typer.Typer(help="Call HTTP APIs from natural language through LLM function calling")


def _save_text(content: str, path: Path) -> None:
    """Save text to a file.

    Args:
        content: The content to save
        path: Path where to save the file

    Raises:
        typer.Exit: If the file cannot be saved
    """
    try:
        path.write_text(content)
    except OSError as e:
        typer.echo(f"Error saving to {path}: {str(e)}", err=True)
        raise typer.Exit(1)


def _description_source(source: str) -> Union[str, Path]:
    if source.startswith(("http://", "https://")):
        return source
    return Path(source)


def _echo_skipped(result: ConversionResult) -> None:
    for skip in result.skipped:
        line = f"Skipped {skip.method.upper()} {skip.path} ({skip.operation_id or '-'}): {skip.reason.value}"
        if skip.parameter:
            line += f" [{skip.parameter}]"
        typer.echo(line, err=True)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Call HTTP APIs from natural language through LLM function calling."""
    setup_logging(logging.DEBUG if verbose else Settings().log_level)


@app.command()
def convert(
    input_file: Path = typer.Argument(..., help="Path to the OpenAPI JSON or YAML file"),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Path to save the tool declarations. If not provided, will use input filename with .tools.json suffix",
    ),
    stop_path_on_parameterless: bool = typer.Option(
        False,
        "--stop-path-on-parameterless",
        help="Drop the remaining operations of a path after one without parameters (legacy behaviour)",
    ),
    report: bool = typer.Option(False, "--report", help="List skipped operations on stderr"),
) -> None:
    """Convert an OpenAPI description to tool declarations."""
    if output_file is None:
        output_file = input_file.parent / f"{input_file.stem}.tools.json"

    try:
        description = load_api_description(input_file)
        converter = ToolSchemaConverter(stop_path_on_parameterless=stop_path_on_parameterless)
        result = converter.convert_with_report(description)
    except FunctionCallingError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    _save_text(ToolSchemaConverter.to_json(result.tools), output_file)
    typer.echo(f"Converted {len(result.tools)} operations from {input_file} to {output_file}")
    if report:
        _echo_skipped(result)


@app.command()
def ask(
    query: str = typer.Argument(..., help="Natural language query"),
    spec: Optional[str] = typer.Option(
        None,
        "--spec",
        "-s",
        help="OpenAPI file or URL. Defaults to the API_DOCS_URL setting",
    ),
    execute: bool = typer.Option(
        True, "--execute/--no-execute", help="Dispatch the suggested call to the API"
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL of the API. Defaults to the API_BASE_URL setting"
    ),
) -> None:
    """Ask the model which operation answers a query, and optionally run it."""
    settings = Settings()
    if base_url:
        settings = settings.model_copy(update={"api_base_url": base_url})

    source = spec or settings.api_docs_url
    if not source:
        typer.echo("Error: no API description given (use --spec or set API_DOCS_URL)", err=True)
        raise typer.Exit(1)

    try:
        description = load_api_description(
            _description_source(source), timeout=settings.request_timeout
        )
        pipeline = FunctionCallingPipeline.from_settings(description, settings, execute=execute)
        result = pipeline.run(query)
    except FunctionCallingError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    if result.function_call is None:
        typer.echo("The model did not suggest a function call")
        return

    typer.echo(json.dumps(result.function_call.model_dump(by_alias=True), indent=2))
    if result.result is not None:
        typer.echo(result.result)


def main():
    """Entry point for the CLI."""
    app()
