from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from .workflows.doctor import build_doctor_report, format_doctor_report
from .workflows.errors import DiscoveryError
from .workflows.spider import run_spider
from .workflows.spider_config import (
    DEFAULT_DATA_PATH,
    ENV_BASE_URL,
    ENV_CACHE_DIR,
    ENV_CACHE_TTL,
    ENV_CONCURRENCY,
    ENV_LANGUAGE,
    ENV_TIMEOUT,
    ENV_USER_AGENT,
    CrawlConfig,
)

app = typer.Typer(add_help_option=False, no_args_is_help=False)


def _minimal_help() -> str:
    return f"""signspider (SpreadTheSign crawler)

Usage:
  signspider crawl [--url <URL>] [--language <CODE>] [--data <FILE>]
                   [--cache-folder <DIR>] [--cache-duration <DURATION>]
                   [--concurrency <N>] [--verbose] [--json]
  signspider doctor [--cache-folder <DIR>] [--data <FILE>]

Environment (read from the process or a local .env):
  {ENV_BASE_URL}, {ENV_LANGUAGE}, {ENV_CONCURRENCY},
  {ENV_CACHE_DIR}, {ENV_CACHE_TTL}, {ENV_TIMEOUT}, {ENV_USER_AGENT}
"""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


def _build_config(**overrides) -> CrawlConfig:
    try:
        return CrawlConfig.from_env(**overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    help: bool = typer.Option(False, "--help", "-h", is_eager=True, help="Show help."),
) -> None:
    load_dotenv()
    if help or ctx.invoked_subcommand is None:
        typer.echo(_minimal_help())
        raise typer.Exit(code=0)


@app.command("crawl", add_help_option=True)
def crawl_cmd(
    url: Optional[str] = typer.Option(None, "--url", help="Base URL of the SpreadTheSign service."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language to spider, e.g. en.au."),
    data: Path = typer.Option(DEFAULT_DATA_PATH, "--data", "-d", help="Path to store the dataset JSON."),
    cache_folder: Optional[Path] = typer.Option(
        None, "--cache-folder", "-c", help="If provided, cache fetched HTML documents here."
    ),
    cache_duration: Optional[str] = typer.Option(
        None, "--cache-duration", help='How long cached pages remain valid, e.g. "1wk".'
    ),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="How many parallel requests are allowed."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Emit very verbose logs."),
    json_out: bool = typer.Option(False, "--json", help="Print the run audit as JSON to stdout."),
) -> None:
    """Crawl every category and write the merged dataset."""
    _configure_logging(verbose)
    config = _build_config(
        base_url=url,
        language=language,
        concurrency=concurrency,
        cache_folder=cache_folder,
        cache_ttl=cache_duration,
    )
    try:
        result = run_spider(config, data)
    except DiscoveryError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)
    except Exception as exc:
        typer.echo(f"fatal: {exc}", err=True)
        raise typer.Exit(code=3)
    if json_out:
        sys.stdout.write(json.dumps(result.audit, ensure_ascii=False) + "\n")
    raise typer.Exit(code=0)


@app.command("doctor", add_help_option=True)
def doctor_cmd(
    cache_folder: Optional[Path] = typer.Option(None, "--cache-folder", "-c", help="Cache folder to check."),
    data: Path = typer.Option(DEFAULT_DATA_PATH, "--data", "-d", help="Output path to check."),
) -> None:
    """Print configuration and environment diagnostics."""
    config = _build_config(cache_folder=cache_folder)
    report = build_doctor_report(config, data_path=data)
    typer.echo(format_doctor_report(report))
    raise typer.Exit(code=0 if report.get("ok", True) else 2)
