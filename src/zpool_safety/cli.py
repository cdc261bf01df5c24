"""
ZFS pool safety analyzer CLI.

Checks whether a pool's refquota can be removed safely and prints the report.
Exit codes: 0 report produced, 1 no member disks found, 2 pool state unreadable.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.text import Text

from zpool_safety.errors import CollectionError, NoDisksFound
from zpool_safety.logging_setup import setup_logging
from zpool_safety.services.analysis_service import AnalysisService
from zpool_safety.services.config_service import ConfigPaths, ConfigService

EXIT_NO_DISKS = 1
EXIT_COLLECTION_FAILED = 2

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
log = structlog.get_logger(__name__)

app = typer.Typer(
    name="zpool-safety",
    help="Analyze a ZFS pool and recommend whether its refquota can be removed.",
    add_completion=False,
)

_LINE_STYLES = (
    ("KEEP QUOTA", "bold red"),
    ("SAFE TO REMOVE", "bold green"),
    ("- WARNING", "red"),
    ("- NOTE", "yellow"),
    ("===", "bold blue"),
    ("[", "bold"),
)


def _styled(report_text: str) -> Text:
    out = Text()
    for line in report_text.splitlines(keepends=True):
        style = next((s for prefix, s in _LINE_STYLES if line.startswith(prefix)), "")
        out.append(line, style=style)
    return out


@app.command()
def analyze(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config JSON (default: $XDG_CONFIG_HOME/zpool_safety/config.json)"
    ),
    html: Optional[Path] = typer.Option(None, "--html", help="Also write the report as HTML to this path"),
    log_level: str = typer.Option("WARNING", "--log-level", help="DEBUG/INFO/WARNING/ERROR"),
    log_format: str = typer.Option("console", "--log-format", help="console or json"),
) -> None:
    """Collect pool state, evaluate safety conditions and print the report."""
    setup_logging(log_level, log_format)

    service = ConfigService(ConfigPaths(path=config)) if config else ConfigService()
    cfg = service.resolve()

    analysis = AnalysisService(cfg)
    try:
        outcome = analysis.run()
    except NoDisksFound as e:
        log.error("analysis.no_disks", pool=cfg.pool)
        err_console.print(Text.assemble(("ERROR: ", "red"), str(e)))
        raise typer.Exit(code=EXIT_NO_DISKS)
    except CollectionError as e:
        log.error("analysis.collection_failed", pool=cfg.pool, error=str(e))
        err_console.print(Text.assemble(("ERROR: ", "red"), str(e)))
        raise typer.Exit(code=EXIT_COLLECTION_FAILED)

    console.print(_styled(outcome.report.text), end="", soft_wrap=True)

    if html is not None:
        written = analysis.reporter.write_html(html, outcome.report.html)
        err_console.print(f"HTML report written: {written}")
