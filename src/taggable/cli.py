"""Command-line utilities for taggable.

``taggable-render`` shows how canonical text reads once its tags are
resolved against the demo directory.  ``test-unit`` wraps pytest with a
Rich header/footer and a log file, for debugging test failures.
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taggable.conversion import Segment

console = Console()


def segments_to_rich(segments: Sequence[Segment]) -> Text:
    """Build a Rich Text with tag segments styled by their policy style."""
    text = Text()
    for segment in segments:
        if segment.is_tag:
            text.append(segment.text, style=f"bold {segment.style or ''}".strip())
        else:
            text.append(segment.text)
    return text


async def _render(canonical: str) -> Text:
    from taggable.conversion import segments_from_canonical
    from taggable.demo.directory import POLICIES, lookup_directory, to_segment

    segments = await segments_from_canonical(
        canonical, POLICIES, lookup_directory, to_segment
    )
    return segments_to_rich(segments)


def render() -> None:
    """Render canonical text given as arguments (or the demo sample).

    Usage:
        taggable-render "Hello @1ax and welcome to #myFlutterId"
    """
    from taggable.demo.directory import INITIAL_TEXT

    canonical = " ".join(sys.argv[1:]) or INITIAL_TEXT
    rendered = asyncio.run(_render(canonical))

    body = Text()
    body.append("Display:   ", style="dim")
    body.append_text(rendered)
    body.append("\nCanonical: ", style="dim")
    body.append(canonical, style="cyan")
    console.print(Panel(body, title="taggable", border_style="blue"))


def _build_test_header(title: str, start_time: datetime, command_str: str) -> Text:
    """Rich header shown above a test run."""
    header = Text()
    header.append(f"{title}\n", style="bold")
    header.append(f"Started: {start_time.strftime('%H:%M:%S')}\n", style="dim")
    header.append(f"Command: {command_str}", style="cyan")
    return header


def test_unit() -> None:
    """Run the unit tests with Rich formatting, logging to test-unit.log."""
    log_path = Path("test-unit.log")
    start_time = datetime.now()
    all_args = ["pytest", "tests/unit", *sys.argv[1:]]

    header = _build_test_header("Unit Tests", start_time, " ".join(all_args))
    console.print(Panel(header, border_style="blue"))

    with log_path.open("w") as log_file:
        result = subprocess.run(  # nosec B603 - args from trusted CLI config
            [sys.executable, "-m", *all_args],
            stdout=log_file,
            stderr=subprocess.STDOUT,
            check=False,
        )

    duration = datetime.now() - start_time
    if result.returncode == 0:
        status, border = Text("PASSED", style="bold green"), "green"
    else:
        status, border = Text("FAILED", style="bold red"), "red"
    footer = Text("Status: ")
    footer.append_text(status)
    footer.append(f"\nDuration: {duration}")
    footer.append(f"\nLog: {log_path}", style="dim")
    console.print(Panel(footer, border_style=border))
    sys.exit(result.returncode)
