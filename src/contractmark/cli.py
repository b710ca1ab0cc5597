"""Developer CLI: run the test suite with a Rich summary and a log file.

Entry point: ``test-all`` (see pyproject.toml).
"""

from __future__ import annotations

import re
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import IO

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from contractmark import __version__

console = Console()

_COLLECTED_RE = re.compile(r"collected (\d+) items?(?:\s*/\s*(\d+) deselected)?")
_RESULT_KW_RE = re.compile(r"\b(PASSED|FAILED|ERROR|SKIPPED|XFAIL|XPASS)\b")
_SEPARATOR_RE = re.compile(r"^={5,}")


def _build_test_header(
    title: str, start_time: datetime, command_str: str
) -> tuple[Text, str]:
    """Build the Rich panel content and the plain-text log header.

    Returns:
        (rich_text, log_header) tuple.
    """
    header_text = Text()
    header_text.append(f"{title}\n", style="bold")
    header_text.append(f"ContractMark v{__version__}\n", style="dim")
    header_text.append(f"Started: {start_time.strftime('%H:%M:%S')}\n", style="dim")
    header_text.append(f"Command: {command_str}", style="cyan")

    rule = "=" * 60
    log_header = (
        f"{rule}\n{title}\nContractMark v{__version__}\n"
        f"Started: {start_time.isoformat()}\nCommand: {command_str}\n{rule}\n\n"
    )
    return header_text, log_header


def _parse_collection(line: str) -> int | None:
    """Extract the number of selected tests from a collection line."""
    m = _COLLECTED_RE.search(line)
    if not m:
        return None
    deselected = int(m.group(2)) if m.group(2) else 0
    return int(m.group(1)) - deselected


def _is_failure(line: str) -> bool:
    m = _RESULT_KW_RE.search(line)
    return bool(m) and m.group(1) in ("FAILED", "ERROR")


def _stream(process: subprocess.Popen[str], log_file: IO[str], *, rich: bool) -> int:
    """Copy pytest output to the log; echo collection, failures and summary.

    Everything before the closing separator is suppressed on stdout except
    the collection count and FAILED/ERROR lines.
    """
    separators = 0
    in_summary = False
    for line in process.stdout or []:
        log_file.write(line)
        log_file.flush()
        stripped = line.rstrip()

        if not in_summary and _SEPARATOR_RE.match(stripped):
            separators += 1
            in_summary = separators >= 2

        if in_summary:
            print(line, end="")
        elif (count := _parse_collection(stripped)) is not None:
            if rich:
                console.print(f"[dim]Running {count} tests[/]")
            else:
                print(line, end="")
        elif _is_failure(stripped):
            if rich:
                console.print(f"[red]{stripped}[/]")
            else:
                print(line, end="")

    process.wait()
    return process.returncode


def _run_pytest(title: str, log_path: Path, default_args: list[str]) -> int:
    """Run pytest with Rich formatting and logging."""
    start_time = datetime.now()
    interactive = sys.stdout.isatty()

    all_args = [sys.executable, "-m", "pytest", *default_args, *sys.argv[1:]]
    command_str = " ".join(["pytest", *all_args[3:]])

    header_text, log_header = _build_test_header(title, start_time, command_str)
    if interactive:
        console.print(Panel(header_text, border_style="blue"))
    else:
        print(f"log={log_path}")

    with log_path.open("w", encoding="utf-8") as log_file:
        log_file.write(log_header)
        log_file.flush()

        process = subprocess.Popen(  # nosec B603 - fixed interpreter and args
            all_args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )
        exit_code = _stream(process, log_file, rich=interactive)

        end_time = datetime.now()
        duration = end_time - start_time
        rule = "=" * 60
        log_file.write(
            f"\n{rule}\nFinished: {end_time.isoformat()}\n"
            f"Duration: {duration}\nExit code: {exit_code}\n{rule}\n"
        )

    if interactive:
        status = (
            Text("PASSED", style="bold green")
            if exit_code == 0
            else Text("FAILED", style="bold red")
        )
        footer_text = Text("Status: ")
        footer_text.append_text(status)
        footer_text.append(f"\nDuration: {duration}")
        footer_text.append(f"\nLog: {log_path}", style="dim")
        console.print()
        console.print(
            Panel(footer_text, border_style="green" if exit_code == 0 else "red")
        )

    return exit_code


def test_all() -> None:
    """Run the unit test suite.

    Flags applied:
        --durations=10: Show 10 slowest tests
        -v: Verbose output

    Output saved to: test-all.log
    """
    sys.exit(
        _run_pytest(
            title="ContractMark Test Suite",
            log_path=Path("test-all.log"),
            default_args=["--durations=10", "-v"],
        )
    )
