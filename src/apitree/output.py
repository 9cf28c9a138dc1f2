"""Terminal rendering and diagnostics for apitree.

Everything apitree prints goes through one :class:`OutputManager`:

* **stdout** carries results only: decoded API responses
  (:meth:`~OutputManager.format_response`), the API listing
  (:meth:`~OutputManager.print_table`) and endpoint trees
  (:meth:`~OutputManager.print_tree`).
* **stderr** carries diagnostics: discovery debug messages
  (:meth:`~OutputManager.info`), transport traces
  (:meth:`~OutputManager.debug`) and failures (:meth:`~OutputManager.error`).

The CLI installs a manager built from its global flags with
:func:`set_output`. Library code logs through the module-level functions,
which use whatever manager is installed, so an embedding application
controls verbosity by installing its own.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree


class OutputFormat(str, Enum):
    """How results are rendered on stdout.

    ``AUTO`` becomes ``RICH`` on an interactive terminal with colour
    enabled, ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders results to stdout and diagnostics to stderr.

    Args:
        format: Result format; ``AUTO`` is resolved once, here.
        no_color: Disable colour and Rich markup. Also implied by
            ``NO_COLOR`` or ``TERM=dumb``.
        quiet: Drop :meth:`info` messages.
        verbose: Show :meth:`debug` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    # ------------------------------------------------------------------ #
    # Results (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, result: Any) -> None:
        """Print the result of one API call.

        *result* is what :func:`~apitree.client.apirequest.create_api_request`
        returns: decoded JSON, the raw text of a non-JSON body, or ``None``
        for an empty body.

        * **JSON mode** -- always one JSON value, so an empty body is
          ``null`` and a text body is a JSON string.
        * **Plain mode** -- objects as ``key<TAB>value`` lines, arrays one
          element per line, text as-is. Nested values are compact JSON.
        * **Rich mode** -- highlighted JSON for objects and arrays, text
          as-is.

        Nothing is printed for an empty body outside JSON mode.
        """
        if self._format == OutputFormat.JSON:
            self._emit(_to_json(result))
        elif result is None:
            return
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(result):
                self._emit(line)
        elif isinstance(result, (dict, list)):
            self._stdout.print(Syntax(_to_json(result), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(result), markup=False, highlight=False)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers*.

        JSON mode prints one object per row keyed by header; plain mode
        prints tab-separated lines with the header first. *title* is shown
        in rich mode only.
        """
        if self._format == OutputFormat.JSON:
            self._emit(_to_json([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN:
            self._emit("\t".join(headers))
            for row in rows:
                self._emit("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def print_tree(self, label: str, branches: dict[str, Any]) -> None:
        """Print a nested mapping as a tree.

        *branches* maps each label to either a nested mapping (an inner
        branch) or ``None`` (a leaf), the shape
        :func:`~apitree.generator.endpoint.describe_tree` produces.

        * **Rich mode** -- :class:`~rich.tree.Tree` with guide lines.
        * **JSON mode** -- the mapping itself under ``label``.
        * **Plain mode** -- one label per line, indented two spaces per level.
        """
        if self._format == OutputFormat.JSON:
            self._emit(_to_json({label: branches}))
            return

        if self._format == OutputFormat.PLAIN:
            self._emit(label)
            stack = [(name, sub, 1) for name, sub in reversed(list(branches.items()))]
            while stack:
                name, sub, depth = stack.pop()
                self._emit(f"{'  ' * depth}{name}")
                if sub:
                    stack.extend(
                        (child, grand, depth + 1)
                        for child, grand in reversed(list(sub.items()))
                    )
            return

        root = Tree(f"[bold]{label}[/bold]")
        stack = [(root, branches)]
        while stack:
            node, sub = stack.pop()
            for name, grand in sub.items():
                if grand is None:
                    node.add(f"[green]{name}[/green]")
                else:
                    stack.append((node.add(f"[cyan]{name}[/cyan]"), grand))
        self._stdout.print(root)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print a status message. Dropped in quiet mode."""
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message)

    def error(self, message: str) -> None:
        """Print an ``Error:`` line. Never dropped."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Print a ``[debug]`` line in verbose mode only."""
        if not self._verbose:
            return
        if self._no_color:
            print(f"[debug] {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[dim][debug] {message}[/dim]", markup=True, highlight=False)

    def _emit(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    return str(value)


def _plain_lines(result: Any) -> list[str]:
    if isinstance(result, dict):
        return [f"{key}\t{_cell(value)}" for key, value in result.items()]
    if isinstance(result, list):
        return [
            "\t".join(_cell(v) for v in item.values()) if isinstance(item, dict) else _cell(item)
            for item in result
        ]
    return [str(result)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager`."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Shortcuts over the global instance
# ------------------------------------------------------------------ #


def format_response(result: Any) -> None:
    get_output().format_response(result)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def print_tree(label: str, branches: dict[str, Any]) -> None:
    get_output().print_tree(label, branches)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
