"""Typer application and CLI entry point for apitree.

Commands:

* ``apitree inspect SOURCE`` -- compile one discovery document and print
  its resource/method tree.
* ``apitree apis [DIRECTORY_URL]`` -- discover every API in a directory and
  list names and versions.
* ``apitree call SOURCE METHOD`` -- compile one document and execute a
  method by dotted path.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Each command reports :class:`~apitree.exceptions.ApitreeError`
on stderr and exits with the error's ``exit_code``.
"""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from typing import Any, Coroutine, Optional, TypeVar

import typer

from apitree import __version__
from apitree.exit_codes import EXIT_INVALID_USAGE

T = TypeVar("T")

app = typer.Typer(
    name="apitree",
    help="Build callable API clients from discovery documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apitree {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    debug: Optional[bool] = typer.Option(
        None, "--debug/--no-debug", help="Log every document read and request."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~apitree.output.OutputManager` and stores
    shared flags in ``ctx.obj``.
    """
    from apitree.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro* to completion, turning apitree errors into a clean exit."""
    from apitree.exceptions import ApitreeError
    from apitree.output import error

    try:
        return asyncio.run(coro)
    except ApitreeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _resolve(ctx: typer.Context, **overrides: Any):  # noqa: ANN202
    """Resolve the effective config, exiting on config errors."""
    from apitree.config import resolve_config
    from apitree.exceptions import ConfigError
    from apitree.output import error

    obj = ctx.obj or {}
    try:
        return resolve_config(cli_debug=obj.get("debug"), **overrides)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@app.command("inspect")
def inspect_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File path or URL of a discovery document."),
) -> None:
    """Print the resource and method tree of one API.

    Example::

        apitree inspect ./drive-v3.json
        apitree --json inspect https://www.googleapis.com/discovery/v1/apis/drive/v3/rest
    """
    from apitree.discovery import Discovery
    from apitree.generator.endpoint import describe_tree
    from apitree.output import print_tree

    config = _resolve(ctx)

    async def _inspect():  # noqa: ANN202
        async with Discovery(config.discovery_options()) as discovery:
            return await discovery.discover_api(source)

    endpoint_type = _run(_inspect())
    label = endpoint_type.name or source
    if endpoint_type.version:
        label = f"{label} {endpoint_type.version}"
    print_tree(label, describe_tree(endpoint_type.instantiate()))


@app.command("apis")
def apis_command(
    ctx: typer.Context,
    directory_url: Optional[str] = typer.Argument(
        None, help="Discovery directory URL (defaults to the configured one)."
    ),
    include_private: Optional[bool] = typer.Option(
        None, "--include-private/--public-only", help="Include private APIs."
    ),
) -> None:
    """Discover every API in a directory and list names and versions.

    Example::

        apitree apis
        apitree apis https://example.com/discovery/v1/apis --include-private
    """
    from apitree.discovery import Discovery
    from apitree.output import print_table

    config = _resolve(
        ctx,
        cli_directory_url=directory_url,
        cli_include_private=include_private,
    )

    async def _discover_all():  # noqa: ANN202
        async with Discovery(config.discovery_options()) as discovery:
            return await discovery.discover_all_apis(config.directory_url)

    registry = _run(_discover_all())
    rows = [[name, ", ".join(selector.versions)] for name, selector in registry.items()]
    print_table(["Name", "Versions"], rows, title=f"APIs ({len(rows)})")


@app.command("call")
def call_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File path or URL of a discovery document."),
    method: str = typer.Argument(..., help="Dotted method path, e.g. files.list."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Request parameter as key=value (repeatable)."
    ),
    body: Optional[str] = typer.Option(
        None, "--body", help="JSON request body."
    ),
) -> None:
    """Execute one API method and print the response.

    Example::

        apitree call ./drive-v3.json files.get -P fileId=abc123
    """
    from apitree.discovery import Discovery
    from apitree.generator.endpoint import resolve_method
    from apitree.output import error, format_response

    params: dict[str, Any] = {}
    for item in param or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            error(f"Invalid --param {item!r}; expected key=value")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        params[key] = value

    if body is not None:
        try:
            params["resource"] = json.loads(body)
        except json.JSONDecodeError as exc:
            error(f"Invalid JSON body: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    config = _resolve(ctx)

    async def _call():  # noqa: ANN202
        async with Discovery(config.discovery_options()) as discovery:
            endpoint_type = await discovery.discover_api(source)
            endpoint = endpoint_type.instantiate(discovery=discovery)
            return await resolve_method(endpoint, method)(params)

    format_response(_run(_call()))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``apitree`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
