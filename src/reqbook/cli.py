"""CLI entry point for reqbook."""

import logging
from pathlib import Path

import click
import yaml

from reqbook.env.base import Environment
from reqbook.env.manager import EnvironmentManager
from reqbook.errors import ResolutionError
from reqbook.parser.base import ParsedRequest, ParseResult
from reqbook.parser.detect import is_multipart, multipart_boundary
from reqbook.parser.multipart import MultipartBodyParser
from reqbook.parser.request_file import find_request, parse_request_file
from reqbook.parser.validator import validate_requests
from reqbook.resolver.engine import VariableResolutionEngine
from reqbook.resolver.environment import EnvironmentResolver
from reqbook.store import ResponseStore, load_responses


def _format_request(request: ParsedRequest) -> str:
    lines = [f"{request.method} {request.url}"]
    lines.extend(f"{key}: {value}" for key, value in request.headers.items())
    if request.body is not None:
        lines.extend(["", request.body])
    return "\n".join(lines)


def _load_environment(env_dir: Path | None, env_name: str | None) -> Environment | None:
    if env_dir is None:
        return None
    manager = EnvironmentManager(env_dir)
    manager.load()
    if env_name and not manager.switch(env_name):
        available = ", ".join(manager.available) or "none"
        raise click.ClickException(f"Unknown environment '{env_name}' (available: {available})")
    return manager.current


def _select_request(result: ParseResult, request_id: str | None, name: str | None, line: int | None) -> ParsedRequest:
    if request_id is None and name is None and line is None:
        raise click.UsageError("Choose a request with --id, --name or --line.")
    request = find_request(result, request_id=request_id, name=name, line=line)
    if request is None:
        raise click.ClickException("No matching request found.")
    return request


def _build_engine(env_dir: Path | None, env_name: str | None, responses: Path | None) -> VariableResolutionEngine:
    environment = _load_environment(env_dir, env_name)
    try:
        store = load_responses(responses) if responses else ResponseStore()
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e)) from e
    return VariableResolutionEngine(environment=environment, store=store)


def _resolve(engine: VariableResolutionEngine, request: ParsedRequest) -> ParsedRequest:
    try:
        return engine.resolve(request)
    except ResolutionError as e:
        raise click.ClickException(f"{request.id}: {e.message}") from e


def select_options(f):
    f = click.option("--line", type=int, default=None, help="Select the request containing this line.")(f)
    f = click.option("--name", default=None, help="Select a request by its @name.")(f)
    f = click.option("--id", "request_id", default=None, help="Select a request by id (req-1, req-2, ...).")(f)
    return f


def resolution_options(f):
    f = click.option(
        "--responses",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        envvar="REQBOOK_RESPONSES",
        help="YAML/JSON file of recorded responses for chain variables.",
    )(f)
    f = click.option("--env", "env_name", envvar="REQBOOK_ENV", default=None, help="Environment to activate.")(f)
    f = click.option(
        "--env-dir",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        envvar="REQBOOK_ENV_DIR",
        default=None,
        help="Directory holding .env files.",
    )(f)
    return f


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """reqbook — parse and resolve multi-request .http files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("list")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def list_requests(ctx: click.Context, file_path: Path):
    """List the requests found in a request file."""
    result = parse_request_file(file_path)
    for request in result.requests:
        name = f" @{request.name}" if request.name else ""
        click.echo(f"{request.id}{name}  {request.method} {request.url}  (line {request.line_number})")
    click.echo(f"Found {len(result.requests)} requests.")

    for error in result.errors:
        click.echo(f"Line {error.line_number}: {error.message}", err=True)
    if not result.success:
        ctx.exit(1)


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@select_options
@resolution_options
def resolve(
    file_path: Path,
    request_id: str | None,
    name: str | None,
    line: int | None,
    env_dir: Path | None,
    env_name: str | None,
    responses: Path | None,
):
    """Resolve one request and print it."""
    result = parse_request_file(file_path)
    request = _select_request(result, request_id, name, line)
    engine = _build_engine(env_dir, env_name, responses)
    click.echo(_format_request(_resolve(engine, request)))


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@resolution_options
@click.pass_context
def check(ctx: click.Context, file_path: Path, env_dir: Path | None, env_name: str | None, responses: Path | None):
    """Report parse errors, request issues and missing variables."""
    result = parse_request_file(file_path)
    engine = _build_engine(env_dir, env_name, responses)
    problems = 0

    for error in result.errors:
        click.echo(f"Line {error.line_number}: {error.message}")
        problems += 1

    for request_id, message in validate_requests(result.requests).items():
        click.echo(f"{request_id}: {message}")
        problems += 1

    for request in result.requests:
        missing = engine.missing_variables(request)
        if missing:
            click.echo(f"{request.id}: missing variables: {', '.join(missing)}")
            problems += 1

    if problems:
        click.echo(f"{problems} problem(s) found.")
        ctx.exit(1)
    click.echo(f"OK: {len(result.requests)} requests.")


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@select_options
@resolution_options
def multipart(
    file_path: Path,
    request_id: str | None,
    name: str | None,
    line: int | None,
    env_dir: Path | None,
    env_name: str | None,
    responses: Path | None,
):
    """Show the parts of a multipart request."""
    result = parse_request_file(file_path)
    request = _resolve(_build_engine(env_dir, env_name, responses), _select_request(result, request_id, name, line))

    if not is_multipart(request):
        raise click.ClickException(f"{request.id} is not a multipart/form-data request.")
    boundary = multipart_boundary(request)
    if boundary is None:
        raise click.ClickException("No boundary found in Content-Type header.")

    parsed = MultipartBodyParser().parse(request.body, boundary)
    for message in parsed.errors:
        click.echo(f"Skipped: {message}", err=True)
    if not parsed.success:
        raise click.ClickException(parsed.error)

    for part in parsed.multipart.parts:
        if part.is_file:
            extra = f" filename={part.filename}" if part.filename else ""
            click.echo(f"{part.name}: file {part.file_path}{extra}")
        else:
            click.echo(f"{part.name}: {part.value}")


@main.command()
@click.option(
    "--env-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    envvar="REQBOOK_ENV_DIR",
    default=Path("."),
    help="Directory holding .env files.",
)
@click.option("--env", "env_name", envvar="REQBOOK_ENV", default=None, help="Environment to show.")
def env(env_dir: Path, env_name: str | None):
    """List environments and the active one's expanded variables."""
    manager = EnvironmentManager(env_dir)
    manager.load()
    if not manager.available:
        raise click.ClickException(f"No environment files found in {env_dir}")
    if env_name and not manager.switch(env_name):
        raise click.ClickException(f"Unknown environment '{env_name}'")

    current = manager.current
    click.echo(f"Environments: {', '.join(manager.available)} (active: {current.name})")
    resolver = EnvironmentResolver(current)
    for key in current.variables:
        try:
            value = resolver.expand_variable(key)
        except ResolutionError as e:
            value = f"<error: {e.message}>"
        click.echo(f"  {key}={value}")
