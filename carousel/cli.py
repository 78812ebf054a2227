"""Main CLI entry point for carousel.

The CLI loads an inventory snapshot (credential store versions plus the
variables each deployment uses), builds the state graph and reports which
credentials match the requested filters and what their next lifecycle action
is. It never regenerates, deploys or deletes anything itself.
"""

from datetime import timedelta
from typing import Any, Callable, Optional, Tuple

import click

from carousel import __description__, __version__
from carousel.config import ConfigManager, FilterConfig, PolicyConfig
from carousel.render import render_details, render_table
from carousel.state import Action, State, action_filter
from carousel.utils.errors import CarouselError, ErrorHandler
from carousel.utils.logging import setup_logging
from carousel.utils.timeutil import parse_duration, utcnow


class DurationType(click.ParamType):
    """A ``<number><unit>`` duration such as ``30d``."""

    name = "duration"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> timedelta:
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationType()


def _split_csv(ctx: click.Context, param: click.Parameter, value: Tuple[str, ...]) -> Tuple[str, ...]:
    out = []
    for item in value or ():
        out.extend(part.strip() for part in item.split(",") if part.strip())
    return tuple(out)


def filter_options(func: Callable) -> Callable:
    """Add the shared ``--types`` and ``--deployments`` flags to a command."""
    func = click.option(
        "--deployments",
        "-d",
        multiple=True,
        callback=_split_csv,
        help="filter by deployment names (comma separated)",
    )(func)
    func = click.option(
        "--types",
        "-t",
        multiple=True,
        callback=_split_csv,
        help="filter by credential type (comma separated)",
    )(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to file in addition to console")
@click.option(
    "--inventory",
    "-i",
    envvar="CAROUSEL_INVENTORY",
    type=click.Path(dir_okay=False),
    help="Inventory snapshot (YAML or JSON)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    envvar="CAROUSEL_CONFIG",
    type=click.Path(dir_okay=False),
    help="Policy file (defaults to ./carousel.yml)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_file: Optional[str],
    inventory: Optional[str],
    config_path: Optional[str],
) -> None:
    """carousel - credential rotation planner.

    Computes the next lifecycle action (deploy, regenerate, mark or unmark
    transitional, clean up) for every credential version in an inventory
    snapshot.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["inventory"] = inventory
    ctx.obj["config_path"] = config_path
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


def _load(ctx: click.Context) -> Tuple[State, PolicyConfig]:
    config_manager = ConfigManager()
    policy = config_manager.load_policy(ctx.obj.get("config_path"))
    records, variables = config_manager.load_inventory(ctx.obj.get("inventory"))

    state = State()
    state.update(records, variables)
    return state, policy


@cli.command()
@filter_options
@click.option("--expires-within", type=DURATION, help="only certificates expiring within this duration")
@click.pass_context
def credentials(
    ctx: click.Context,
    types: Tuple[str, ...],
    deployments: Tuple[str, ...],
    expires_within: Optional[timedelta],
) -> None:
    """List credential versions matching the filters."""
    try:
        state, policy = _load(ctx)
        filter_config = policy.filters.override(types=types, deployments=deployments, expires_within=expires_within)
        now = utcnow()
        matches = state.credentials(*filter_config.filters(now))
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context="Listing credentials")
        return

    if not matches:
        click.echo("No credentials match the given filters")
        return

    click.echo(render_table(matches, now=now))


@cli.command()
@filter_options
@click.option("--older-than", type=DURATION, help="regenerate latest versions older than this")
@click.option("--expires-within", type=DURATION, help="regenerate certificates expiring within this")
@click.option("--ignore-update-mode", is_flag=True, help="apply rotation rules to no-overwrite variables too")
@click.option(
    "--action",
    "-a",
    "actions",
    multiple=True,
    type=click.Choice([a.value for a in Action]),
    help="only show credentials whose next action is one of these",
)
@click.pass_context
def actions(
    ctx: click.Context,
    types: Tuple[str, ...],
    deployments: Tuple[str, ...],
    older_than: Optional[timedelta],
    expires_within: Optional[timedelta],
    ignore_update_mode: bool,
    actions: Tuple[str, ...],
) -> None:
    """Show the next lifecycle action for each credential version."""
    try:
        state, policy = _load(ctx)
        policy = policy.override(
            older_than=older_than,
            expires_within=expires_within,
            ignore_update_mode=ignore_update_mode,
        )
        filter_config: FilterConfig = policy.filters.override(types=types, deployments=deployments)

        now = utcnow()
        criteria = policy.criteria(now)
        filters = filter_config.filters(now)
        if actions:
            filters.append(action_filter(criteria, *(Action.from_string(a) for a in actions)))

        matches = state.credentials(*filters)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context="Computing next actions")
        return

    if not matches:
        click.echo("No credentials match the given filters")
        return

    click.echo(render_table(matches, criteria=criteria, now=now))


@cli.command()
@click.argument("name")
@click.option("--id", "credential_id", help="show a single version of the path")
@click.pass_context
def details(ctx: click.Context, name: str, credential_id: Optional[str]) -> None:
    """Show details of a path or one of its versions."""
    try:
        state, _ = _load(ctx)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context="Loading state")
        return

    path = state.path(name)
    if path is None:
        ctx.obj["error_handler"].exit_with_error(CarouselError(f"Path not found: {name}"))
        return

    ref = path
    if credential_id:
        ref = next((v for v in path.versions if v.id == credential_id), None)
        if ref is None:
            ctx.obj["error_handler"].exit_with_error(CarouselError(f"Version {credential_id} not found in {name}"))
            return

    click.echo(render_details(ref))


@cli.command()
def version() -> None:
    """Print the version of carousel."""
    click.echo(f"v{__version__}  {__description__}")


if __name__ == "__main__":
    cli()
