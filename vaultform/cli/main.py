"""
vaultform CLI - plan, apply and destroy Vault configuration from a YAML document.
"""

import json
import sys
from typing import Any

import click

from vaultform import __version__
from vaultform.config.loader import load_document
from vaultform.config.provider import VaultConfig
from vaultform.core.plan import Action, Change, Plan
from vaultform.core.stack import Stack
from vaultform.errors import VaultformError, get_exit_code
from vaultform.log import configure_logging
from vaultform.providers.vault import VaultProvider
from vaultform.state import DEFAULT_STATE_FILE, StateStore


def _fail(e: VaultformError) -> None:
    click.echo(f"✗ {e}", err=True)
    sys.exit(get_exit_code(e))


def _open_stack(ctx: click.Context, document_file: str, state_file: str) -> Stack:
    document = load_document(document_file)
    provider = VaultProvider(config=document.provider, client=ctx.obj.get("client"))
    return Stack(provider, document.resources, StateStore(state_file))


def _state_option(f):
    return click.option(
        "--state",
        "state_file",
        default=DEFAULT_STATE_FILE,
        show_default=True,
        type=click.Path(dir_okay=False),
        help="Path of the state file",
    )(f)


def _echo_change(change: Change) -> None:
    click.echo(f"  {change.describe()}")
    before = change.before or {}
    after = change.after or {}
    for key in change.changed:
        click.echo(f"      {key}: {before.get(key)!r} -> {after.get(key)!r}")


def _echo_summary(plan: Plan, prefix: str) -> None:
    counts = plan.summary()
    click.echo(
        f"{prefix}: {counts['create']} to create, {counts['update']} to update, "
        f"{counts['replace']} to replace, {counts['delete']} to destroy."
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """
    vaultform - Declarative management of HashiCorp Vault configuration.

    Describe auth backends, identities, policies and database roles in a
    YAML document and let vaultform converge Vault on it.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)


@cli.command()
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@_state_option
@click.option("--no-refresh", is_flag=True, help="Plan against state without reading Vault")
@click.pass_context
def plan(ctx: click.Context, document_file: str, state_file: str, no_refresh: bool):
    """
    Show the changes apply would make.

    Example:
        vaultform plan vault.yaml
        vaultform plan vault.yaml --state prod.state.json
    """
    try:
        stack = _open_stack(ctx, document_file, state_file)
        result = stack.plan(refresh=not no_refresh)
    except VaultformError as e:
        _fail(e)
        return

    if not result.has_changes:
        click.echo("✓ No changes. Vault matches the document.")
        return

    click.echo("Planned changes:")
    for change in result:
        if change.action is not Action.NOOP:
            _echo_change(change)
    click.echo("")
    _echo_summary(result, "Plan")


@cli.command()
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@_state_option
@click.pass_context
def apply(ctx: click.Context, document_file: str, state_file: str):
    """
    Create, update and delete resources until Vault matches the document.

    Example:
        vaultform apply vault.yaml
    """
    try:
        stack = _open_stack(ctx, document_file, state_file)
        applied = stack.apply()
    except VaultformError as e:
        _fail(e)
        return

    for change in applied:
        if change.action is not Action.NOOP:
            click.echo(f"  {change.describe()}")
    _echo_summary(applied, "✓ Apply complete")


@cli.command()
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@_state_option
@click.option("--auto-approve", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def destroy(ctx: click.Context, document_file: str, state_file: str, auto_approve: bool):
    """
    Delete every resource tracked in the state file.

    Example:
        vaultform destroy vault.yaml --auto-approve
    """
    try:
        stack = _open_stack(ctx, document_file, state_file)
    except VaultformError as e:
        _fail(e)
        return

    if not stack.state.resources:
        click.echo("✓ Nothing to destroy.")
        return
    if not auto_approve:
        click.confirm(
            f"Destroy {len(stack.state)} tracked resource(s)?", abort=True
        )

    try:
        destroyed = stack.destroy()
    except VaultformError as e:
        _fail(e)
        return

    for address in destroyed:
        click.echo(f"  - {address}")
    click.echo(f"✓ Destroyed {len(destroyed)} resource(s)")


@cli.command()
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@_state_option
@click.pass_context
def refresh(ctx: click.Context, document_file: str, state_file: str):
    """
    Re-read tracked resources and drop those removed outside vaultform.
    """
    try:
        stack = _open_stack(ctx, document_file, state_file)
        before = set(stack.state.resources)
        state = stack.refresh()
    except VaultformError as e:
        _fail(e)
        return

    for address in sorted(before - set(state.resources)):
        click.echo(f"  - {address} (no longer exists)")
    click.echo(f"✓ Refreshed {len(state)} resource(s)")


@cli.command(name="import")
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("address")
@click.argument("import_id")
@_state_option
@click.pass_context
def import_(ctx: click.Context, document_file: str, address: str, import_id: str, state_file: str):
    """
    Start tracking an existing Vault object.

    ADDRESS is <type>.<name>; IMPORT_ID is the remote ID, e.g. the mount
    path, an identity ID, or <backend>/roles/<name> for database roles.

    Example:
        vaultform import vault.yaml vault_database_secret_backend_role.ro postgres/roles/readonly
    """
    try:
        stack = _open_stack(ctx, document_file, state_file)
        imported = stack.import_resource(address, import_id)
    except VaultformError as e:
        _fail(e)
        return

    click.echo(f"✓ Imported {address} (id={imported.id})")


@cli.command()
@_state_option
@click.option("--format", type=click.Choice(["text", "json"]), default="text")
def show(state_file: str, format: str):
    """
    Print the tracked state.

    Example:
        vaultform show
        vaultform show --format json
    """
    try:
        state = StateStore(state_file).load()
    except VaultformError as e:
        _fail(e)
        return

    if format == "json":
        click.echo(json.dumps(state.to_dict(), indent=2, sort_keys=True))
        return

    if not state.resources:
        click.echo("No resources tracked.")
        return
    for address, resource in sorted(state.resources.items()):
        click.echo(f"{address} (id={resource.id})")
        for key, value in sorted(resource.attributes.items()):
            click.echo(f"    {key} = {_format_value(value)}")


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return repr(value)


@cli.command()
def types():
    """List the supported resource types."""
    provider = VaultProvider(config=VaultConfig())
    for type_name in provider.resource_types():
        adapter = provider.adapter(type_name)
        click.echo(f"  {type_name:<42} {adapter.description}")


if __name__ == "__main__":
    cli()
