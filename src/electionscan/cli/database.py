import click

from electionscan.chains import CHAIN_PRESETS, get_chain_preset
from electionscan.cli import cli
from electionscan.config import settings
from electionscan.database import (
    DepositStore,
    db_session,
    ensure_database,
    get_current_database_version,
    get_latest_database_version,
)
from electionscan.database.operations import upgrade_existing_sqlite_database


@cli.group()
def database() -> None:
    """
    Database commands
    """


@database.command("reset")
@click.argument(
    "chain",
    type=click.Choice(sorted(CHAIN_PRESETS)),
)
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def database_reset(*, chain: str, force: bool) -> None:
    """
    Forget all recorded deposits for a chain, so the next scan starts again from its first block.
    """

    preset = get_chain_preset(chain)

    if not (
        force
        or click.confirm(
            f"All {preset.name} deposit events and the {preset.name} scan cursor will be removed "
            f"from {settings.database.path}. The next scan will restart at block "
            f"{preset.starting_block_offset + 1:,}. Do you want to proceed?",
            default=False,
        )
    ):
        raise click.Abort

    ensure_database()

    with db_session() as session:
        store = DepositStore(session=session, chain=preset.name)
        with store.transaction():
            deleted = store.clear()

    click.echo(f"Removed {deleted} {preset.name} deposit events and the scan cursor.")


@database.command("upgrade")
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def database_upgrade(*, force: bool) -> None:
    """
    Upgrade the database to the latest schema.
    """

    current_version = get_current_database_version()
    latest_version = get_latest_database_version()
    if current_version == latest_version:
        click.echo(f"The database is already at the latest revision ({latest_version}).")
        return

    if force or click.confirm(
        f"The database at {settings.database.path} will be upgraded from revision "
        f"{current_version} to {latest_version}. Do you want to proceed?",
        default=False,
    ):
        upgrade_existing_sqlite_database(settings.database.path)
    else:
        raise click.Abort
