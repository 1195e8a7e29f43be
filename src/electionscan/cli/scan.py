import pathlib

import click

from electionscan.chains import CHAIN_PRESETS, get_chain_preset
from electionscan.cli import cli
from electionscan.cli.utils import get_chain_client, get_rpc_endpoint
from electionscan.config import settings
from electionscan.database import DepositStore, db_session, ensure_database
from electionscan.exceptions import ChainConnectionError, EndBlockAheadOfHead, MissingRpcEndpoint
from electionscan.logging import logger
from electionscan.report import default_report_path, write_net_positions_csv
from electionscan.scanner import ScanDriver, ScanState


@cli.command(
    "scan",
    help="Scan candidacy deposits up to the finalized head and export net reserves to CSV.",
)
@click.argument(
    "chain",
    type=click.Choice(sorted(CHAIN_PRESETS)),
)
@click.argument(
    "rpc_url",
    required=False,
)
@click.option(
    "--output",
    "output",
    type=click.Path(dir_okay=False, writable=True, path_type=pathlib.Path),
    default=None,
    help="The CSV file to write. Defaults to '<chain name>.csv' in the working directory.",
)
@click.option(
    "--end-block",
    "end_block",
    type=click.IntRange(min=0),
    default=None,
    help="Stop before this block. Defaults to the finalized head.",
)
@click.option(
    "--retry-delay",
    "retry_delay",
    type=click.IntRange(min=0),
    default=None,
    help="Seconds to wait before retrying a failed block. Defaults to the configured value.",
)
@click.option(
    "--no-progress",
    "no_progress",
    is_flag=True,
    default=False,
    show_default=True,
    help="Disable progress bars.",
)
def scan(
    *,
    chain: str,
    rpc_url: str | None,
    output: pathlib.Path | None,
    end_block: int | None,
    retry_delay: int | None,
    no_progress: bool,
) -> None:
    """
    Scan the chain from the last committed block and export net reserves for every account.

    Args:
        chain: The chain preset name.
        rpc_url: The node endpoint. Falls back to the `rpc` table of the config file.
        output: Path of the CSV report.
        end_block: Exclusive end of the scan range.
        retry_delay: Seconds to wait between attempts at a failing block.
        no_progress: If True, disable progress bars.
    """

    preset = get_chain_preset(chain)
    try:
        endpoint = get_rpc_endpoint(preset, rpc_url)
    except MissingRpcEndpoint as exc:
        raise click.UsageError(str(exc.message)) from None

    try:
        chain_client = get_chain_client(endpoint)
        description = chain_client.describe()
    except ChainConnectionError as exc:
        raise click.ClickException(str(exc.message)) from None

    logger.info(
        f"Connected to {description.chain} using {description.node_name} "
        f"v{description.node_version}"
    )

    if output is None:
        output = default_report_path(description.chain or preset.name)

    ensure_database()

    with db_session() as session:
        store = DepositStore(session=session, chain=preset.name)

        with store.transaction():
            net_positions_so_far = store.aggregate_net_positions()
        logger.info(f"Net reserves so far: {len(net_positions_so_far)} accounts")
        for position in net_positions_so_far:
            logger.debug(f"  {position.account}: {position.net_amount}")

        driver = ScanDriver(
            chain_client=chain_client,
            store=store,
            preset=preset,
            retry_delay=settings.scan.retry_delay if retry_delay is None else retry_delay,
            end_block=end_block,
            on_complete=lambda net_positions: write_net_positions_csv(net_positions, output),
            show_progress=not no_progress,
        )
        try:
            final_state = driver.run()
        except EndBlockAheadOfHead as exc:
            raise click.BadParameter(str(exc.message), param_hint="'--end-block'") from None
        finally:
            chain_client.close()

    if final_state is ScanState.HALTED:
        click.echo(f"Scan halted: {driver.processor.last_error}", err=True)
        raise SystemExit(1)

    click.echo(f"Wrote {len(driver.net_positions)} net positions to {output}")


@cli.command(
    "report",
    help="Export net reserves from the local database without connecting to a node.",
)
@click.argument(
    "chain",
    type=click.Choice(sorted(CHAIN_PRESETS)),
)
@click.option(
    "--output",
    "output",
    type=click.Path(dir_okay=False, writable=True, path_type=pathlib.Path),
    default=None,
    help="The CSV file to write. Defaults to '<chain>.csv' in the working directory.",
)
def report(*, chain: str, output: pathlib.Path | None) -> None:
    """
    Aggregate the recorded deposits for a chain and write the CSV report.
    """

    preset = get_chain_preset(chain)
    if output is None:
        output = default_report_path(preset.name)

    ensure_database()

    with db_session() as session:
        store = DepositStore(session=session, chain=preset.name)
        with store.transaction():
            net_positions = store.aggregate_net_positions()
            cursor = store.get_cursor()

    write_net_positions_csv(net_positions, output)
    click.echo(
        f"Wrote {len(net_positions)} net positions to {output} "
        f"(last scanned block: {'none' if cursor is None else cursor})"
    )
