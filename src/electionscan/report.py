import csv
import pathlib
from collections.abc import Iterable

from electionscan.logging import logger
from electionscan.types.deposit import NetPosition

CSV_HEADER = ("Address", "Net Reserve")


def write_net_positions_csv(net_positions: Iterable[NetPosition], path: pathlib.Path) -> int:
    """
    Write one row per account with its net reserved amount in the chain's smallest unit. Amounts
    are written as exact integer text.

    Returns the number of rows written, excluding the header.
    """

    rows = 0
    with path.open("w", newline="") as csv_file:
        writer = csv.writer(csv_file)
        writer.writerow(CSV_HEADER)
        for position in net_positions:
            writer.writerow((position.account, str(position.net_amount)))
            rows += 1

    logger.info(f"Wrote {rows} net positions to {path}")
    return rows


def default_report_path(chain: str) -> pathlib.Path:
    """
    Build a report filename from the chain name reported by the node, e.g. "Polkadot.csv".
    """

    safe_name = "".join(char if char.isalnum() or char in "-_" else "_" for char in chain.strip())
    return pathlib.Path(f"{safe_name or 'report'}.csv")
