from sqlalchemy import Index
from sqlalchemy.orm import Mapped

from electionscan.types.deposit import DepositKind

from .base import Account, Base, BigInteger
from .types import ChainName, PrimaryKeyChainName, PrimaryKeyInt


class DepositEventTable(Base):
    __tablename__ = "deposit_events"

    id: Mapped[PrimaryKeyInt]
    chain: Mapped[ChainName]
    block_number: Mapped[int]
    kind: Mapped[DepositKind]
    amount: Mapped[BigInteger]
    account: Mapped[Account]


# Re-processing a block overwrites the existing row for each (account, kind) pair
Index(
    "ix_deposit_events_chain_block_account_kind",
    DepositEventTable.chain,
    DepositEventTable.block_number,
    DepositEventTable.account,
    DepositEventTable.kind,
    unique=True,
)
Index(
    "ix_deposit_events_chain_account",
    DepositEventTable.chain,
    DepositEventTable.account,
)


class ScanCursorTable(Base):
    """
    The last fully committed block for a chain. There is at most one row per chain.
    """

    __tablename__ = "scan_cursors"

    chain: Mapped[PrimaryKeyChainName]
    block_number: Mapped[int]
