import contextlib
import itertools
import operator
from collections.abc import Generator

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_upsert
from sqlalchemy.orm import Session

from electionscan.database.models import DepositEventTable, ScanCursorTable
from electionscan.types.aliases import AccountId, BlockNumber, ChainName
from electionscan.types.deposit import DepositKind, NetPosition


class DepositStore:
    """
    The deposit ledger and scan cursor for a single chain.

    All writes go through the bound session. Callers wrap a unit of work in `transaction()`, which
    commits on exit and rolls back if anything inside raises.
    """

    def __init__(self, session: Session, chain: ChainName) -> None:
        self.session = session
        self.chain = chain

    @contextlib.contextmanager
    def transaction(self) -> Generator["DepositStore", None, None]:
        try:
            yield self
            self.session.commit()
        except BaseException:
            self.session.rollback()
            raise

    def upsert_deposit_event(
        self,
        block_number: BlockNumber,
        kind: DepositKind,
        amount: int,
        account: AccountId,
    ) -> None:
        stmt = sqlite_upsert(DepositEventTable).values(
            chain=self.chain,
            block_number=block_number,
            kind=kind,
            amount=amount,
            account=account,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                DepositEventTable.chain,
                DepositEventTable.block_number,
                DepositEventTable.account,
                DepositEventTable.kind,
            ],
            set_={"amount": stmt.excluded.amount},
        )
        self.session.execute(stmt)

    def get_cursor(self) -> BlockNumber | None:
        cursor = self.session.get(ScanCursorTable, self.chain)
        return None if cursor is None else cursor.block_number

    def set_cursor(self, block_number: BlockNumber) -> None:
        cursor = self.session.get(ScanCursorTable, self.chain)
        if cursor is not None:
            cursor.block_number = block_number
        else:
            self.session.add(
                ScanCursorTable(
                    chain=self.chain,
                    block_number=block_number,
                )
            )

    def clear(self) -> int:
        """
        Delete every deposit event and the scan cursor for this chain, so the next scan starts again
        from the preset offset. Other chains are untouched.

        Returns the number of deposit events deleted.
        """

        deleted = self.session.execute(
            delete(DepositEventTable).where(DepositEventTable.chain == self.chain)
        ).rowcount
        self.session.execute(delete(ScanCursorTable).where(ScanCursorTable.chain == self.chain))
        return deleted

    def aggregate_net_positions(self) -> list[NetPosition]:
        """
        Sum reserved less unreserved amounts for every account recorded on this chain, ordered by
        account.

        Amounts are stored as text, so the sum is computed with Python integers rather than by the
        database, which would coerce the values to 64-bit integers or floats.
        """

        rows = self.session.execute(
            select(
                DepositEventTable.account,
                DepositEventTable.kind,
                DepositEventTable.amount,
            )
            .where(DepositEventTable.chain == self.chain)
            .order_by(DepositEventTable.account)
        ).all()

        return [
            NetPosition(
                account=account,
                net_amount=sum(
                    amount if kind is DepositKind.RESERVE else -amount
                    for _, kind, amount in account_rows
                ),
            )
            for account, account_rows in itertools.groupby(rows, key=operator.itemgetter(0))
        ]
