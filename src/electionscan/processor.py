"""
Single block processing.

Each block is handled in one database transaction: the deposit events it contains and the scan
cursor advance are committed together, or not at all. Failures are classified for the scan
driver:

- transport and database errors are transient, the block should be attempted again
- matching and decoding errors are deterministic, retrying the same block cannot succeed
"""

from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from electionscan.chain.types import ChainClient
from electionscan.chains import ChainPreset
from electionscan.database.store import DepositStore
from electionscan.exceptions import (
    ChainConnectionError,
    ElectionScanTypeError,
    EventMatchingError,
    InconsistentEvents,
    MalformedAmount,
    SignerMismatch,
)
from electionscan.functions import normalize_amount
from electionscan.logging import logger
from electionscan.matching import (
    EventMatcher,
    Found,
    Inconsistent,
    InconsistencyReason,
    Irrelevant,
    Skipped,
)
from electionscan.types.aliases import BlockNumber

RECOVERABLE_ERRORS = (
    ChainConnectionError,
    SQLAlchemyError,
)
FATAL_ERRORS = (
    EventMatchingError,
    MalformedAmount,
    ElectionScanTypeError,
)


class ProcessOutcome(Enum):
    SUCCESS = "success"
    RETRY = "retry"
    FATAL = "fatal"


def _inconsistency_error(
    block_number: BlockNumber,
    extrinsic_index: int,
    result: Inconsistent,
) -> EventMatchingError:
    match result.reason:
        case InconsistencyReason.SIGNER_MISMATCH | InconsistencyReason.UNSIGNED_CALL:
            assert result.account is not None
            return SignerMismatch(
                block_number=block_number,
                extrinsic_index=extrinsic_index,
                signer=result.signer,
                account=result.account,
            )
        case InconsistencyReason.MULTIPLE_EVENTS:
            return InconsistentEvents(
                block_number=block_number,
                extrinsic_index=extrinsic_index,
                reason=f"found {len(result.events)} {result.kind.value} events: {result.events}",
            )


class BlockProcessor:
    def __init__(
        self,
        chain_client: ChainClient,
        store: DepositStore,
        preset: ChainPreset,
        matcher: EventMatcher | None = None,
    ) -> None:
        self.chain_client = chain_client
        self.store = store
        self.preset = preset
        self.matcher = matcher if matcher is not None else EventMatcher()
        self.last_error: Exception | None = None

    def process(self, block_number: BlockNumber) -> ProcessOutcome:
        """
        Record all candidacy deposits in the block and advance the scan cursor to it.

        The transaction is rolled back on every failure path, leaving the cursor at the previous
        block.
        """

        self.last_error = None
        try:
            with self.store.transaction():
                self._record_block(block_number)
        except RECOVERABLE_ERRORS as exc:
            self.last_error = exc
            logger.warning(f"Error processing block {block_number}: {exc!r}")
            return ProcessOutcome.RETRY
        except FATAL_ERRORS as exc:
            self.last_error = exc
            logger.error(f"Fatal error processing block {block_number}: {exc}")
            return ProcessOutcome.FATAL

        return ProcessOutcome.SUCCESS

    def _record_block(self, block_number: BlockNumber) -> None:
        block_hash = self.chain_client.get_block_hash(block_number)
        extrinsics = self.chain_client.get_block_extrinsics(block_hash)
        events = self.chain_client.get_block_events(block_hash)

        for extrinsic_index in range(len(extrinsics)):
            match self.matcher.match(extrinsic_index, extrinsics, events):
                case Irrelevant():
                    continue
                case Skipped(kind=kind):
                    logger.warning(
                        f"Skipping {kind.value} extrinsic {extrinsic_index} in block "
                        f"{block_number}, no expected event was emitted so it appears to have "
                        "failed."
                    )
                case Found(kind=kind, account=account, raw_amount=raw_amount):
                    amount = normalize_amount(
                        raw_text=str(raw_amount),
                        symbol=self.preset.unit_symbol,
                        decimals=self.preset.unit_decimals,
                    )
                    logger.info(
                        f"Found {kind.value} event in block {block_number}: {account} {amount}"
                    )
                    self.store.upsert_deposit_event(
                        block_number=block_number,
                        kind=kind,
                        amount=amount,
                        account=account,
                    )
                case Inconsistent() as result:
                    raise _inconsistency_error(block_number, extrinsic_index, result)

        self.store.set_cursor(block_number)
