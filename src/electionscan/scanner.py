"""
Block range scanning.

The scan walks the half-open range [cursor + 1, end) one block at a time, in order. A block is
only started after the previous block has been committed, so the stored cursor always marks a
fully processed prefix of the chain and an interrupted scan resumes cleanly on the next run.

States:
    INITIALIZING -> SCANNING -> AGGREGATING -> DONE
    SCANNING -> HALTED (fatal block error)
"""

import time
from collections.abc import Callable
from enum import Enum

import tenacity
import tqdm

from electionscan.chain.types import ChainClient
from electionscan.chains import ChainPreset
from electionscan.database.store import DepositStore
from electionscan.exceptions import ChainConnectionError, EndBlockAheadOfHead
from electionscan.logging import logger
from electionscan.processor import BlockProcessor, ProcessOutcome
from electionscan.types.aliases import BlockNumber
from electionscan.types.deposit import NetPosition

# Seconds between countdown messages while waiting to retry
COUNTDOWN_INTERVAL = 10


class ScanState(Enum):
    INITIALIZING = "initializing"
    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    DONE = "done"
    HALTED = "halted"


class ScanDriver:
    def __init__(
        self,
        chain_client: ChainClient,
        store: DepositStore,
        preset: ChainPreset,
        *,
        retry_delay: float = 60,
        end_block: BlockNumber | None = None,
        on_complete: Callable[[list[NetPosition]], None] | None = None,
        show_progress: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            chain_client: The node to read blocks from.
            store: The deposit store for the preset's chain.
            preset: The chain preset, supplying the seed cursor and unit denomination.
            retry_delay: Seconds to wait before re-attempting after a recoverable failure.
            end_block: Exclusive end of the scan range. Defaults to the finalized head.
            on_complete: Receives the aggregated net positions once the range has been scanned.
            show_progress: Display a progress bar while scanning.
            sleep: The function used to wait between retries.
        """

        self.chain_client = chain_client
        self.store = store
        self.preset = preset
        self.retry_delay = retry_delay
        self.requested_end_block = end_block
        self.on_complete = on_complete
        self.show_progress = show_progress
        self.sleep = sleep

        self.processor = BlockProcessor(
            chain_client=chain_client,
            store=store,
            preset=preset,
        )
        self.state = ScanState.INITIALIZING
        self.start_block: BlockNumber | None = None
        self.end_block: BlockNumber | None = None
        self.net_positions: list[NetPosition] = []

    def run(self) -> ScanState:
        self.state = ScanState.INITIALIZING
        self._initialize()

        if self.start_block < self.end_block:
            self.state = ScanState.SCANNING
            if not self._scan():
                self.state = ScanState.HALTED
                return self.state
        else:
            logger.info(f"{self.preset.name} has not advanced since the last scan.")

        self.state = ScanState.AGGREGATING
        self._aggregate()

        self.state = ScanState.DONE
        return self.state

    def _initialize(self) -> None:
        finalized_block = self.get_finalized_block_number()
        if self.requested_end_block is None:
            end_block = finalized_block
        elif self.requested_end_block > finalized_block:
            raise EndBlockAheadOfHead(
                end_block=self.requested_end_block,
                finalized_block=finalized_block,
            )
        else:
            end_block = self.requested_end_block

        with self.store.transaction():
            cursor = self.store.get_cursor()
            if cursor is None:
                cursor = self.preset.starting_block_offset
                self.store.set_cursor(cursor)
                logger.info(f"Seeded {self.preset.name} scan cursor at block {cursor:,}")

        self.start_block = cursor + 1
        self.end_block = end_block
        logger.info(
            f"Scanning blocks {self.start_block:,} to {self.end_block:,} "
            f"({max(0, self.end_block - self.start_block):,} total)"
        )

    def _countdown(self, seconds: float) -> None:
        remaining = seconds
        while remaining > 0:
            logger.info(f"Retrying in {remaining:.0f} seconds")
            step = min(COUNTDOWN_INTERVAL, remaining)
            self.sleep(step)
            remaining -= step

    def _log_retry(self, retry_state: tenacity.RetryCallState) -> None:
        if retry_state.outcome is not None and retry_state.outcome.failed:
            failure = repr(retry_state.outcome.exception())
        else:
            failure = repr(self.processor.last_error)
        description = f"block {retry_state.args[0]}" if retry_state.args else "finalized head"
        logger.warning(
            f"Reading {description} failed (attempt {retry_state.attempt_number}): {failure}"
        )

    def _retrying(self, retry: tenacity.retry_base) -> tenacity.Retrying:
        return tenacity.Retrying(
            retry=retry,
            wait=tenacity.wait_fixed(self.retry_delay),
            stop=tenacity.stop_never,
            before_sleep=self._log_retry,
            sleep=self._countdown,
        )

    def get_finalized_block_number(self) -> BlockNumber:
        """
        Read the finalized head, re-attempting after a fixed delay until the node answers.
        """

        retrying = self._retrying(tenacity.retry_if_exception_type(ChainConnectionError))
        return retrying(self.chain_client.get_finalized_block_number)

    def process_block(self, block_number: BlockNumber) -> ProcessOutcome:
        """
        Process a block, re-attempting after a fixed delay until it either succeeds or fails
        fatally. There is no limit on the number of attempts.
        """

        retrying = self._retrying(
            tenacity.retry_if_result(lambda outcome: outcome is ProcessOutcome.RETRY)
        )
        return retrying(self.processor.process, block_number)

    def _scan(self) -> bool:
        assert self.start_block is not None
        assert self.end_block is not None

        block_pbar = tqdm.tqdm(
            total=self.end_block - self.start_block,
            bar_format="{desc} {percentage:3.1f}% |{bar}| {n_fmt}/{total_fmt} [ETA {remaining}]",
            leave=False,
            disable=not self.show_progress,
        )

        try:
            for block_number in range(self.start_block, self.end_block):
                block_pbar.set_description(f"Processing block {block_number:,}")
                if self.process_block(block_number) is ProcessOutcome.FATAL:
                    logger.error(
                        f"Halting scan at block {block_number}: {self.processor.last_error}"
                    )
                    return False
                block_pbar.update(1)
        finally:
            block_pbar.close()

        logger.info("Done scanning!")
        return True

    def _aggregate(self) -> None:
        with self.store.transaction():
            self.net_positions = self.store.aggregate_net_positions()

        if self.on_complete is not None:
            self.on_complete(self.net_positions)
