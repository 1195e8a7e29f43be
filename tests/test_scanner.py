import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

import electionscan.scanner
from electionscan.chain.types import EventRecord, ExtrinsicRecord, PositionalEventData
from electionscan.chains import Polkadot
from electionscan.database.models import DepositEventTable
from electionscan.database.store import DepositStore
from electionscan.exceptions import EndBlockAheadOfHead, InconsistentEvents
from electionscan.scanner import COUNTDOWN_INTERVAL, ScanDriver, ScanState
from electionscan.types.deposit import DepositKind, NetPosition
from tests.conftest import ALICE, BOB, FakeChainClient


def add_candidacy_block(
    chain_client: FakeChainClient,
    block_number: int,
    account: str,
    amount: str,
    *,
    renounce: bool = False,
) -> None:
    chain_client.add_block(
        block_number,
        extrinsics=[
            ExtrinsicRecord(
                module="PhragmenElection",
                call="renounce_candidacy" if renounce else "submit_candidacy",
                signer=account,
            )
        ],
        events=[
            EventRecord(
                extrinsic_index=0,
                module="Balances",
                method="Unreserved" if renounce else "Reserved",
                data=PositionalEventData(values=(account, amount)),
            )
        ],
    )


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_driver(
    chain_client: FakeChainClient,
    store: DepositStore,
    **kwargs,
) -> ScanDriver:
    kwargs.setdefault("show_progress", False)
    kwargs.setdefault("sleep", SleepRecorder())
    return ScanDriver(chain_client=chain_client, store=store, preset=Polkadot, **kwargs)


def deposit_count(session: Session) -> int:
    return session.scalar(select(func.count()).select_from(DepositEventTable))


def test_first_run_seeds_cursor_from_preset(chain_client: FakeChainClient, store: DepositStore):
    offset = Polkadot.starting_block_offset
    chain_client.finalized_block_number = offset + 3

    driver = make_driver(chain_client, store)
    assert driver.run() is ScanState.DONE

    assert driver.start_block == offset + 1
    assert driver.end_block == offset + 3
    assert sorted(chain_client.hash_requests) == [offset + 1, offset + 2]
    assert store.get_cursor() == offset + 2


def test_scan_aggregates_net_positions(
    chain_client: FakeChainClient,
    store: DepositStore,
    session: Session,
):
    with store.transaction():
        store.set_cursor(99)
    add_candidacy_block(chain_client, 100, ALICE, "100 DOT")
    add_candidacy_block(chain_client, 101, BOB, "50 DOT")
    add_candidacy_block(chain_client, 102, ALICE, "30 DOT", renounce=True)
    chain_client.finalized_block_number = 103

    completed: list[list[NetPosition]] = []
    driver = make_driver(chain_client, store, on_complete=completed.append)

    assert driver.run() is ScanState.DONE
    assert store.get_cursor() == 102
    assert deposit_count(session) == 3

    expected = sorted(
        [
            NetPosition(account=ALICE, net_amount=700_000_000_000),
            NetPosition(account=BOB, net_amount=500_000_000_000),
        ]
    )
    assert driver.net_positions == expected
    assert completed == [expected]


def test_resume_starts_after_cursor(chain_client: FakeChainClient, store: DepositStore):
    with store.transaction():
        store.set_cursor(200)
    chain_client.finalized_block_number = 205

    driver = make_driver(chain_client, store)
    assert driver.run() is ScanState.DONE

    assert driver.start_block == 201
    assert chain_client.hash_requests[200] == 0
    assert sorted(chain_client.hash_requests) == [201, 202, 203, 204]
    assert store.get_cursor() == 204


def test_no_new_blocks_still_aggregates(
    chain_client: FakeChainClient,
    store: DepositStore,
):
    with store.transaction():
        store.set_cursor(50)
        store.upsert_deposit_event(
            block_number=50, kind=DepositKind.RESERVE, amount=7, account=ALICE
        )
    chain_client.finalized_block_number = 51

    completed: list[list[NetPosition]] = []
    driver = make_driver(chain_client, store, on_complete=completed.append)

    assert driver.run() is ScanState.DONE
    assert not chain_client.hash_requests
    assert completed == [[NetPosition(account=ALICE, net_amount=7)]]


def test_end_block_limits_range(chain_client: FakeChainClient, store: DepositStore):
    with store.transaction():
        store.set_cursor(9)
    chain_client.finalized_block_number = 100

    driver = make_driver(chain_client, store, end_block=12)
    assert driver.run() is ScanState.DONE

    assert sorted(chain_client.hash_requests) == [10, 11]
    assert store.get_cursor() == 11


def test_end_block_past_finalized_head_is_rejected(
    chain_client: FakeChainClient,
    store: DepositStore,
):
    chain_client.finalized_block_number = 20

    driver = make_driver(chain_client, store, end_block=21)
    with pytest.raises(EndBlockAheadOfHead) as exc_info:
        driver.run()

    assert exc_info.value.end_block == 21
    assert exc_info.value.finalized_block == 20
    assert not chain_client.hash_requests
    # nothing is written for a rejected range
    assert store.get_cursor() is None


def test_finalized_head_read_is_retried(chain_client: FakeChainClient, store: DepositStore):
    with store.transaction():
        store.set_cursor(9)
    chain_client.finalized_block_number = 12
    chain_client.pending_head_failures = 2
    sleep = SleepRecorder()

    driver = make_driver(chain_client, store, retry_delay=5, sleep=sleep)
    assert driver.run() is ScanState.DONE

    assert chain_client.head_requests == 3
    assert sleep.delays == [5, 5]
    assert driver.end_block == 12
    assert store.get_cursor() == 11


def test_failing_block_is_retried_until_success(
    chain_client: FakeChainClient,
    store: DepositStore,
    session: Session,
):
    with store.transaction():
        store.set_cursor(9)
    add_candidacy_block(chain_client, 11, ALICE, "1 DOT")
    chain_client.fail_block(11, times=2)
    chain_client.finalized_block_number = 13

    cursors_seen_at_block_11: list[int | None] = []

    def record_cursor(block_number: int) -> None:
        if block_number == 11:
            cursors_seen_at_block_11.append(store.get_cursor())

    chain_client.on_get_block_hash = record_cursor
    sleep = SleepRecorder()

    driver = make_driver(chain_client, store, retry_delay=60, sleep=sleep)
    assert driver.run() is ScanState.DONE

    assert chain_client.hash_requests[11] == 3
    assert chain_client.hash_requests[12] == 1
    assert cursors_seen_at_block_11 == [10, 10, 10]
    # each 60 second wait is counted down in COUNTDOWN_INTERVAL steps
    assert sum(sleep.delays) == 120
    assert len(sleep.delays) == 2 * 60 // COUNTDOWN_INTERVAL
    assert max(sleep.delays) <= COUNTDOWN_INTERVAL
    assert store.get_cursor() == 12
    assert deposit_count(session) == 1


def test_fatal_block_halts_scan(
    chain_client: FakeChainClient,
    store: DepositStore,
    session: Session,
):
    with store.transaction():
        store.set_cursor(9)
    add_candidacy_block(chain_client, 10, ALICE, "1 DOT")
    chain_client.add_block(
        11,
        extrinsics=[
            ExtrinsicRecord(module="PhragmenElection", call="submit_candidacy", signer=BOB)
        ],
        events=[
            EventRecord(
                extrinsic_index=0,
                module="Balances",
                method="Reserved",
                data=PositionalEventData(values=(BOB, "1 DOT")),
            ),
        ]
        * 2,
    )
    chain_client.finalized_block_number = 20

    completed: list[list[NetPosition]] = []
    sleep = SleepRecorder()
    driver = make_driver(chain_client, store, on_complete=completed.append, sleep=sleep)

    assert driver.run() is ScanState.HALTED
    assert driver.state is ScanState.HALTED
    assert isinstance(driver.processor.last_error, InconsistentEvents)
    assert store.get_cursor() == 10
    assert deposit_count(session) == 1
    assert chain_client.hash_requests[11] == 1
    assert chain_client.hash_requests[12] == 0
    assert sleep.delays == []
    assert completed == []


def test_retry_wait_is_counted_down(
    chain_client: FakeChainClient,
    store: DepositStore,
    monkeypatch: pytest.MonkeyPatch,
):
    messages: list[str] = []
    monkeypatch.setattr(
        electionscan.scanner.logger,
        "info",
        lambda msg, *args, **kwargs: messages.append(msg),
    )

    with store.transaction():
        store.set_cursor(9)
    chain_client.fail_block(10, times=1)
    chain_client.finalized_block_number = 11

    driver = make_driver(chain_client, store, retry_delay=25)
    assert driver.run() is ScanState.DONE

    countdown = [message for message in messages if message.startswith("Retrying in")]
    assert countdown == [
        "Retrying in 25 seconds",
        "Retrying in 15 seconds",
        "Retrying in 5 seconds",
    ]
