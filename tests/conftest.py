import logging
import os
import tempfile
from collections import Counter
from collections.abc import Callable, Generator, Sequence

# Keep the test run away from the user's configuration and database
os.environ.setdefault(
    "ELECTIONSCAN_CONFIG_DIR",
    tempfile.mkdtemp(prefix="electionscan-tests-"),
)

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from electionscan.chain.types import (  # noqa: E402
    ChainDescription,
    EventRecord,
    ExtrinsicRecord,
)
from electionscan.chains import Polkadot  # noqa: E402
from electionscan.database.models import Base  # noqa: E402
from electionscan.database.store import DepositStore  # noqa: E402
from electionscan.exceptions import ChainFetchingError  # noqa: E402
from electionscan.logging import logger  # noqa: E402

ALICE = "15oF4uVJwmo4TdGW7VfQxNLavjCXviqxT9S1MgbjMNHr6Sp5"
BOB = "14E5nqKAp3oAJcmzgZhUD2RcptBeUBScxKHgJKU4HPNcKVf3"
CHARLIE = "1REAJ1k691g5Eqqg9gL7vvZCBG7FCCZ8zgQkZWd4va5ESih"


class FakeChainClient:
    """
    A scripted `ChainClient`. Blocks that were never added are empty. Block hashes are the block
    number as a 0x-prefixed hex string.
    """

    def __init__(self) -> None:
        self.blocks: dict[int, tuple[list[ExtrinsicRecord], list[EventRecord]]] = {}
        self.finalized_block_number = 0
        self.pending_head_failures = 0
        self.head_requests = 0
        self.pending_failures: Counter[int] = Counter()
        self.hash_requests: Counter[int] = Counter()
        self.on_get_block_hash: Callable[[int], None] | None = None
        self.closed = False

    def add_block(
        self,
        block_number: int,
        extrinsics: Sequence[ExtrinsicRecord] = (),
        events: Sequence[EventRecord] = (),
    ) -> None:
        self.blocks[block_number] = (list(extrinsics), list(events))

    def fail_block(self, block_number: int, times: int) -> None:
        self.pending_failures[block_number] = times

    def describe(self) -> ChainDescription:
        return ChainDescription(chain="Polkadot", node_name="fake-node", node_version="1.0.0")

    def get_block_hash(self, block_number: int) -> str:
        self.hash_requests[block_number] += 1
        if self.on_get_block_hash is not None:
            self.on_get_block_hash(block_number)
        if self.pending_failures[block_number] > 0:
            self.pending_failures[block_number] -= 1
            raise ChainFetchingError(
                resource=f"block hash for {block_number}",
                error="ConnectionResetError(104, 'Connection reset by peer')",
            )
        return hex(block_number)

    def get_block_extrinsics(self, block_hash: str) -> list[ExtrinsicRecord]:
        extrinsics, _ = self.blocks.get(int(block_hash, 16), ([], []))
        return list(extrinsics)

    def get_block_events(self, block_hash: str) -> list[EventRecord]:
        _, events = self.blocks.get(int(block_hash, 16), ([], []))
        return list(events)

    def get_finalized_block_number(self) -> int:
        self.head_requests += 1
        if self.pending_head_failures > 0:
            self.pending_head_failures -= 1
            raise ChainFetchingError(resource="finalized head", error="ConnectionResetError()")
        return self.finalized_block_number

    def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session", autouse=True)
def _set_electionscan_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def session_factory(tmp_path) -> sessionmaker[Session]:
    engine = create_engine(f"sqlite:///{tmp_path / 'electionscan.db'}")
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture
def store(session: Session) -> DepositStore:
    return DepositStore(session=session, chain=Polkadot.name)


@pytest.fixture
def chain_client() -> FakeChainClient:
    return FakeChainClient()
