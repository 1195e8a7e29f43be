from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from electionscan.types.aliases import AccountId, BlockHash, BlockNumber


@dataclass(slots=True, frozen=True)
class PositionalEventData:
    """
    Event attributes given as an ordered sequence, e.g. `(who, amount)`.
    """

    values: Sequence[Any]


@dataclass(slots=True, frozen=True)
class NamedEventData:
    """
    Event attributes given as a mapping of field names to values, e.g.
    `{"who": ..., "amount": ...}`.
    """

    fields: Mapping[str, Any]


EventData = PositionalEventData | NamedEventData


@dataclass(slots=True, frozen=True)
class ExtrinsicRecord:
    module: str
    call: str
    signer: AccountId | None


@dataclass(slots=True, frozen=True)
class EventRecord:
    # Index of the extrinsic that emitted the event, or None for initialization/finalization events
    extrinsic_index: int | None
    module: str
    method: str
    data: EventData


@dataclass(slots=True, frozen=True)
class ChainDescription:
    chain: str
    node_name: str
    node_version: str


class ChainClient(Protocol):
    """
    The read-only view of a node needed to scan blocks.
    """

    def describe(self) -> ChainDescription: ...

    def get_block_hash(self, block_number: BlockNumber) -> BlockHash: ...

    def get_block_extrinsics(self, block_hash: BlockHash) -> list[ExtrinsicRecord]: ...

    def get_block_events(self, block_hash: BlockHash) -> list[EventRecord]: ...

    def get_finalized_block_number(self) -> BlockNumber: ...
