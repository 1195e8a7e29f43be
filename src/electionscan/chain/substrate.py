"""
Chain client backed by `substrate-interface`.

Decoded extrinsics and event records are exposed by the library as nested dictionaries whose shape
has drifted across library and runtime versions. Everything is flattened here into the plain
records defined in `electionscan.chain.types`, so the matcher never sees library objects.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from scalecodec.exceptions import (
    InvalidScaleTypeValueException,
    RemainingScaleBytesNotEmptyException,
)
from substrateinterface import SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from electionscan.chain.types import (
    ChainDescription,
    EventData,
    EventRecord,
    ExtrinsicRecord,
    NamedEventData,
    PositionalEventData,
)
from electionscan.exceptions import ChainFetchingError, ElectionScanTypeError
from electionscan.logging import logger
from electionscan.types.aliases import AccountId, BlockHash, BlockNumber

T = TypeVar("T")

TRANSPORT_ERRORS = (
    SubstrateRequestException,
    WebSocketException,
    OSError,
)
# SCALE decoding failures are deterministic for a given block
DECODE_ERRORS = (
    RemainingScaleBytesNotEmptyException,
    InvalidScaleTypeValueException,
    ValueError,
)


def _value_of(obj: Any) -> Any:
    """
    Unwrap a SCALE-decoded object to its Python value. Plain values are returned unchanged.
    """

    return getattr(obj, "value", obj)


def _decode_signer(address: Any) -> AccountId | None:
    """
    Extract the signer account from the `address` field of an extrinsic.

    Older runtimes encode the address as a plain SS58 string; runtimes using `MultiAddress` wrap it
    as `{"Id": ...}`.
    """

    match address:
        case None:
            return None
        case str():
            return address
        case {"Id": str() as account_id}:
            return account_id
        case _:
            raise ElectionScanTypeError(
                message=f"Unsupported extrinsic address format: {address!r}"
            )


def decode_extrinsic(extrinsic: Any) -> ExtrinsicRecord:
    value = _value_of(extrinsic)
    call = value.get("call", {})
    return ExtrinsicRecord(
        module=call.get("call_module", ""),
        call=call.get("call_function", ""),
        signer=_decode_signer(value.get("address")),
    )


def _decode_phase(record: Mapping[str, Any]) -> int | None:
    match record.get("phase"):
        case {"ApplyExtrinsic": index}:
            return int(index)
        case "ApplyExtrinsic":
            index = record.get("extrinsic_idx")
            return None if index is None else int(index)
        case _:
            return None


def _decode_event_data(attributes: Any) -> EventData:
    match attributes:
        case Mapping():
            return NamedEventData(fields=dict(attributes))
        case str() | bytes():
            raise ElectionScanTypeError(message=f"Unsupported event attributes: {attributes!r}")
        case Sequence():
            return PositionalEventData(values=tuple(attributes))
        case None:
            return PositionalEventData(values=())
        case _:
            # single-valued events are emitted without a containing tuple
            return PositionalEventData(values=(attributes,))


def decode_event(event_record: Any) -> EventRecord:
    record = _value_of(event_record)
    event = record.get("event", record)
    return EventRecord(
        extrinsic_index=_decode_phase(record),
        module=event.get("module_id", ""),
        method=event.get("event_id", ""),
        data=_decode_event_data(event.get("attributes")),
    )


class SubstrateChainClient:
    """
    A `ChainClient` connected to a Substrate node over websocket or HTTP RPC.

    Transport failures are re-raised as `ChainFetchingError`, which callers treat as transient.
    """

    def __init__(self, url: str, substrate: SubstrateInterface | None = None) -> None:
        self.url = url
        self._substrate = substrate if substrate is not None else SubstrateInterface(url=url)

    def _fetch(self, resource: str, fn: Callable[..., T], **kwargs: Any) -> T:
        try:
            return fn(**kwargs)
        except TRANSPORT_ERRORS as exc:
            raise ChainFetchingError(resource=resource, error=repr(exc)) from exc
        except DECODE_ERRORS as exc:
            raise ElectionScanTypeError(message=f"Could not decode {resource}: {exc!r}") from exc

    def describe(self) -> ChainDescription:
        return ChainDescription(
            chain=str(self._fetch("chain name", lambda: self._substrate.chain)),
            node_name=str(self._fetch("node name", lambda: self._substrate.name)),
            node_version=str(self._fetch("node version", lambda: self._substrate.version)),
        )

    def get_block_hash(self, block_number: BlockNumber) -> BlockHash:
        block_hash = self._fetch(
            f"block hash for {block_number}",
            self._substrate.get_block_hash,
            block_id=block_number,
        )
        if not block_hash:
            raise ChainFetchingError(
                resource=f"block hash for {block_number}",
                error="node returned an empty hash",
            )
        return str(block_hash)

    def get_block_extrinsics(self, block_hash: BlockHash) -> list[ExtrinsicRecord]:
        block = self._fetch(
            f"block {block_hash}",
            self._substrate.get_block,
            block_hash=block_hash,
        )
        if block is None:
            raise ChainFetchingError(resource=f"block {block_hash}", error="block not found")
        return [decode_extrinsic(extrinsic) for extrinsic in block.get("extrinsics", [])]

    def get_block_events(self, block_hash: BlockHash) -> list[EventRecord]:
        events = self._fetch(
            f"events for block {block_hash}",
            self._substrate.get_events,
            block_hash=block_hash,
        )
        return [decode_event(event_record) for event_record in events]

    def get_finalized_block_number(self) -> BlockNumber:
        finalized_hash = self._fetch(
            "finalized head",
            self._substrate.get_chain_finalised_head,
        )
        block_number = self._fetch(
            f"block number for {finalized_hash}",
            self._substrate.get_block_number,
            block_hash=finalized_hash,
        )
        logger.debug(f"Finalized head: {block_number} ({finalized_hash})")
        return int(block_number)

    def close(self) -> None:
        self._substrate.close()
