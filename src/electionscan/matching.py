"""Election candidacy event matching.

Pairs candidacy extrinsics with the balance events they emitted. An event belongs to an extrinsic
when its `ApplyExtrinsic` phase index equals the extrinsic's position in the block, and its
module/method equal the ones expected for that call. Ordering within the block is irrelevant, so
any number of unrelated events may be interleaved.

- submit_candidacy: exactly one Balances.Reserved event
- renounce_candidacy: exactly one Balances.Unreserved event

Zero matching events means the call was included but failed on-chain. More than one, or a
matched event whose account differs from the signer, means the matching assumptions no longer
hold for this runtime and the block cannot be recorded.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, ClassVar

from electionscan.chain.types import (
    EventData,
    EventRecord,
    ExtrinsicRecord,
    NamedEventData,
    PositionalEventData,
)
from electionscan.exceptions import MalformedEventData
from electionscan.types.aliases import AccountId
from electionscan.types.deposit import DepositKind


def canonical_name(name: str) -> str:
    """
    Reduce a runtime identifier to a case and separator insensitive form, so that
    `submit_candidacy`, `submitCandidacy` and `SubmitCandidacy` compare equal.
    """

    return name.replace("_", "").lower()


@dataclass(slots=True, frozen=True)
class RuntimeModule:
    """
    A runtime pallet, identified by any of the names it has been published under.
    """

    name: str
    spellings: frozenset[str]

    def matches(self, name: str) -> bool:
        return canonical_name(name) in {canonical_name(spelling) for spelling in self.spellings}


# The elections pallet was renamed between runtime versions
ELECTIONS_MODULE = RuntimeModule(
    name="elections",
    spellings=frozenset({"electionsPhragmen", "phragmenElection"}),
)
BALANCES_MODULE = RuntimeModule(
    name="balances",
    spellings=frozenset({"balances"}),
)


@dataclass(slots=True, frozen=True)
class MatchConfig:
    """Expected event for a candidacy call.

    Attributes:
        call: The call name on the elections module
        event_module: The module emitting the expected event
        event_method: The expected event name
        kind: The deposit action recorded for a match
    """

    call: str
    event_module: RuntimeModule
    event_method: str
    kind: DepositKind


class InconsistencyReason(Enum):
    MULTIPLE_EVENTS = auto()
    SIGNER_MISMATCH = auto()
    UNSIGNED_CALL = auto()


@dataclass(slots=True, frozen=True)
class Irrelevant:
    """The extrinsic is not a candidacy call."""


@dataclass(slots=True, frozen=True)
class Skipped:
    """The candidacy call emitted no matching event, so it failed on-chain."""

    kind: DepositKind


@dataclass(slots=True, frozen=True)
class Found:
    kind: DepositKind
    event: EventRecord
    account: AccountId
    raw_amount: Any


@dataclass(slots=True, frozen=True)
class Inconsistent:
    reason: InconsistencyReason
    kind: DepositKind
    signer: AccountId | None
    events: tuple[EventRecord, ...]
    account: AccountId | None = None


MatchResult = Irrelevant | Skipped | Found | Inconsistent


def extract_account_and_amount(data: EventData) -> tuple[AccountId, Any]:
    """
    Resolve a Reserved/Unreserved event payload to its (account, amount) pair. Positional payloads
    carry the values as `(who, amount)`, named payloads as `{"who": ..., "amount": ...}`.
    """

    match data:
        case PositionalEventData(values=values) if len(values) >= 2:  # noqa: PLR2004
            account, amount = values[0], values[1]
        case NamedEventData(fields=fields) if "who" in fields and "amount" in fields:
            account, amount = fields["who"], fields["amount"]
        case _:
            raise MalformedEventData(data=data)

    if not isinstance(account, str):
        raise MalformedEventData(data=data)
    return account, amount


class EventMatcher:
    """
    Matches candidacy extrinsics in a block to their deposit events.

    Usage:
        matcher = EventMatcher()
        for index in range(len(extrinsics)):
            match matcher.match(index, extrinsics, events):
                case Found(kind=kind, account=account, raw_amount=raw_amount):
                    ...
    """

    # Keyed by canonical call name
    CONFIGS: ClassVar[dict[str, MatchConfig]] = {
        canonical_name(config.call): config
        for config in (
            MatchConfig(
                call="submit_candidacy",
                event_module=BALANCES_MODULE,
                event_method="Reserved",
                kind=DepositKind.RESERVE,
            ),
            MatchConfig(
                call="renounce_candidacy",
                event_module=BALANCES_MODULE,
                event_method="Unreserved",
                kind=DepositKind.UNRESERVE,
            ),
        )
    }

    def __init__(self, call_module: RuntimeModule = ELECTIONS_MODULE) -> None:
        self.call_module = call_module

    def get_config(self, extrinsic: ExtrinsicRecord) -> MatchConfig | None:
        if not self.call_module.matches(extrinsic.module):
            return None
        return self.CONFIGS.get(canonical_name(extrinsic.call))

    def match(
        self,
        extrinsic_index: int,
        extrinsics: Sequence[ExtrinsicRecord],
        events: Sequence[EventRecord],
    ) -> MatchResult:
        extrinsic = extrinsics[extrinsic_index]

        if (config := self.get_config(extrinsic)) is None:
            return Irrelevant()

        candidates = tuple(
            event
            for event in events
            if event.extrinsic_index == extrinsic_index
            and config.event_module.matches(event.module)
            and canonical_name(event.method) == canonical_name(config.event_method)
        )

        if not candidates:
            return Skipped(kind=config.kind)

        if len(candidates) > 1:
            return Inconsistent(
                reason=InconsistencyReason.MULTIPLE_EVENTS,
                kind=config.kind,
                signer=extrinsic.signer,
                events=candidates,
            )

        (event,) = candidates
        account, raw_amount = extract_account_and_amount(event.data)

        if extrinsic.signer is None:
            return Inconsistent(
                reason=InconsistencyReason.UNSIGNED_CALL,
                kind=config.kind,
                signer=None,
                events=candidates,
                account=account,
            )

        if account != extrinsic.signer:
            return Inconsistent(
                reason=InconsistencyReason.SIGNER_MISMATCH,
                kind=config.kind,
                signer=extrinsic.signer,
                events=candidates,
                account=account,
            )

        return Found(
            kind=config.kind,
            event=event,
            account=account,
            raw_amount=raw_amount,
        )


def match_extrinsic(
    extrinsic_index: int,
    extrinsics: Sequence[ExtrinsicRecord],
    events: Sequence[EventRecord],
) -> MatchResult:
    """
    Match a single extrinsic using the default elections module spellings.
    """

    return EventMatcher().match(extrinsic_index, extrinsics, events)
