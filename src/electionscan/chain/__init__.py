from .substrate import SubstrateChainClient
from .types import (
    ChainClient,
    ChainDescription,
    EventData,
    EventRecord,
    ExtrinsicRecord,
    NamedEventData,
    PositionalEventData,
)

__all__ = (
    "ChainClient",
    "ChainDescription",
    "EventData",
    "EventRecord",
    "ExtrinsicRecord",
    "NamedEventData",
    "PositionalEventData",
    "SubstrateChainClient",
)
