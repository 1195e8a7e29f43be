from electionscan.exceptions.amount import MalformedAmount
from electionscan.exceptions.base import (
    ElectionScanError,
    ElectionScanTypeError,
    ElectionScanValueError,
)
from electionscan.exceptions.config import (
    ConfigurationError,
    EndBlockAheadOfHead,
    MissingRpcEndpoint,
    UnknownChainPreset,
)
from electionscan.exceptions.connection import ChainConnectionError, ChainFetchingError
from electionscan.exceptions.matching import (
    EventMatchingError,
    InconsistentEvents,
    MalformedEventData,
    SignerMismatch,
)

from . import amount, config, connection, matching

__all__ = (
    "ChainConnectionError",
    "ChainFetchingError",
    "ConfigurationError",
    "ElectionScanError",
    "ElectionScanTypeError",
    "ElectionScanValueError",
    "EndBlockAheadOfHead",
    "EventMatchingError",
    "InconsistentEvents",
    "MalformedAmount",
    "MalformedEventData",
    "MissingRpcEndpoint",
    "SignerMismatch",
    "UnknownChainPreset",
    "amount",
    "config",
    "connection",
    "matching",
)
