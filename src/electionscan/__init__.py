from .config import settings
from .version import __version__

# isort: split

from .chain import SubstrateChainClient
from .chains import CHAIN_PRESETS, ChainPreset, Kusama, Polkadot, get_chain_preset
from .database.store import DepositStore
from .functions import normalize_amount
from .logging import logger
from .matching import EventMatcher, match_extrinsic
from .processor import BlockProcessor, ProcessOutcome
from .report import write_net_positions_csv
from .scanner import ScanDriver, ScanState
from .types import DepositKind, NetPosition

__all__ = (
    "CHAIN_PRESETS",
    "BlockProcessor",
    "ChainPreset",
    "DepositKind",
    "DepositStore",
    "EventMatcher",
    "Kusama",
    "NetPosition",
    "Polkadot",
    "ProcessOutcome",
    "ScanDriver",
    "ScanState",
    "SubstrateChainClient",
    "__version__",
    "chain",
    "chains",
    "database",
    "exceptions",
    "functions",
    "get_chain_preset",
    "logger",
    "match_extrinsic",
    "matching",
    "normalize_amount",
    "processor",
    "report",
    "scanner",
    "settings",
    "types",
)
