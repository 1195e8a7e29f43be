from . import aliases, deposit
from .deposit import DepositKind, NetPosition

__all__ = (
    "DepositKind",
    "NetPosition",
    "aliases",
    "deposit",
)
