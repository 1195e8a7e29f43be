from .base import Base, IntMappedToString
from .deposits import DepositEventTable, ScanCursorTable

__all__ = (
    "Base",
    "DepositEventTable",
    "IntMappedToString",
    "ScanCursorTable",
)
