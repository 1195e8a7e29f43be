from enum import Enum
from typing import NamedTuple

from electionscan.types.aliases import AccountId


class DepositKind(Enum):
    RESERVE = "reserve"
    UNRESERVE = "unreserve"


class NetPosition(NamedTuple):
    """
    The sum of reserved amounts less the sum of unreserved amounts for one account, in the chain's
    smallest unit. Negative values are possible if a deposit was reserved before the first scanned
    block.
    """

    account: AccountId
    net_amount: int
