from typing import TypeAlias

AccountId: TypeAlias = str
BlockHash: TypeAlias = str
BlockNumber: TypeAlias = int
ChainName: TypeAlias = str
