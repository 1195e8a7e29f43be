from typing import Annotated

from sqlalchemy import String
from sqlalchemy.orm import mapped_column

PrimaryKeyInt = Annotated[
    int,
    mapped_column(primary_key=True, autoincrement=True),
]
PrimaryKeyChainName = Annotated[
    str,
    mapped_column(String(32), primary_key=True),
]
ChainName = Annotated[
    str,
    mapped_column(String(32)),
]
