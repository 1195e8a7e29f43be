from typing import Any

from electionscan.exceptions.base import ElectionScanValueError


class MalformedAmount(ElectionScanValueError):
    """
    Raised when an amount string does not reduce to a non-negative integer literal.
    """

    def __init__(self, raw_text: str) -> None:
        self.raw_text = raw_text
        super().__init__(message=f"Could not parse amount {raw_text!r}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.raw_text,)
