"""
Event matching exceptions for the electionscan package.

These exceptions indicate that the events recorded in a block cannot be reconciled with the
extrinsics that emitted them. They are never retried, because retrying a deterministic block
cannot produce a different result.
"""

from typing import Any

from electionscan.exceptions.base import ElectionScanValueError
from electionscan.types.aliases import BlockNumber


class EventMatchingError(ElectionScanValueError):
    """
    Base exception for event matching errors.
    """


class InconsistentEvents(EventMatchingError):
    """
    Raised when an extrinsic cannot be paired with exactly one emitted event.
    """

    def __init__(self, block_number: BlockNumber, extrinsic_index: int, reason: str) -> None:
        self.block_number = block_number
        self.extrinsic_index = extrinsic_index
        self.reason = reason
        super().__init__(
            message=f"Inconsistent events at block {block_number}, extrinsic {extrinsic_index}: "
            f"{reason}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.block_number, self.extrinsic_index, self.reason)


class SignerMismatch(EventMatchingError):
    """
    Raised when the account recorded in a matched event differs from the extrinsic signer.
    """

    def __init__(
        self,
        block_number: BlockNumber,
        extrinsic_index: int,
        signer: str | None,
        account: str,
    ) -> None:
        self.block_number = block_number
        self.extrinsic_index = extrinsic_index
        self.signer = signer
        self.account = account
        super().__init__(
            message=f"Event account {account} does not match signer {signer} at block "
            f"{block_number}, extrinsic {extrinsic_index}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.block_number, self.extrinsic_index, self.signer, self.account)


class MalformedEventData(EventMatchingError):
    """
    Raised when the data payload of an event does not hold an account and an amount.
    """

    def __init__(self, data: Any) -> None:
        self.data = data
        super().__init__(message=f"Event data {data!r} does not contain an account and amount.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.data,)
