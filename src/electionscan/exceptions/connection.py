"""
Connection-related exceptions for the electionscan package.

This module contains exceptions related to RPC transport failures. All of them are treated as
transient by the block processor.
"""

from typing import Any

from electionscan.exceptions.base import ElectionScanError


class ChainConnectionError(ElectionScanError):
    """
    Base exception for connection-related errors.
    """


class ChainFetchingError(ChainConnectionError):
    """
    Raised when a block, header, or event log could not be retrieved from the node.
    """

    def __init__(self, resource: str, error: str) -> None:
        """
        Initialize ChainFetchingError.

        Args:
            resource: The item that failed to load (e.g., "block hash for 1234")
            error: A string representation of the underlying transport error
        """
        self.resource = resource
        self.error = error
        super().__init__(message=f"Failed to fetch {resource}: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.resource, self.error)
