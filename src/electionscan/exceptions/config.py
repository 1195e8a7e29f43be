from typing import Any

from electionscan.exceptions.base import ElectionScanError


class ConfigurationError(ElectionScanError):
    """
    Base exception for invalid or incomplete run configuration.
    """


class UnknownChainPreset(ConfigurationError):
    """
    Raised when a chain preset name is not recognized.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(message=f"Unknown chain preset {name!r}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.name,)


class MissingRpcEndpoint(ConfigurationError):
    """
    Raised when no RPC endpoint was given and none is defined in the config file.
    """

    def __init__(self, preset: str) -> None:
        self.preset = preset
        super().__init__(
            message=f"No RPC endpoint was provided for {preset!r} and none is defined in the "
            "config file."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.preset,)


class EndBlockAheadOfHead(ConfigurationError):
    """
    Raised when the requested end of the scan range has not been finalized yet.
    """

    def __init__(self, end_block: int, finalized_block: int) -> None:
        self.end_block = end_block
        self.finalized_block = finalized_block
        super().__init__(
            message=f"End block {end_block} is ahead of the finalized head {finalized_block}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.end_block, self.finalized_block)
