from dataclasses import dataclass

from electionscan.exceptions import UnknownChainPreset
from electionscan.types.aliases import BlockNumber, ChainName


@dataclass(slots=True, frozen=True)
class ChainPreset:
    name: ChainName
    # The block *before* the first block that can contain a candidacy deposit event
    starting_block_offset: BlockNumber
    unit_symbol: str
    unit_decimals: int


Polkadot = ChainPreset(
    name="polkadot",
    starting_block_offset=746_095,
    unit_symbol="DOT",
    unit_decimals=10,
)

Kusama = ChainPreset(
    name="kusama",
    starting_block_offset=15_561,
    unit_symbol="KSM",
    unit_decimals=12,
)

CHAIN_PRESETS: dict[ChainName, ChainPreset] = {
    preset.name: preset
    for preset in (
        Polkadot,
        Kusama,
    )
}


def get_chain_preset(name: ChainName) -> ChainPreset:
    try:
        return CHAIN_PRESETS[name]
    except KeyError:
        raise UnknownChainPreset(name=name) from None
