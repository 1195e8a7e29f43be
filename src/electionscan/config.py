import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, HttpUrl, PlainSerializer, PositiveInt, WebsocketUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from electionscan.chains import CHAIN_PRESETS
from electionscan.logging import logger
from electionscan.types.aliases import ChainName

CONFIG_DIR = Path(
    os.environ.get(
        "ELECTIONSCAN_CONFIG_DIR",
        Path.home() / ".config" / "electionscan",
    )
).expanduser()
CONFIG_FILE = CONFIG_DIR / "config.toml"
DB_PATH = CONFIG_DIR / "electionscan.db"

DEFAULT_RETRY_DELAY = 60


class DatabaseSettings(BaseModel):
    # Serialize the path as a string representation of the absolute path
    path: Annotated[
        Path,
        PlainSerializer(lambda path: str(path.absolute()), return_type=str),
    ]


class ScanSettings(BaseModel):
    # Seconds to wait before re-attempting a block after a recoverable failure
    retry_delay: PositiveInt = DEFAULT_RETRY_DELAY


class Settings(BaseSettings):
    model_config = SettingsConfigDict()

    database: DatabaseSettings
    rpc: dict[
        ChainName,
        WebsocketUrl | HttpUrl,
    ] = {}
    scan: ScanSettings = ScanSettings()

    @field_validator("rpc", mode="after")
    def validate_presets(
        cls,  # noqa: N805
        rpc_dict: dict[ChainName, WebsocketUrl | HttpUrl],
    ) -> dict[ChainName, WebsocketUrl | HttpUrl]:
        """
        Validate that every endpoint is keyed by a known chain preset.
        """

        if unknown := set(rpc_dict) - set(CHAIN_PRESETS):
            msg = f"RPC endpoints defined for unknown chain presets: {sorted(unknown)}"
            raise ValueError(msg)
        return rpc_dict


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings) -> None:
    CONFIG_FILE.write_text(
        tomlkit.dumps(
            config.model_dump(mode="json"),
        ),
    )


if not CONFIG_DIR.exists():
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    logger.info(f"Created a configuration directory at {CONFIG_DIR}.")

if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings(
        database=DatabaseSettings(
            path=DB_PATH,
        ),
        rpc={},
    )

    save_config_to_file(settings)
    logger.info(f"Created a configuration file at {CONFIG_FILE}.")
