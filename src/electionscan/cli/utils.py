from substrateinterface import SubstrateInterface
from websocket import WebSocketException

from electionscan.chain import SubstrateChainClient
from electionscan.chains import ChainPreset
from electionscan.config import settings
from electionscan.exceptions import ChainFetchingError, MissingRpcEndpoint


def get_rpc_endpoint(preset: ChainPreset, rpc_url: str | None) -> str:
    """
    Select the RPC endpoint for the preset. An explicit URL takes precedence over the config file.
    """

    if rpc_url:
        return rpc_url

    if (endpoint := settings.rpc.get(preset.name)) is None:
        raise MissingRpcEndpoint(preset=preset.name)
    return str(endpoint)


def get_chain_client(url: str) -> SubstrateChainClient:
    try:
        substrate = SubstrateInterface(url=url)
    except (WebSocketException, OSError) as exc:
        raise ChainFetchingError(resource=f"connection to {url}", error=repr(exc)) from exc
    return SubstrateChainClient(url=url, substrate=substrate)
