from typing import Dict
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from .config import ENV, ChainName
from dotenv import load_dotenv
import os


load_dotenv()


def get_providers() -> Dict[ChainName, str]:
    providers: Dict[ChainName, str] = {
        chain: str(os.getenv(ENV[f"{chain.name}_RPC_URL"]))
        + str(os.getenv(ENV.ALCHEMY_API_KEY))
        for chain in ChainName
    }
    return providers


def _get_provider_url(chain_name: ChainName) -> str:
    providers = get_providers()

    if chain_name not in providers:
        raise ValueError(f"Unknown chain: {chain_name}")

    return providers[chain_name]


def get_web3(chain_name: ChainName) -> Web3:
    w3 = Web3(Web3.HTTPProvider(_get_provider_url(chain_name)))

    return w3


def get_async_web3(chain_name: ChainName) -> AsyncWeb3:
    w3 = AsyncWeb3(AsyncHTTPProvider(_get_provider_url(chain_name)))

    return w3
