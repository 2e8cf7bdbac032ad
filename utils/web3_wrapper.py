from typing import Any, Dict, List, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract

from utils.logging import get_logger

logger = get_logger("utils.web3_wrapper")


class Web3Client:
    """Async web3 handle for one RPC endpoint with a per-address contract cache."""

    def __init__(self, rpc_url: str, request_kwargs: Optional[Dict[str, Any]] = None):
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs=request_kwargs))
        self._contracts: Dict[str, AsyncContract] = {}

    @property
    def eth(self):
        """Access to eth namespace"""
        return self.w3.eth

    def get_contract(self, address: str, abi: List[Dict]) -> AsyncContract:
        """Get contract instance, created on first use"""
        checksum = AsyncWeb3.to_checksum_address(address)
        if checksum not in self._contracts:
            self._contracts[checksum] = self.w3.eth.contract(address=checksum, abi=abi)
        return self._contracts[checksum]


class ChainManager:
    _instances: Dict[str, Web3Client] = {}

    @classmethod
    def get_client(cls, rpc_url: str) -> Web3Client:
        """Get or create Web3Client instance for the RPC endpoint"""
        if rpc_url not in cls._instances:
            logger.debug("Initializing web3 client")
            cls._instances[rpc_url] = Web3Client(rpc_url)
        return cls._instances[rpc_url]

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients so the next call builds fresh ones"""
        cls._instances.clear()
