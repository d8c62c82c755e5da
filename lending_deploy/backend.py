"""
Chain Backend Interface
Capabilities the orchestrator needs from a blockchain network
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Signer:
    address: str


@dataclass(frozen=True)
class DeployedContract:
    name: str
    address: str
    abi: List[Dict]
    tx_hash: Optional[str] = None
    gas_used: Optional[int] = None


class ChainBackend(ABC):
    """Deploy contracts and read their state on behalf of one signer.

    Every method blocks until the network has answered; deployments return
    only after the creating transaction is mined.
    """

    @abstractmethod
    async def get_signer(self) -> Signer:
        """Default signer; raises ConfigurationError when none is configured"""

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native balance in wei"""

    @abstractmethod
    async def deploy(self, contract_name: str, *args: Any) -> DeployedContract:
        """Deploy a compiled contract and wait for confirmation"""

    @abstractmethod
    async def call(self, contract: DeployedContract, function_name: str, *args: Any) -> Any:
        """Read-only call against a deployed contract"""

    async def get_gas_price(self) -> int:
        """Gas price used for cost reporting, in wei"""
        return 0
