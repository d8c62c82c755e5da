"""
Web3 Backend
Deploys and reads contracts over JSON-RPC with web3.py
"""

import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from lending_deploy.artifacts import ArtifactLoader
from lending_deploy.backend import ChainBackend, DeployedContract, Signer
from lending_deploy.config import NetworkConfig
from lending_deploy.errors import (
    ConfigurationError,
    DeploymentError,
    NetworkError,
    TransactionError,
)

logger = logging.getLogger(__name__)


class Web3Backend(ChainBackend):
    def __init__(self, network: NetworkConfig, artifacts: ArtifactLoader,
                 web3: Optional[Web3] = None):
        self.network = network
        self.artifacts = artifacts
        self.web3 = web3
        self.account = None

    def _connect(self) -> Web3:
        """Initialize Web3 connection on first use"""
        if self.web3 is not None:
            return self.web3

        try:
            web3 = Web3(Web3.HTTPProvider(self.network.url))
            if not web3.is_connected():
                raise NetworkError(f"Failed to connect to {self.network.name} at {self.network.url}")
        except NetworkError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize web3 provider: {e}")
            raise NetworkError(f"Failed to connect to {self.network.name}: {e}") from e

        logger.info(f"Connected to {self.network.name} (chain id {self.network.chain_id})")
        self.web3 = web3
        return web3

    async def get_signer(self) -> Signer:
        """Use the first configured account as the deployer"""
        if not self.network.accounts:
            raise ConfigurationError(
                f"No signer configured for {self.network.name}; set PRIVATE_KEY"
            )

        if self.account is None:
            try:
                self.account = Account.from_key(self.network.accounts[0])
            except (ValueError, TypeError) as e:
                raise ConfigurationError(f"Invalid PRIVATE_KEY: {e}") from e

        return Signer(address=self.account.address)

    async def get_balance(self, address: str) -> int:
        """Get native balance in wei"""
        web3 = self._connect()
        try:
            return web3.eth.get_balance(to_checksum_address(address))
        except OSError as e:
            logger.error(f"Failed to get balance: {e}")
            raise NetworkError(f"Failed to get balance of {address}: {e}") from e
        except (Web3Exception, ValueError) as e:
            logger.error(f"Failed to get balance: {e}")
            raise NetworkError(str(e)) from e

    async def get_gas_price(self) -> int:
        """Get configured gas price, or the node's current one"""
        if self.network.gas_price is not None:
            return self.network.gas_price
        try:
            return self._connect().eth.gas_price
        except (OSError, Web3Exception, ValueError) as e:
            logger.error(f"Failed to get gas price: {e}")
            raise NetworkError(str(e)) from e

    def _transaction_params(self, web3: Web3) -> Dict[str, Any]:
        params = {
            "from": self.account.address,
            "nonce": web3.eth.get_transaction_count(self.account.address, "pending"),
            "chainId": self.network.chain_id,
        }
        if self.network.gas_limit is not None:
            params["gas"] = self.network.gas_limit
        if self.network.gas_price is not None:
            params["gasPrice"] = self.network.gas_price
        return params

    async def deploy(self, contract_name: str, *args: Any) -> DeployedContract:
        """Deploy a contract and wait for its receipt"""
        await self.get_signer()
        artifact = self.artifacts.load(contract_name)
        web3 = self._connect()

        tx_hash = None
        try:
            factory = web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

            # Build transaction
            tx = factory.constructor(*args).build_transaction(self._transaction_params(web3))

            # Sign transaction
            signed_tx = web3.eth.account.sign_transaction(tx, private_key=self.account.key)

            # Send transaction
            tx_hash = web3.eth.send_raw_transaction(signed_tx.raw_transaction)

            # Wait for receipt
            receipt = web3.eth.wait_for_transaction_receipt(tx_hash)

        except DeploymentError:
            raise
        except ContractLogicError as e:
            logger.error(f"Failed to deploy {contract_name}: {e}")
            raise TransactionError(f"{contract_name} constructor reverted: {e}") from e
        except TimeExhausted as e:
            logger.error(f"Failed to deploy {contract_name}: {e}")
            raise NetworkError(f"Timed out waiting for {contract_name} deployment: {e}") from e
        except OSError as e:
            logger.error(f"Failed to deploy {contract_name}: {e}")
            raise NetworkError(f"Network error deploying {contract_name}: {e}") from e
        except (Web3Exception, ValueError) as e:
            # Insufficient funds and nonce errors come back as RPC errors
            logger.error(f"Failed to deploy {contract_name}: {e}")
            raise TransactionError(f"{contract_name} deployment rejected: {e}") from e

        tx_hex = Web3.to_hex(tx_hash)
        if receipt["status"] != 1:
            logger.error(f"Deployment of {contract_name} reverted: {tx_hex}")
            raise TransactionError(f"{contract_name} deployment reverted", tx_hash=tx_hex)

        address = to_checksum_address(receipt["contractAddress"])
        logger.debug(f"{contract_name} deployed in tx {tx_hex}, gas used {receipt['gasUsed']}")

        return DeployedContract(
            name=contract_name,
            address=address,
            abi=artifact.abi,
            tx_hash=tx_hex,
            gas_used=receipt["gasUsed"],
        )

    async def call(self, contract: DeployedContract, function_name: str, *args: Any) -> Any:
        """Call a view function on a deployed contract"""
        web3 = self._connect()
        try:
            instance = web3.eth.contract(address=contract.address, abi=contract.abi)
            function = getattr(instance.functions, function_name)
            return function(*args).call()
        except ContractLogicError as e:
            logger.error(f"Failed to call {contract.name}.{function_name}: {e}")
            raise TransactionError(f"{contract.name}.{function_name}() reverted: {e}") from e
        except OSError as e:
            logger.error(f"Failed to call {contract.name}.{function_name}: {e}")
            raise NetworkError(str(e)) from e
        except (Web3Exception, ValueError, AttributeError) as e:
            logger.error(f"Failed to call {contract.name}.{function_name}: {e}")
            raise TransactionError(f"{contract.name}.{function_name}() failed: {e}") from e
