"""
Deployment Configuration
Resolves network, compiler and reporting settings from the environment
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from lending_deploy.errors import ConfigurationError

LOCAL_NETWORK = "hardhat"
DEFAULT_NETWORK = LOCAL_NETWORK


@dataclass(frozen=True)
class CompilerSettings:
    version: str = "0.8.19"
    optimizer_enabled: bool = True
    optimizer_runs: int = 200


@dataclass(frozen=True)
class GasReporterSettings:
    enabled: bool = False
    currency: str = "USD"


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    url: str
    chain_id: int
    accounts: Tuple[str, ...] = ()
    gas_price: Optional[int] = None  # wei; None lets the node decide
    gas_limit: Optional[int] = None
    explorer_url: Optional[str] = None
    price_feed_id: Optional[str] = None  # CoinGecko id of the native token

    def explorer_address_url(self, address: str) -> Optional[str]:
        """Get explorer URL for an address"""
        if not self.explorer_url:
            return None
        return f"{self.explorer_url}/address/{address}"


@dataclass(frozen=True)
class DeployConfig:
    network: NetworkConfig
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    gas_reporter: GasReporterSettings = field(default_factory=GasReporterSettings)
    etherscan_api_key: Optional[str] = None

    @property
    def network_name(self) -> str:
        return self.network.name

    @property
    def chain_id(self) -> int:
        return self.network.chain_id


def _network_configs(accounts: Tuple[str, ...]) -> Dict[str, NetworkConfig]:
    # Local node started with `npx hardhat node`; it manages its own accounts
    # but a PRIVATE_KEY is still honoured when present.
    return {
        LOCAL_NETWORK: NetworkConfig(
            name=LOCAL_NETWORK,
            url="http://127.0.0.1:8545",
            chain_id=1337,
            accounts=accounts,
        ),
        "core_testnet_2": NetworkConfig(
            name="core_testnet_2",
            url="https://rpc.test2.btcs.network",
            chain_id=1115,
            accounts=accounts,
            gas_price=20_000_000_000,  # 20 gwei
            gas_limit=8_000_000,
            explorer_url="https://scan.test2.btcs.network",
            price_feed_id="coredaoorg",
        ),
    }


def available_networks() -> Tuple[str, ...]:
    return tuple(_network_configs(()).keys())


def load_config(environ: Mapping[str, str], network: str = DEFAULT_NETWORK) -> DeployConfig:
    """Build the deployment configuration from an environment mapping.

    Optional variables resolve to empty defaults: no ``PRIVATE_KEY`` gives an
    empty account list, and the failure surfaces later when a signer is needed.
    ``REPORT_GAS`` enables the gas report whenever it is set, even to an empty
    string.
    """
    private_key = environ.get("PRIVATE_KEY")
    accounts = (private_key,) if private_key else ()

    networks = _network_configs(accounts)
    if network not in networks:
        raise ConfigurationError(
            f"Unsupported network: {network} (available: {', '.join(networks)})"
        )

    return DeployConfig(
        network=networks[network],
        gas_reporter=GasReporterSettings(enabled="REPORT_GAS" in environ),
        etherscan_api_key=environ.get("ETHERSCAN_API_KEY") or None,
    )
