"""
Deployment Orchestrator
Deploys the mock tokens and the lending platform, one confirmed step at a time
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from web3 import Web3

from lending_deploy.backend import ChainBackend, DeployedContract, Signer
from lending_deploy.config import DeployConfig
from lending_deploy.errors import WiringMismatchError
from lending_deploy.gas_reporter import GasReporter

logger = logging.getLogger(__name__)

TOKEN_CONTRACT = "MockERC20"
PLATFORM_CONTRACT = "Project"
MOCK_TOKEN_SUPPLY = Web3.to_wei(1_000_000, 'ether')


@dataclass(frozen=True)
class TokenSpec:
    name: str
    symbol: str
    decimals: int = 18
    initial_supply: int = MOCK_TOKEN_SUPPLY

    @property
    def constructor_args(self) -> tuple:
        return (self.name, self.symbol, self.decimals, self.initial_supply)


MOCK_USDC = TokenSpec("Mock USDC", "mUSDC")
MOCK_WBTC = TokenSpec("Mock WBTC", "mWBTC")

NEXT_STEPS = (
    "1. Save the contract addresses for frontend integration",
    "2. Fund your account with some mock tokens for testing",
    "3. Interact with the contract using the provided addresses",
    "4. Consider verifying the contracts on block explorer if available",
)


@dataclass(frozen=True)
class PlatformWiring:
    lending_token: str
    collateral_token: str
    owner: str


@dataclass(frozen=True)
class DeploymentSummary:
    network: str
    chain_id: int
    deployer: str
    lending_platform: str
    mock_usdc: str
    mock_wbtc: str
    deployment_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chainId": self.chain_id,
            "deployer": self.deployer,
            "contracts": {
                "lendingPlatform": self.lending_platform,
                "mockUSDC": self.mock_usdc,
                "mockWBTC": self.mock_wbtc,
            },
            "deploymentTime": self.deployment_time,
        }


@dataclass(frozen=True)
class StepOutcome:
    name: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None


@dataclass
class DeploymentOutcome:
    """Result of a run. Contracts deployed before a failure stay listed here."""
    summary: Optional[DeploymentSummary] = None
    failed_step: Optional[str] = None
    error: Optional[BaseException] = None
    completed_steps: List[str] = field(default_factory=list)
    contracts: Dict[str, DeployedContract] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None and self.summary is not None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class DeploymentOrchestrator:
    def __init__(self, config: DeployConfig, backend: ChainBackend,
                 gas_reporter: Optional[GasReporter] = None,
                 clock: Callable[[], str] = utc_timestamp):
        self.config = config
        self.backend = backend
        self.gas_reporter = gas_reporter
        self.clock = clock

    async def _run_step(self, outcome: DeploymentOutcome, name: str,
                        step: Callable, *args: Any) -> StepOutcome:
        try:
            value = await step(*args)
        except Exception as e:
            logger.error(f"Step {name} failed: {e}")
            outcome.failed_step = name
            outcome.error = e
            return StepOutcome(name=name, ok=False, error=e)

        outcome.completed_steps.append(name)
        return StepOutcome(name=name, ok=True, value=value)

    async def resolve_signer(self) -> Signer:
        signer = await self.backend.get_signer()
        logger.info(f"Deploying contracts with account: {signer.address}")
        return signer

    async def check_balance(self, signer: Signer) -> int:
        balance = await self.backend.get_balance(signer.address)
        logger.info(f"Account balance: {Web3.from_wei(balance, 'ether')} ETH")
        return balance

    async def deploy_token(self, token: TokenSpec) -> DeployedContract:
        logger.info(f"Deploying {token.name} token...")
        contract = await self.backend.deploy(TOKEN_CONTRACT, *token.constructor_args)
        logger.info(f"{token.name} deployed to: {contract.address}")
        if self.gas_reporter:
            self.gas_reporter.record(f"{TOKEN_CONTRACT} ({token.symbol})", contract.gas_used)
        return contract

    async def deploy_platform(self, lending_token: DeployedContract,
                              collateral_token: DeployedContract) -> DeployedContract:
        logger.info("Deploying Decentralized Lending Platform...")
        platform = await self.backend.deploy(
            PLATFORM_CONTRACT, lending_token.address, collateral_token.address
        )
        logger.info(f"Decentralized Lending Platform deployed to: {platform.address}")
        logger.info(f"Lending Token (Mock USDC): {lending_token.address}")
        logger.info(f"Collateral Token (Mock WBTC): {collateral_token.address}")
        if self.gas_reporter:
            self.gas_reporter.record(PLATFORM_CONTRACT, platform.gas_used)
        return platform

    async def verify_wiring(self, platform: DeployedContract, lending_token: DeployedContract,
                            collateral_token: DeployedContract, signer: Signer) -> PlatformWiring:
        """Read back the platform's token references and owner"""
        wiring = PlatformWiring(
            lending_token=await self.backend.call(platform, "lendingToken"),
            collateral_token=await self.backend.call(platform, "collateralToken"),
            owner=await self.backend.call(platform, "owner"),
        )

        logger.info("Contract Verification:")
        logger.info(f"Lending Token Address: {wiring.lending_token}")
        logger.info(f"Collateral Token Address: {wiring.collateral_token}")
        logger.info(f"Contract Owner: {wiring.owner}")

        if wiring.lending_token.lower() != lending_token.address.lower():
            raise WiringMismatchError(
                f"lendingToken() is {wiring.lending_token}, expected {lending_token.address}"
            )
        if wiring.collateral_token.lower() != collateral_token.address.lower():
            raise WiringMismatchError(
                f"collateralToken() is {wiring.collateral_token}, expected {collateral_token.address}"
            )
        if wiring.owner.lower() != signer.address.lower():
            logger.warning(f"Contract owner {wiring.owner} differs from deployer {signer.address}")

        return wiring

    async def build_summary(self, signer: Signer, platform: DeployedContract,
                            mock_usdc: DeployedContract,
                            mock_wbtc: DeployedContract) -> DeploymentSummary:
        return DeploymentSummary(
            network=self.config.network_name,
            chain_id=self.config.chain_id,
            deployer=signer.address,
            lending_platform=platform.address,
            mock_usdc=mock_usdc.address,
            mock_wbtc=mock_wbtc.address,
            deployment_time=self.clock(),
        )

    async def run(self) -> DeploymentOutcome:
        """Run every step in order, stopping at the first failure.

        Nothing is rolled back: contracts confirmed before the failing step
        remain on-chain and are reported in ``outcome.contracts``.
        """
        outcome = DeploymentOutcome()
        if self.gas_reporter:
            self.gas_reporter.reset()
        logger.info(f"Starting deployment to {self.config.network_name}...")
        compiler = self.config.compiler
        logger.debug(f"Expecting artifacts from solc {compiler.version} "
                     f"(optimizer {'on' if compiler.optimizer_enabled else 'off'}, "
                     f"{compiler.optimizer_runs} runs)")

        step = await self._run_step(outcome, "resolve_signer", self.resolve_signer)
        if not step.ok:
            return outcome
        signer = step.value

        step = await self._run_step(outcome, "check_balance", self.check_balance, signer)
        if not step.ok:
            return outcome

        logger.info("Deploying Mock ERC20 tokens...")
        step = await self._run_step(outcome, "deploy_mock_usdc", self.deploy_token, MOCK_USDC)
        if not step.ok:
            return outcome
        mock_usdc = outcome.contracts["mockUSDC"] = step.value

        step = await self._run_step(outcome, "deploy_mock_wbtc", self.deploy_token, MOCK_WBTC)
        if not step.ok:
            return outcome
        mock_wbtc = outcome.contracts["mockWBTC"] = step.value

        step = await self._run_step(outcome, "deploy_platform", self.deploy_platform,
                                    mock_usdc, mock_wbtc)
        if not step.ok:
            return outcome
        platform = outcome.contracts["lendingPlatform"] = step.value

        step = await self._run_step(outcome, "verify_wiring", self.verify_wiring,
                                    platform, mock_usdc, mock_wbtc, signer)
        if not step.ok:
            return outcome

        step = await self._run_step(outcome, "build_summary", self.build_summary,
                                    signer, platform, mock_usdc, mock_wbtc)
        if not step.ok:
            return outcome
        outcome.summary = step.value

        return outcome
