#!/usr/bin/env python3
"""
Lending Platform Deployment CLI
Deploys Mock USDC, Mock WBTC and the lending platform, then prints a summary
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from lending_deploy.artifacts import DEFAULT_ARTIFACTS_DIR, ArtifactLoader
from lending_deploy.backend import ChainBackend
from lending_deploy.config import DEFAULT_NETWORK, DeployConfig, available_networks, load_config
from lending_deploy.errors import ConfigurationError
from lending_deploy.gas_reporter import GasReporter
from lending_deploy.logging_config import setup_logging
from lending_deploy.orchestrator import NEXT_STEPS, DeploymentOrchestrator, DeploymentOutcome
from lending_deploy.web3_backend import Web3Backend

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Deploy the decentralized lending platform')
    parser.add_argument('--network', default=DEFAULT_NETWORK, choices=available_networks(),
                        help='Network to deploy to')
    parser.add_argument('--artifacts', default=DEFAULT_ARTIFACTS_DIR,
                        help='Hardhat artifacts directory')
    parser.add_argument('--log-level', default='INFO', help='Logging level')
    parser.add_argument('--log-file', default=None, help='Also write logs to this file')
    return parser


def print_summary(outcome: DeploymentOutcome, config: DeployConfig):
    print("\n=== Deployment Summary ===")
    print(json.dumps(outcome.summary.to_dict(), indent=2))

    if config.network.explorer_url:
        print("\n=== Explorer Links ===")
        for label, contract in outcome.contracts.items():
            print(f"{label}: {config.network.explorer_address_url(contract.address)}")

    print("\n=== Next Steps ===")
    for line in NEXT_STEPS:
        print(line)

    if config.etherscan_api_key:
        print(f"Verify with: npx hardhat verify --network {config.network_name} "
              f"{outcome.summary.lending_platform} {outcome.summary.mock_usdc} "
              f"{outcome.summary.mock_wbtc}")


def report_failure(outcome: DeploymentOutcome):
    print(f"Deployment failed: {outcome.error}", file=sys.stderr)
    if outcome.contracts:
        # Already confirmed on-chain; a rerun deploys fresh copies.
        print("Contracts deployed before the failure:", file=sys.stderr)
        for label, contract in outcome.contracts.items():
            print(f"  {label}: {contract.address}", file=sys.stderr)


async def deploy(config: DeployConfig, backend: ChainBackend) -> int:
    """Run one deployment and map the outcome to an exit status"""
    gas_reporter = None
    if config.gas_reporter.enabled:
        gas_reporter = GasReporter(
            currency=config.gas_reporter.currency,
            price_feed_id=config.network.price_feed_id
        )

    orchestrator = DeploymentOrchestrator(config, backend, gas_reporter=gas_reporter)
    outcome = await orchestrator.run()

    if not outcome.ok:
        logger.error(f"Deployment stopped at step {outcome.failed_step}")
        report_failure(outcome)
        return 1

    print_summary(outcome, config)

    if gas_reporter:
        try:
            gas_price = await backend.get_gas_price()
            print(await gas_reporter.render(gas_price))
        except Exception as e:
            logger.warning(f"Gas report unavailable: {e}")

    return 0


async def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    # Load environment variables
    load_dotenv()

    try:
        config = load_config(os.environ, args.network)
    except ConfigurationError as e:
        print(f"Deployment failed: {e}", file=sys.stderr)
        return 1

    backend = Web3Backend(config.network, ArtifactLoader(args.artifacts))
    return await deploy(config, backend)


def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Deployment interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run()
