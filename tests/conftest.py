"""Pytest configuration and shared fixtures."""

import json

import pytest

from lending_deploy.config import load_config
from tests.fakes import HARDHAT_KEY, FakeChainBackend


@pytest.fixture
def config():
    """Core Testnet 2 configuration with a signer key."""
    return load_config({"PRIVATE_KEY": HARDHAT_KEY}, "core_testnet_2")


@pytest.fixture
def backend():
    return FakeChainBackend()


@pytest.fixture
def artifacts_dir(tmp_path):
    """Hardhat-style artifacts for MockERC20 and Project."""
    contracts = {
        "MockERC20": [
            {"inputs": [
                {"internalType": "string", "name": "name", "type": "string"},
                {"internalType": "string", "name": "symbol", "type": "string"},
                {"internalType": "uint8", "name": "decimals", "type": "uint8"},
                {"internalType": "uint256", "name": "initialSupply", "type": "uint256"},
            ], "stateMutability": "nonpayable", "type": "constructor"},
        ],
        "Project": [
            {"inputs": [
                {"internalType": "address", "name": "_lendingToken", "type": "address"},
                {"internalType": "address", "name": "_collateralToken", "type": "address"},
            ], "stateMutability": "nonpayable", "type": "constructor"},
            {"inputs": [], "name": "lendingToken",
             "outputs": [{"internalType": "address", "name": "", "type": "address"}],
             "stateMutability": "view", "type": "function"},
        ],
    }
    for name, abi in contracts.items():
        path = tmp_path / "contracts" / f"{name}.sol"
        path.mkdir(parents=True)
        (path / f"{name}.json").write_text(json.dumps({
            "contractName": name,
            "abi": abi,
            "bytecode": "0x6080604052",
        }))
    return tmp_path
