"""Tests for the web3.py backend using a mocked Web3 instance."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from lending_deploy.artifacts import ArtifactLoader
from lending_deploy.backend import DeployedContract
from lending_deploy.config import load_config
from lending_deploy.errors import ConfigurationError, NetworkError, TransactionError
from lending_deploy.web3_backend import Web3Backend
from tests.fakes import DEPLOYER as HARDHAT_ADDRESS, HARDHAT_KEY

CONTRACT_ADDRESS = "0x" + "ab" * 20


@pytest.fixture
def web3():
    web3 = MagicMock()
    web3.eth.get_transaction_count.return_value = 7
    web3.eth.get_balance.return_value = 5 * 10**18
    web3.eth.account.sign_transaction.return_value = SimpleNamespace(raw_transaction=b"signed")
    web3.eth.send_raw_transaction.return_value = b"\x12\x34"
    web3.eth.wait_for_transaction_receipt.return_value = {
        "status": 1,
        "contractAddress": CONTRACT_ADDRESS,
        "gasUsed": 654321,
    }
    return web3


@pytest.fixture
def web3_backend(config, artifacts_dir, web3):
    return Web3Backend(config.network, ArtifactLoader(artifacts_dir), web3=web3)


@pytest.mark.asyncio
async def test_signer_from_private_key(web3_backend):
    signer = await web3_backend.get_signer()
    assert signer.address == HARDHAT_ADDRESS


@pytest.mark.asyncio
async def test_no_private_key_raises_without_network_access(artifacts_dir, web3):
    network = load_config({}, "core_testnet_2").network
    backend = Web3Backend(network, ArtifactLoader(artifacts_dir), web3=web3)

    with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
        await backend.deploy("MockERC20", "Mock USDC", "mUSDC", 18, 1)

    web3.eth.send_raw_transaction.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_private_key_is_configuration_error(artifacts_dir, web3):
    network = load_config({"PRIVATE_KEY": "not-a-key"}, "core_testnet_2").network
    backend = Web3Backend(network, ArtifactLoader(artifacts_dir), web3=web3)

    with pytest.raises(ConfigurationError):
        await backend.get_signer()


@pytest.mark.asyncio
async def test_get_balance(web3_backend, web3):
    assert await web3_backend.get_balance(HARDHAT_ADDRESS) == 5 * 10**18
    web3.eth.get_balance.assert_called_once_with(HARDHAT_ADDRESS)


@pytest.mark.asyncio
async def test_get_balance_network_failure(web3_backend, web3):
    web3.eth.get_balance.side_effect = ConnectionError("connection refused")

    with pytest.raises(NetworkError):
        await web3_backend.get_balance(HARDHAT_ADDRESS)


@pytest.mark.asyncio
async def test_deploy_uses_network_gas_settings(web3_backend, web3):
    contract = await web3_backend.deploy("MockERC20", "Mock USDC", "mUSDC", 18, 10)

    factory = web3.eth.contract.return_value
    factory.constructor.assert_called_once_with("Mock USDC", "mUSDC", 18, 10)
    factory.constructor.return_value.build_transaction.assert_called_once_with({
        "from": HARDHAT_ADDRESS,
        "nonce": 7,
        "chainId": 1115,
        "gas": 8_000_000,
        "gasPrice": 20_000_000_000,
    })
    web3.eth.get_transaction_count.assert_called_with(HARDHAT_ADDRESS, "pending")
    web3.eth.send_raw_transaction.assert_called_once_with(b"signed")

    assert contract.name == "MockERC20"
    assert contract.address.lower() == CONTRACT_ADDRESS
    assert contract.tx_hash == "0x1234"
    assert contract.gas_used == 654321


@pytest.mark.asyncio
async def test_local_network_leaves_gas_to_node(artifacts_dir, web3):
    network = load_config({"PRIVATE_KEY": HARDHAT_KEY}, "hardhat").network
    backend = Web3Backend(network, ArtifactLoader(artifacts_dir), web3=web3)

    await backend.deploy("Project", CONTRACT_ADDRESS, CONTRACT_ADDRESS)

    params = web3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
    assert params["chainId"] == 1337
    assert "gas" not in params
    assert "gasPrice" not in params


@pytest.mark.asyncio
async def test_reverted_receipt_raises(web3_backend, web3):
    web3.eth.wait_for_transaction_receipt.return_value = {
        "status": 0, "contractAddress": None, "gasUsed": 8_000_000,
    }

    with pytest.raises(TransactionError, match="reverted") as excinfo:
        await web3_backend.deploy("Project", CONTRACT_ADDRESS, CONTRACT_ADDRESS)
    assert excinfo.value.tx_hash == "0x1234"


@pytest.mark.asyncio
async def test_rpc_rejection_is_transaction_error(web3_backend, web3):
    web3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds for gas * price + value")

    with pytest.raises(TransactionError, match="insufficient funds"):
        await web3_backend.deploy("MockERC20", "Mock WBTC", "mWBTC", 18, 10)


@pytest.mark.asyncio
async def test_connection_error_is_network_error(web3_backend, web3):
    web3.eth.send_raw_transaction.side_effect = ConnectionError("connection reset")

    with pytest.raises(NetworkError):
        await web3_backend.deploy("MockERC20", "Mock WBTC", "mWBTC", 18, 10)


@pytest.mark.asyncio
async def test_call_reads_view_function(web3_backend, web3):
    instance = web3.eth.contract.return_value
    instance.functions.lendingToken.return_value.call.return_value = CONTRACT_ADDRESS
    platform = DeployedContract(name="Project", address=CONTRACT_ADDRESS, abi=[])

    assert await web3_backend.call(platform, "lendingToken") == CONTRACT_ADDRESS
    web3.eth.contract.assert_called_with(address=CONTRACT_ADDRESS, abi=[])


@pytest.mark.asyncio
async def test_gas_price_prefers_network_setting(web3_backend):
    assert await web3_backend.get_gas_price() == 20_000_000_000


@pytest.mark.asyncio
async def test_owner_read_back_matches_deployer(web3_backend, web3):
    instance = web3.eth.contract.return_value
    instance.functions.owner.return_value.call.return_value = HARDHAT_ADDRESS
    platform = DeployedContract(name="Project", address=CONTRACT_ADDRESS, abi=[])

    signer = await web3_backend.get_signer()
    owner = await web3_backend.call(platform, "owner")

    assert owner == signer.address
    instance.functions.owner.assert_called_once_with()
