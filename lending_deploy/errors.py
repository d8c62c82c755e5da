"""
Deployment Errors
Exception hierarchy raised by the backend and orchestrator
"""


class DeploymentError(Exception):
    """Base class for all deployment failures"""


class ConfigurationError(DeploymentError):
    """Missing signer, unknown network or other unusable settings"""


class NetworkError(DeploymentError):
    """RPC endpoint unreachable or provider failure"""


class TransactionError(DeploymentError):
    """Transaction reverted, ran out of gas or could not be funded"""

    def __init__(self, message: str, tx_hash: str = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ArtifactError(DeploymentError):
    """Compiled contract artifact missing or malformed"""


class WiringMismatchError(DeploymentError):
    """Platform contract does not reference the deployed tokens"""
