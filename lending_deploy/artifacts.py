"""
Contract Artifacts
Loads ABI and bytecode produced by `npx hardhat compile`
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

from lending_deploy.errors import ArtifactError

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACTS_DIR = "artifacts"


@dataclass(frozen=True)
class ContractArtifact:
    name: str
    abi: List[Dict]
    bytecode: str


class ArtifactLoader:
    def __init__(self, artifacts_dir: Union[str, Path] = DEFAULT_ARTIFACTS_DIR):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, ContractArtifact] = {}

    def artifact_path(self, contract_name: str) -> Path:
        """Hardhat layout: artifacts/contracts/<Name>.sol/<Name>.json"""
        return self.artifacts_dir / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"

    def load(self, contract_name: str) -> ContractArtifact:
        """Load a compiled contract artifact"""
        if contract_name in self._cache:
            return self._cache[contract_name]

        path = self.artifact_path(contract_name)
        if not path.exists():
            raise ArtifactError(
                f"Artifact for {contract_name} not found at {path}. "
                f"Compile contracts first using: npx hardhat compile"
            )

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read artifact {path}: {e}")
            raise ArtifactError(f"Unreadable artifact for {contract_name}: {e}") from e

        abi = data.get("abi")
        bytecode = data.get("bytecode")
        if not isinstance(abi, list) or not bytecode or bytecode == "0x":
            raise ArtifactError(f"Artifact for {contract_name} has no abi or bytecode")

        artifact = ContractArtifact(name=contract_name, abi=abi, bytecode=bytecode)
        self._cache[contract_name] = artifact
        logger.debug(f"Loaded artifact {contract_name} from {path}")
        return artifact
