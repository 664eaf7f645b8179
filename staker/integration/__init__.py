"""
Integration shell: reference share vault and scenario runner
"""

from .scenario import ScenarioRunner, StakingWorld, build_world, run_scenario_file
from .vault import ShareVault, VaultError

__all__ = [
    "ScenarioRunner",
    "StakingWorld",
    "build_world",
    "run_scenario_file",
    "ShareVault",
    "VaultError",
]
