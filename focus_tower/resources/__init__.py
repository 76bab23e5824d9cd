"""Resource partitioning - cgroups equivalent.

This module implements the partition controller backends:
- CgroupPartitionController: cgroup v2 filesystem (production)
- InMemoryPartitionController: no host access (dry runs, tests)
"""

from focus_tower.resources.cgroups import (
    DEFAULT_CGROUP_ROOT,
    CgroupPartitionController,
    validate_weight,
)
from focus_tower.resources.memory import InMemoryPartitionController

__all__ = [
    "DEFAULT_CGROUP_ROOT",
    "CgroupPartitionController",
    "InMemoryPartitionController",
    "validate_weight",
]
