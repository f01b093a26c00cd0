"""Bridges to the outside world — pipeline variables and the REST services.

The core modules depend only on the ``VariableSource``, ``GitClient`` and
``BuildClient`` protocols; concrete implementations live here.
"""

from refsync.bridge.devops_client import DevOpsApiError, DevOpsClient
from refsync.bridge.variables import (
    EnvironmentVariableSource,
    MappingVariableSource,
    VariableSource,
)

__all__ = [
    "DevOpsApiError",
    "DevOpsClient",
    "EnvironmentVariableSource",
    "MappingVariableSource",
    "VariableSource",
]
