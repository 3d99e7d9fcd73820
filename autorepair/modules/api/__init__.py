"""
API Module - Black Box Interface

Purpose: Data models shared between the autorepair modules
Interface: Instance, InvocationRequest, RepairAttempt, RunSummary, error types
Hidden: Validation rules, Kubernetes object conversion
"""

from .errors import (
    AutoRepairError,
    ConfigurationError,
    ConnectionFailed,
    ExecSetupFailed,
    ListFailed,
    NoSuchContainer,
    PipeTeardownError,
    ScopeMissing,
    StreamError,
)
from .models import (
    AttemptState,
    Instance,
    InvocationRequest,
    RepairAttempt,
    RunSummary,
)

__all__ = [
    "AttemptState",
    "AutoRepairError",
    "ConfigurationError",
    "ConnectionFailed",
    "ExecSetupFailed",
    "Instance",
    "InvocationRequest",
    "ListFailed",
    "NoSuchContainer",
    "PipeTeardownError",
    "RepairAttempt",
    "RunSummary",
    "ScopeMissing",
    "StreamError",
]
