"""
Connect / disconnect / status orchestration
"""
from .remediation import (
    RemediationAction,
    RemediationDecision,
    decide_remediation,
    remediation_options,
)
from .connect import ConnectFlow, ConnectRequest, ConnectResult, ConnectState
from .disconnect import DisconnectFlow, DisconnectResult
from .status import StatusFlow, StatusReport, Diagnosis

__all__ = [
    "RemediationAction",
    "RemediationDecision",
    "decide_remediation",
    "remediation_options",
    "ConnectFlow",
    "ConnectRequest",
    "ConnectResult",
    "ConnectState",
    "DisconnectFlow",
    "DisconnectResult",
    "StatusFlow",
    "StatusReport",
    "Diagnosis",
]
