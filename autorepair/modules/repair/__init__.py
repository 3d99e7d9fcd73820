"""
Repair Module - Black Box Interface

Purpose: Orchestrate one repair pass over a namespace snapshot
Interface: RepairOrchestrator.run(), RepairOrchestrator.plan(), RepairOrchestrator.repair()
Hidden: Per-pod state machine, failure isolation, output logging
"""

from .orchestrator import RepairOrchestrator

__all__ = ["RepairOrchestrator"]
