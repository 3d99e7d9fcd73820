"""
Selection Module - Black Box Interface

Purpose: Decide which pods get repaired and which container runs the repair
Interface: filter_eligible(), select_container()
Hidden: Annotation lookup, phase comparison, container matching rules

Pure functions only: no I/O, no logging side effects.
"""

from .selection import filter_eligible, select_container

__all__ = ["filter_eligible", "select_container"]
