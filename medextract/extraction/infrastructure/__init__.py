"""
Infrastructure layer of the Extraction domain.

Request execution primitives, engine/PDF adapters and the AI client.
"""

from .execution import (
    BranchOutcome,
    CancellationToken,
    Deadline,
    ExtractionContext,
    call_external,
    fan_out,
)

__all__ = [
    "BranchOutcome",
    "CancellationToken",
    "Deadline",
    "ExtractionContext",
    "call_external",
    "fan_out",
]
