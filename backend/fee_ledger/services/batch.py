"""Shared result types for batch operations."""

from dataclasses import dataclass


@dataclass
class BatchItemFailure:
    """One entity a batch operation could not process."""

    entity_ref: str
    reason: str
