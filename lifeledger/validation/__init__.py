"""Input validation package."""

from lifeledger.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
