"""
modules/validation package: data quality guards before any storage write.
"""
from modules.validation.day_bucket_validator import (
    ValidationResult,
    has_valid_coords,
    validate_day_buckets,
)

__all__ = [
    "ValidationResult",
    "has_valid_coords",
    "validate_day_buckets",
]
