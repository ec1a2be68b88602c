from .errors import ValidationIssue, ValidationError
from .dataset_validation import validate_items, validate_records

__all__ = ["ValidationIssue", "ValidationError", "validate_items", "validate_records"]
