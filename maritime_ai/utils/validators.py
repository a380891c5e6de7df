"""
Validation Utilities
Input validation errors for vessel prediction records
"""

from typing import Optional

import pydantic

class ValidationError(Exception):
    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)

def from_pydantic_error(exc: pydantic.ValidationError, record: Optional[str] = None) -> ValidationError:
    errors = exc.errors()
    if not errors:
        return ValidationError(f"Invalid {record or 'input'}")

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    prefix = f"Invalid {record}: " if record else ""
    if first.get("type") == "missing":
        message = f"{prefix}missing required field '{field}'"
    else:
        message = f"{prefix}{field}: {first.get('msg', 'invalid value')}"

    if len(errors) > 1:
        message += f" (and {len(errors) - 1} more)"

    return ValidationError(message, field or None)
