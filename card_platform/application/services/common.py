"""Helpers shared by the application services."""

from datetime import datetime
from typing import Callable

from card_platform.core.exceptions import ValidationException

Clock = Callable[[], datetime]

# Upper bound of the Integer primary key columns
MAX_ID = 2**31 - 1


def parse_id(value: "str | int", entity: str = "entity") -> int:
    """Parse a path/body id into the store's integer key."""
    if isinstance(value, bool):
        raise ValidationException(f"Invalid {entity} ID format", details={"id": value})
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ValidationException(f"Invalid {entity} ID format", details={"id": str(value)}) from None
    if not 1 <= parsed <= MAX_ID:
        raise ValidationException(f"Invalid {entity} ID format", details={"id": str(value)})
    return parsed
