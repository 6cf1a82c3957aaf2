from typing import Optional

from lms_backend.core.exceptions import InvalidInput


def require_ids(**ids: Optional[int]) -> None:
    """Raises InvalidInput unless every keyword is a positive integer id."""
    for name, value in ids.items():
        if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidInput(f"{name} must be a positive integer")
