"""
Sentinel for fields a caller left out of a partial update.

Editing an availability slot must tell apart a field that was not sent
(MISSING, keep the stored value) from one that was sent. None cannot play
that role because it is a valid value for optional request fields.

Usage:
    def update_slot(..., weekday: Union[int, MissingType] = MISSING):
        if isinstance(weekday, MissingType):
            weekday = slot.weekday
"""

from typing import Any, Optional


class MissingType:
    """Singleton type of MISSING. Falsy, equal only to itself."""

    __slots__ = ()
    _instance: Optional["MissingType"] = None

    def __new__(cls) -> "MissingType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        # Unpickles to the module-level singleton
        return "MISSING"

    def __copy__(self) -> "MissingType":
        return self

    def __deepcopy__(self, memo: Any) -> "MissingType":
        return self


MISSING = MissingType()
