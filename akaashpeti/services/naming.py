"""Name rules shared by files and folders."""

from ..exceptions import ValidationError

MAX_NAME_LENGTH = 255
"""
Longest accepted file or folder name.

Matches the ``name`` column width on both tables.
"""


def normalize_item_name(name: str, field: str = "name") -> str:
    """Strip surrounding whitespace and validate a file or folder name.

    Names are single path segments: no slashes, not empty, no longer than
    ``MAX_NAME_LENGTH``.

    Raises:
        ValidationError: if the name breaks any of the rules above.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required", field=field)
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters", field=field)
    if "/" in name or "\\" in name:
        raise ValidationError("Name cannot contain slashes", field=field)
    if name in (".", ".."):
        raise ValidationError("Invalid name", field=field)
    return name
