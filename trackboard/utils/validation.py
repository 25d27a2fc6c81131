"""Input coercion shared by the service layer.

JSON bodies carry whatever the client sent; fields that must be text are
checked here so a number or list answers 400 instead of failing deep in
hashing or string handling.
"""

from trackboard.core.exceptions import ValidationError


def as_text(value, field: str, strip: bool = True) -> str:
    """Return ``value`` as a string; None becomes "".

    Raises ValidationError for any non-string value.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={field: "invalid"})
    return value.strip() if strip else value
