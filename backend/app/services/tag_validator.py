"""
Input validation for tags and article-tag associations.

All checks raise ``ValidationError`` so callers see a 400 with a readable
message before anything is written.
"""

import re
from typing import Iterable, List, Optional

from app.core.exceptions import ValidationError

NAME_MAX_LENGTH = 20
SLUG_MAX_LENGTH = 50
COLOR_MAX_LENGTH = 20

# Letters, digits, CJK ideographs, underscore and hyphen
TAG_NAME_PATTERN = re.compile(r"[\u4e00-\u9fa5a-zA-Z0-9_-]+")
# Lowercase letters, digits and hyphens
TAG_SLUG_PATTERN = re.compile(r"[a-z0-9-]+")
# #RRGGBB, #RGB or a named color such as "teal"
COLOR_PATTERN = re.compile(r"#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})|[a-zA-Z]+")


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_tag_name(name: Optional[str]) -> str:
    if is_blank(name):
        raise ValidationError("Tag name cannot be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"Tag name must be between 1 and {NAME_MAX_LENGTH} characters"
        )
    if not TAG_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "Tag name may only contain letters, digits, CJK characters, "
            "underscores and hyphens"
        )
    return name


def validate_tag_slug(slug: Optional[str]) -> str:
    if is_blank(slug):
        raise ValidationError("Tag slug cannot be empty")
    if len(slug) > SLUG_MAX_LENGTH:
        raise ValidationError(
            f"Tag slug must be between 1 and {SLUG_MAX_LENGTH} characters"
        )
    if not TAG_SLUG_PATTERN.fullmatch(slug):
        raise ValidationError(
            "Tag slug may only contain lowercase letters, digits and hyphens"
        )
    if slug.startswith("-") or slug.endswith("-"):
        raise ValidationError("Tag slug cannot start or end with a hyphen")
    if "--" in slug:
        raise ValidationError("Tag slug cannot contain consecutive hyphens")
    return slug


def validate_color(color: Optional[str]) -> Optional[str]:
    """Blank colors are allowed and mean "use the default color"."""
    if is_blank(color):
        return None
    if len(color) > COLOR_MAX_LENGTH or not COLOR_PATTERN.fullmatch(color):
        raise ValidationError(
            "Tag color must be a hex code (#FF0000 or #F00) or a color name"
        )
    return color


def validate_id(value, param_name: str = "id") -> int:
    """Primary keys must be positive integers."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"Invalid {param_name}: must be a positive integer")
    return value


def validate_page_params(page: int, page_size: int, max_page_size: int) -> None:
    if page < 1:
        raise ValidationError("Page number must be greater than 0")
    if page_size < 1 or page_size > max_page_size:
        raise ValidationError(f"Page size must be between 1 and {max_page_size}")


def unique_positive_ids(ids: Optional[Iterable[int]]) -> List[int]:
    """Drop duplicates and non-positive ids, keeping first-seen order."""
    unique = []
    for value in ids or []:
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            if value not in unique:
                unique.append(value)
    return unique
