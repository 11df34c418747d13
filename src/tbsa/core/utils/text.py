"""Text processing utilities."""

import re
import secrets
import unicodedata

from tbsa.core.constants import MAX_SLUG_LENGTH


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a name.

    Diacritics are folded to their ASCII base letter, so
    ``"Asociația Proprietarilor"`` becomes ``"asociatia-proprietarilor"``.

    Args:
        name: The input string to slugify
        max_length: Maximum length of output slug

    Returns:
        URL-safe lowercase slug

    Examples:
        >>> generate_slug("My Company Name")
        'my-company-name'
        >>> generate_slug("Hello! World@2024")
        'hello-world2024'
    """
    slug = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    slug = slug.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug[:max_length].strip("-")


def unique_suffix(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Append a short random suffix to a slug that is already taken."""
    suffix = secrets.token_hex(3)
    return f"{slug[: max_length - len(suffix) - 1]}-{suffix}"
