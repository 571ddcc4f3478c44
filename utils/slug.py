"""
Share slug generation
"""
# Standard library imports
import secrets

# URL-safe nanoid alphabet
SLUG_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
SLUG_LENGTH = 6


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Short random token such as a9F3kP"""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))
