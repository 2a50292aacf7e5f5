"""
Slug helpers — branch-name sanitizing and slug validation.
Version: 1.0.0
"""
import re

from applivery_deploy.core.constants.deploy import SLUG_MAX_LENGTH, SLUG_MIN_LENGTH

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9-]")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")
_SLUG_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]")


def sanitize_branch_name(branch_name: str) -> str:
    """Make a branch name slug safe ('feature/login_v2' -> 'feature-login-v2')."""
    if not branch_name:
        return ""
    return _EDGE_HYPHENS.sub("", _UNSAFE_CHARS.sub("-", branch_name))


def is_valid_slug(slug: str) -> bool:
    """Alphanumeric at both ends, alphanumerics or hyphens between, 3 to 128 chars."""
    if not slug or not SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH:
        return False
    return _SLUG_PATTERN.fullmatch(slug) is not None
