import re
from collections.abc import Awaitable, Callable

from unidecode import unidecode

MAX_SUBDOMAIN_LENGTH = 30
SUBDOMAIN_RE = re.compile(r"^[a-z0-9-]{3,30}$")


def slugify(text):
    text = unidecode(text).lower()
    text = re.sub(r'[^a-z0-9]+', '-', text).strip('-')
    return text


def sanitize_subdomain(text: str) -> str:
    """Turn arbitrary text (usually a company name) into a subdomain candidate."""
    return slugify(text)[:MAX_SUBDOMAIN_LENGTH].strip("-")


def is_valid_subdomain(subdomain: str) -> bool:
    return bool(subdomain) and SUBDOMAIN_RE.fullmatch(subdomain) is not None


async def generate_unique_subdomain(company_name: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """
    Derive a subdomain from ``company_name`` that ``exists`` reports as free.

    Collisions get a numeric suffix ("acme", "acme-1", "acme-2", ...); the
    base is shortened so the suffixed value still fits in 30 characters.
    """
    base = sanitize_subdomain(company_name)
    if len(base) < 3:
        base = f"{base}-co".strip("-") if base else "company"

    candidate = base
    counter = 1
    while await exists(candidate):
        suffix = f"-{counter}"
        candidate = base[: MAX_SUBDOMAIN_LENGTH - len(suffix)].rstrip("-") + suffix
        counter += 1
    return candidate
