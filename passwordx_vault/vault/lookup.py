"""Matching decrypted credentials against the page the user is on.

Matching happens client side, after decryption, because URLs are stored
encrypted and the server cannot filter on them.
"""
from urllib.parse import urlsplit
from collections.abc import Iterable

from ..models import CredentialRecord


def _hostname(url: str):
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts.hostname


def match_url(record: CredentialRecord, current_url: str) -> bool:
    """True when the record's URL host appears in ``current_url``.

    Records without a URL, with a placeholder URL, or with a malformed URL
    never match.
    """
    if not record.url or not current_url or "url" in record.failed_fields:
        return False
    host = _hostname(record.url)
    return bool(host) and host in current_url.lower()


def sort_by_url(
    records: Iterable[CredentialRecord], current_url: str
) -> list[CredentialRecord]:
    """Put records matching ``current_url`` first, keeping relative order."""
    return sorted(records, key=lambda rec: not match_url(rec, current_url))


def search(records: Iterable[CredentialRecord], query: str) -> list[CredentialRecord]:
    """Case-insensitive substring search over title, URL and username."""
    needle = query.strip().lower()
    if not needle:
        return list(records)
    return [
        rec for rec in records
        if any(
            needle in (getattr(rec, name) or "").lower()
            for name in ("title", "url", "username")
            if name not in rec.failed_fields
        )
    ]
