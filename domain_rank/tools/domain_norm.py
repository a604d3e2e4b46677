"""Domain normalization for rank lookups."""

from __future__ import annotations
from typing import Optional

_SCHEMES = ("http://", "https://")
_WWW = "www."


def normalize_domain(url_or_domain: Optional[str]) -> Optional[str]:
    """Reduce a domain or partial URL to the bare host used as index key.

    Lower-cases and trims the input, drops a leading http(s) scheme and a
    leading ``www.`` label, then keeps everything before the first path,
    query or fragment separator.

    Returns:
        Normalized domain, or None when nothing usable remains
    """
    if url_or_domain is None:
        return None
    host = url_or_domain.strip().lower()
    for scheme in _SCHEMES:
        if host.startswith(scheme):
            host = host[len(scheme):]
            break
    if host.startswith(_WWW):
        host = host[len(_WWW):]
    # path/query/fragment
    for sep in ("/", "?", "#"):
        host = host.split(sep, 1)[0]
    return host or None
