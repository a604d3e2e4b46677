"""
Lookup helpers
"""

from .domain_norm import normalize_domain

__all__ = ["normalize_domain"]
