"""
Domain Rank - in-process lookup between domains and their popularity rank
"""

__version__ = "1.0.0"

__all__ = [
    "DomainRank",
    "RankIndex",
    "Settings",
    "get_domain_rank",
    "rank_of",
    "domain_of",
    "__version__",
]

def __getattr__(name: str):
    """Lazy import to avoid import-time side effects."""
    if name in ("DomainRank", "get_domain_rank", "rank_of", "domain_of"):
        from . import lookup
        return getattr(lookup, name)
    elif name == "RankIndex":
        from .index.builder import RankIndex
        return RankIndex
    elif name == "Settings":
        from .config import Settings
        return Settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
