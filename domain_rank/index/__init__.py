"""
Rank index construction
"""

from .builder import RankIndex, build_index, parse_rank_lines

__all__ = [
    "RankIndex",
    "build_index",
    "parse_rank_lines",
]
