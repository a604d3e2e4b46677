"""
Remote source access
"""

from .fetcher import SourceFetcher

__all__ = ["SourceFetcher"]
