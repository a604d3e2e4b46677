"""
Custom exceptions for the domain rank cache
"""

from typing import Optional


class DomainRankError(Exception):
    """Base exception for domain rank cache"""
    pass


class FetchFailure(DomainRankError):
    """Remote ranking archive could not be downloaded or stored locally"""
    def __init__(self, message: str, url: str = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class IndexBuildFailure(DomainRankError):
    """Cached ranking archive is missing, corrupt or unreadable"""
    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path
