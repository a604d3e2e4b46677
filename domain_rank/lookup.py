"""Domain popularity lookups backed by the cached ranking archive."""

from __future__ import annotations
import threading
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

import httpx
import structlog

from .config import Settings, get_settings
from .index.builder import RankIndex, build_index
from .net.fetcher import SourceFetcher
from .tools.domain_norm import normalize_domain

logger = structlog.get_logger()


class DomainRank:
    """
    Rank <-> domain lookups.

    The index is loaded once, by ``initialize()`` or implicitly by the first
    query, and published as a single immutable RankIndex. Queries read that
    reference without locking and never raise.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 client: Optional[httpx.Client] = None,
                 fetcher: Optional[SourceFetcher] = None):
        """
        Args:
            settings: Source and cache configuration (defaults to get_settings())
            client: HTTP client passed to the default fetcher
            fetcher: Fully configured fetcher, overrides settings/client
        """
        self.settings = settings or get_settings()
        self.fetcher = fetcher or SourceFetcher(self.settings, client=client)
        self._index: RankIndex = RankIndex.empty()
        self._loaded = False
        self._attempted = threading.Event()
        self._init_lock = threading.Lock()
        self.last_error: Optional[Exception] = None

    def initialize(self) -> RankIndex:
        """
        Fetch (if stale) and index the ranking archive.

        Runs at most once successfully; concurrent callers wait for the
        running load. After a failure the index stays empty and a later
        call tries again.

        Returns:
            The published RankIndex

        Raises:
            FetchFailure: If the archive cannot be downloaded
            IndexBuildFailure: If the cached archive is unreadable
        """
        return self._load(retry=True)

    def _load(self, retry: bool) -> RankIndex:
        with self._init_lock:
            if self._loaded or (not retry and self._attempted.is_set()):
                return self._index
            try:
                path, downloaded = self.fetcher.ensure_local_copy()
                index = build_index(path)
            except Exception as e:
                self.last_error = e
                self._attempted.set()
                logger.error("rank_index_load_failed", error=str(e), error_type=type(e).__name__)
                raise

            self._index = index
            self._loaded = True
            self.last_error = None
            self._attempted.set()
            logger.info("rank_index_loaded", domains=len(index), skipped=index.skipped,
                        replaced=index.replaced, downloaded=downloaded)
            return index

    def _ensure_loaded(self) -> None:
        if self._attempted.is_set():
            return
        try:
            self._load(retry=False)
        except Exception:
            # already logged; queries fall back to "not found"
            pass

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def index(self) -> RankIndex:
        return self._index

    @property
    def size(self) -> int:
        return len(self._index)

    @property
    def skipped_lines(self) -> int:
        return self._index.skipped

    def rank_of(self, domain: Optional[str]) -> Optional[int]:
        """
        Read the rank for a domain name or partial URL.

        The input is normalized first (case, scheme, ``www.``, path).

        Returns:
            Rank if found, None otherwise
        """
        if not isinstance(domain, str) or not domain.strip():
            return None
        self._ensure_loaded()
        key = normalize_domain(domain)
        if key is None:
            return None
        return self._index.by_domain.get(key)

    def domain_of(self, rank: Optional[int]) -> Optional[str]:
        """
        Read the domain at a rank position.

        Returns:
            Domain if the position is present, None otherwise
        """
        if type(rank) is not int:
            return None
        self._ensure_loaded()
        return self._index.by_rank.get(rank)

    def top(self, n: int = 20) -> List[Tuple[int, str]]:
        """Best-ranked (rank, domain) pairs."""
        self._ensure_loaded()
        return list(self._index.top(n))

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(self._index.by_rank.items())


@lru_cache()
def get_domain_rank() -> DomainRank:
    """Get the shared DomainRank instance"""
    return DomainRank()


def rank_of(domain: Optional[str]) -> Optional[int]:
    """Rank of a domain in the shared instance, loading it on first use."""
    return get_domain_rank().rank_of(domain)


def domain_of(rank: Optional[int]) -> Optional[str]:
    """Domain at a rank in the shared instance, loading it on first use."""
    return get_domain_rank().domain_of(rank)
