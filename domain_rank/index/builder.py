"""Rank index built from the cached ranking archive.

Expected member format: ``rank,domain`` per line, no header.
"""

from __future__ import annotations
import logging
import lzma
import os
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from ..exceptions import IndexBuildFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankIndex:
    """Two read-only lookup tables built from one parse pass."""
    by_rank: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    by_domain: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    skipped: int = 0        # malformed non-blank lines
    replaced: int = 0       # entries displaced by a later duplicate rank or domain

    @classmethod
    def empty(cls) -> "RankIndex":
        return cls()

    def __len__(self) -> int:
        return len(self.by_rank)

    def top(self, n: int) -> Iterator[Tuple[int, str]]:
        """Yield up to n (rank, domain) pairs, best rank first."""
        if n <= 0:
            return
        for rank in sorted(self.by_rank)[:n]:
            yield rank, self.by_rank[rank]


def _parse_line(line: str) -> Optional[Tuple[int, str]]:
    cols = line.split(",", 1)
    if len(cols) != 2:
        return None
    try:
        rank = int(cols[0])
    except ValueError:
        return None
    domain = cols[1].strip().lower()
    if rank <= 0 or not domain:
        return None
    return rank, domain


def parse_rank_lines(text: str) -> RankIndex:
    """
    Parse ``rank,domain`` text into a RankIndex.

    Malformed lines are skipped and counted. On duplicates the last line wins
    and the earlier pairing is dropped from both tables, so
    ``by_rank[r] == d`` holds exactly when ``by_domain[d] == r``.

    Args:
        text: Decoded CSV content

    Returns:
        Fully populated RankIndex
    """
    by_rank: Dict[int, str] = {}
    by_domain: Dict[str, int] = {}
    skipped = 0
    replaced = 0

    for line in text.split("\n"):
        if not line.strip():
            continue
        entry = _parse_line(line)
        if entry is None:
            skipped += 1
            continue
        rank, domain = entry

        old_domain = by_rank.get(rank)
        if old_domain is not None and old_domain != domain:
            del by_domain[old_domain]
            replaced += 1
        old_rank = by_domain.get(domain)
        if old_rank is not None and old_rank != rank:
            del by_rank[old_rank]
            replaced += 1

        by_rank[rank] = domain
        by_domain[domain] = rank

    if skipped:
        logger.debug(f"Skipped {skipped} malformed ranking lines")

    return RankIndex(
        by_rank=MappingProxyType(by_rank),
        by_domain=MappingProxyType(by_domain),
        skipped=skipped,
        replaced=replaced,
    )


def _read_single_member(path: Path) -> Optional[str]:
    with zipfile.ZipFile(path) as zf:
        members = [info for info in zf.infolist() if not info.is_dir()]
        if not members:
            return None
        if len(members) > 1:
            logger.warning(f"{path} has {len(members)} members, indexing {members[0].filename}")
        return zf.read(members[0]).decode("utf-8", errors="replace")


def build_index(path: Union[str, Path]) -> RankIndex:
    """
    Load the ranking archive at ``path`` into a fresh RankIndex.

    An archive without members yields an empty index. A missing, corrupt or
    truncated archive is deleted so the next initialization downloads it again.

    Raises:
        IndexBuildFailure: If the archive cannot be opened or read
    """
    path = Path(path)
    try:
        text = _read_single_member(path)
    except (OSError, EOFError, RuntimeError, zipfile.BadZipFile, zlib.error, lzma.LZMAError) as e:
        _discard(path)
        raise IndexBuildFailure(f"Cannot read ranking archive {path}: {e}", path=str(path)) from e

    if text is None:
        logger.warning(f"Ranking archive {path} contains no entries")
        return RankIndex.empty()

    index = parse_rank_lines(text)
    logger.info(f"Indexed {len(index)} domains from {path} ({index.skipped} lines skipped)")
    return index


def _discard(path: Path) -> None:
    try:
        os.remove(path)
        logger.warning(f"Deleted unreadable ranking archive {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to delete unreadable ranking archive {path}: {e}")
