"""
Duplicate report over a saved (or in-memory) list of job dicts.

Groups items three ways: by exact url, by canonical url and by normalized
"title|employer". Useful for checking how well a site's canonical rules
collapse repeated listings.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from jobsweep.core.canonical import canonicalize

logger = logging.getLogger(__name__)

_QUOTES = re.compile("[‘’“”]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")


def normalize_key(text: Optional[str]) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    if not text:
        return ""
    text = _QUOTES.sub("'", str(text).lower())
    text = _NON_ALNUM.sub(" ", text)
    return _SPACES.sub(" ", text).strip()


@dataclass
class DuplicateGroup:
    key: str
    indexes: List[int]

    @property
    def count(self) -> int:
        return len(self.indexes)


@dataclass
class DuplicateReport:
    total: int
    unique_urls: int
    unique_canonical_urls: int
    unique_title_employer: int
    by_url: List[DuplicateGroup] = field(default_factory=list)
    by_canonical_url: List[DuplicateGroup] = field(default_factory=list)
    by_title_employer: List[DuplicateGroup] = field(default_factory=list)

    def summary(self, limit: int = 10) -> str:
        lines = [
            f"Total items: {self.total}",
            f"Unique exact URLs: {self.unique_urls}",
            f"Unique canonical URLs: {self.unique_canonical_urls}",
            f"Unique title|employer: {self.unique_title_employer}",
        ]
        for label, groups in (
            ("exact URL", self.by_url),
            ("canonical URL", self.by_canonical_url),
            ("title|employer", self.by_title_employer),
        ):
            lines.append(f"Duplicate groups ({label}): {len(groups)}")
            for group in groups[:limit]:
                key = group.key if len(group.key) <= 80 else group.key[:80] + "..."
                lines.append(f"- {group.count} items with {label}: {key}")
        return "\n".join(lines)


def _duplicate_groups(index: Dict[str, List[int]]) -> List[DuplicateGroup]:
    groups = [DuplicateGroup(key, idx) for key, idx in index.items() if len(idx) > 1]
    return sorted(groups, key=lambda g: g.count, reverse=True)


def duplicate_report(
    items: Sequence[Mapping[str, Any]],
    canonical: Callable[[str], str] = canonicalize,
) -> DuplicateReport:
    by_url: Dict[str, List[int]] = {}
    by_canonical: Dict[str, List[int]] = {}
    by_title_employer: Dict[str, List[int]] = {}

    for idx, item in enumerate(items):
        url = item.get("url") or ""
        by_url.setdefault(url, []).append(idx)
        by_canonical.setdefault(canonical(url), []).append(idx)
        key = normalize_key(f"{item.get('title') or ''}|{item.get('employer') or ''}")
        by_title_employer.setdefault(key, []).append(idx)

    return DuplicateReport(
        total=len(items),
        unique_urls=len(by_url),
        unique_canonical_urls=len(by_canonical),
        unique_title_employer=len(by_title_employer),
        by_url=_duplicate_groups(by_url),
        by_canonical_url=_duplicate_groups(by_canonical),
        by_title_employer=_duplicate_groups(by_title_employer),
    )


def report_file(path: str, canonical: Callable[[str], str] = canonicalize) -> DuplicateReport:
    with open(path, "r", encoding="utf-8") as f:
        items = json.load(f)
    report = duplicate_report(items, canonical)
    logger.info(f"Duplicate report for {path}:\n{report.summary()}")
    return report
