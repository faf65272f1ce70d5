"""Fuzzy ranking and the fuzzy-finder state used by ``DisplayMode.FUZZY``."""

from __future__ import annotations

import os
from pathlib import Path

MAX_FUZZY_FILES = 20_000


def fuzzy_score(query: str, candidate: str) -> int | None:
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def fuzzy_match_labels(query: str, labels: list[str], limit: int = 200) -> list[tuple[int, str, int]]:
    """Rank ``labels`` against ``query``: substring hits first, then fuzzy hits.

    Returns ``(label_index, label, score)`` triples, best first.
    """
    folded = query.casefold()
    substring_scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        substr_idx = label.casefold().find(folded)
        if substr_idx < 0:
            continue
        substring_scored.append((substr_idx, len(label), label, idx))
    if substring_scored:
        substring_scored.sort(key=lambda item: (item[0], item[1], item[2]))
        return [
            (label_idx, label, 10_000 - (substr_idx * 50) - label_len)
            for substr_idx, label_len, label, label_idx in substring_scored[: max(1, limit)]
        ]

    scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        score = fuzzy_score(query, label)
        if score is None:
            continue
        scored.append((score, len(label), label, idx))
    scored.sort(key=lambda item: (-item[0], item[1], item[2]))
    return [(idx, label, score) for score, _, label, idx in scored[: max(1, limit)]]


def collect_file_labels(root: Path, show_hidden: bool, max_files: int = MAX_FUZZY_FILES) -> list[str]:
    """Root-relative labels of files under ``root``, sorted per directory."""
    labels: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        if not show_hidden:
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            filenames = [name for name in filenames if not name.startswith(".")]
        dirnames.sort(key=str.lower)
        base = Path(dirpath)
        for filename in sorted(filenames, key=str.lower):
            labels.append((base / filename).relative_to(root).as_posix())
            if len(labels) >= max_files:
                return labels
    return labels


class FuzzyFinder:
    """Query, candidate labels, and ranked matches for one tab.

    Matching is recomputed lazily on tick so fast typing only ranks once.
    """

    def __init__(self, root: Path, labels: list[str]) -> None:
        self.root = root
        self.labels = labels
        self.query = ""
        self.matches: list[str] = list(labels[:200])
        self.index = 0
        self.dirty = False

    @classmethod
    def for_directory(cls, root: Path, show_hidden: bool) -> FuzzyFinder:
        return cls(root, collect_file_labels(root, show_hidden))

    def set_query(self, query: str) -> None:
        self.query = query
        self.dirty = True

    def tick(self) -> bool:
        """Re-rank when the query changed; return whether matches changed."""
        if not self.dirty:
            return False
        self.dirty = False
        if self.query:
            self.matches = [label for _, label, _ in fuzzy_match_labels(self.query, self.labels)]
        else:
            self.matches = list(self.labels[:200])
        self.index = 0
        return True

    def select_next(self) -> None:
        if self.matches:
            self.index = min(self.index + 1, len(self.matches) - 1)

    def select_prev(self) -> None:
        self.index = max(0, self.index - 1)

    def selected_path(self) -> Path | None:
        if not self.matches:
            return None
        return self.root / self.matches[self.index]
