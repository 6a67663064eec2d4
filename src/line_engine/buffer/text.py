"""Grapheme-cluster indexed text storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, overload

import grapheme


@dataclass(frozen=True, slots=True)
class GraphemeText:
    """Immutable text addressed in user-perceived characters.

    Offsets, lengths and slices are all measured in grapheme clusters, never in
    code points. Splicing re-segments the result, so material on either side of
    the seam may fuse into a single cluster (a combining mark attaching to the
    preceding base character, two regional indicators forming a flag).
    """

    clusters: Tuple[str, ...] = ()

    @classmethod
    def from_str(cls, text: str) -> "GraphemeText":
        return cls(clusters=tuple(grapheme.graphemes(text)))

    def __str__(self) -> str:
        return "".join(self.clusters)

    def __len__(self) -> int:
        return len(self.clusters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.clusters)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> "GraphemeText": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return GraphemeText(clusters=self.clusters[index])
        return self.clusters[index]

    def slice(self, start: int, end: int) -> str:
        """Return the clusters in ``[start, end)`` joined as a string."""

        return "".join(self.clusters[start:end])

    def splice(self, start: int, end: int, text: str) -> "GraphemeText":
        """Return a copy with ``[start, end)`` replaced by ``text``."""

        return GraphemeText.from_str(
            "".join(self.clusters[:start]) + text + "".join(self.clusters[end:])
        )

    def cluster_before(self, pos: int) -> str:
        """Return the cluster ending at ``pos`` or ``""`` at the start."""

        if pos <= 0:
            return ""
        return self.clusters[pos - 1]
