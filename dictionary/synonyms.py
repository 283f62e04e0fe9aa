"""
Synonym table: overlapping groups are merged, so every member of a merged
group expands to every other member (symmetric, idempotent).
"""

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


class SynonymTable:
    def __init__(self, groups: Dict[str, FrozenSet[str]]) -> None:
        self._groups = groups

    @classmethod
    def from_groups(
        cls,
        groups: Iterable[Iterable[str]],
        canonical: Optional[Callable[[str], Optional[str]]] = None,
    ) -> "SynonymTable":
        """
        Build from raw groups. canonical maps a configured word to its token
        form (None drops it); multi-word members cannot be matched against
        single tokens and should be dropped by canonical.
        """
        parent: Dict[str, str] = {}

        def find(x: str) -> str:
            root = x
            while parent[root] != root:
                root = parent[root]
            while parent[x] != root:
                parent[x], x = root, parent[x]
            return root

        for group in groups:
            members: List[str] = []
            for word in group:
                token = canonical(word) if canonical else word
                if token:
                    members.append(token)
            for token in members:
                parent.setdefault(token, token)
            for other in members[1:]:
                a, b = find(members[0]), find(other)
                if a != b:
                    parent[b] = a

        merged: Dict[str, Set[str]] = {}
        for token in parent:
            merged.setdefault(find(token), set()).add(token)
        table: Dict[str, FrozenSet[str]] = {}
        for members_set in merged.values():
            if len(members_set) < 2:
                continue
            frozen = frozenset(members_set)
            for token in frozen:
                table[token] = frozen
        logger.debug("Synonym table: %d tokens in %d groups", len(table), len(merged))
        return cls(table)

    def group(self, token: str) -> FrozenSet[str]:
        """All members of token's group, token included; {token} if ungrouped."""
        return self._groups.get(token, frozenset((token,)))

    def expand(self, tokens: Iterable[str]) -> Set[str]:
        out: Set[str] = set()
        for token in tokens:
            out |= self.group(token)
        return out

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, token: object) -> bool:
        return token in self._groups
