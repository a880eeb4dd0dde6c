"""Multi-pattern matching automaton.

PatternAutomaton is an Aho-Corasick automaton compiled once over the full
peptide set. Scanning a translated reading frame costs one transition
lookup per residue and reports every peptide ending at every position,
including peptides that overlap or nest inside one another.

Construction runs in three passes:

1. Trie build. Each peptide's terminal state records the peptide's
   1-based index; identical peptides share a terminal and all of their
   indices are kept.
2. Fail links, breadth first. A state's fail link points at the longest
   proper suffix of its prefix that is also a trie prefix. A state also
   accepts everything its fail-link target accepts.
3. Goto closure, breadth first. Transitions missing on a state are copied
   from its fail-link target, so lookups never walk fail links at scan
   time. Symbols that leave the closure altogether fall back to the root.

Example:
    >>> automaton = PatternAutomaton(["VANG", "ANG", "GER"])
    >>> list(automaton.scan("SAVANGERE"))
    [(5, (1, 2)), (7, (3,))]
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping, Sequence

import attrs

if TYPE_CHECKING:
    from pgmap.core.models import Peptide

logger = logging.getLogger(__name__)

ROOT = 0


@attrs.define(slots=True)
class _Node:
    depth: int
    parent: int
    symbol: str | None
    transitions: dict[str, int] = attrs.Factory(dict)
    fail: int = ROOT
    pattern_ids: tuple[int, ...] = ()


@attrs.frozen(slots=True)
class AutomatonState:
    """Read-only view of one automaton state.

    Attributes:
        index: Position of the state in the state array (root is 0).
        depth: Length of the prefix this state represents.
        parent: Index of the parent state in the trie (root is its own parent).
        symbol: Residue labeling the edge from the parent (None for root).
        transitions: Outgoing residue to state index map.
        fail: Fail-link target index.
        pattern_ids: 1-based indices of the patterns accepted here.
    """

    index: int
    depth: int
    parent: int
    symbol: str | None
    transitions: Mapping[str, int]
    fail: int
    pattern_ids: tuple[int, ...]


class PatternAutomaton:
    """Aho-Corasick automaton over a fixed pattern list.

    Attributes:
        patterns: Patterns in input order; pattern id ``i`` refers to
            ``patterns[i - 1]``.
        alphabet: Every symbol appearing in any pattern.
    """

    def __init__(self, patterns: Sequence[str]) -> None:
        """Compile the automaton.

        Args:
            patterns: Pattern strings. Order determines pattern ids.

        Raises:
            ValueError: If any pattern is empty.
        """
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._states: list[_Node] = [_Node(depth=0, parent=ROOT, symbol=None)]

        self._build_trie()
        order = self._build_fail_links()
        self._close_transitions(order)

        self.alphabet: frozenset[str] = frozenset(
            symbol for pattern in self.patterns for symbol in pattern
        )

        logger.debug(
            f"Compiled automaton: {len(self.patterns)} patterns, "
            f"{len(self._states)} states, {len(self.alphabet)} symbols"
        )

    @classmethod
    def from_peptides(cls, peptides: Iterable[Peptide]) -> PatternAutomaton:
        """Compile over peptide sequences; ids follow list order."""
        return cls([peptide.sequence for peptide in peptides])

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _build_trie(self) -> None:
        states = self._states

        for pattern_id, pattern in enumerate(self.patterns, start=1):
            if not pattern:
                raise ValueError(f"Pattern {pattern_id} is empty")

            current = ROOT
            for symbol in pattern:
                child = states[current].transitions.get(symbol)
                if child is None:
                    child = len(states)
                    states.append(
                        _Node(
                            depth=states[current].depth + 1,
                            parent=current,
                            symbol=symbol,
                        )
                    )
                    states[current].transitions[symbol] = child
                current = child

            states[current].pattern_ids += (pattern_id,)

    def _build_fail_links(self) -> list[int]:
        """Set fail links and inherited pattern ids.

        Returns:
            Non-root state indices in breadth-first order.
        """
        states = self._states
        order: list[int] = []
        queue = deque(states[ROOT].transitions.values())

        while queue:
            index = queue.popleft()
            order.append(index)
            state = states[index]

            if state.depth > 1:
                fallback = states[state.parent].fail
                while fallback != ROOT and state.symbol not in states[fallback].transitions:
                    fallback = states[fallback].fail
                target = states[fallback].transitions.get(state.symbol, ROOT)
                state.fail = target if target != index else ROOT
                state.pattern_ids += states[state.fail].pattern_ids

            queue.extend(state.transitions.values())

        return order

    def _close_transitions(self, order: list[int]) -> None:
        states = self._states
        for index in order:
            state = states[index]
            for symbol, target in states[state.fail].transitions.items():
                state.transitions.setdefault(symbol, target)

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------

    @property
    def states(self) -> tuple[AutomatonState, ...]:
        """Snapshots of every state, indexed like the state ids."""
        return tuple(
            AutomatonState(
                index=index,
                depth=node.depth,
                parent=node.parent,
                symbol=node.symbol,
                transitions=MappingProxyType(dict(node.transitions)),
                fail=node.fail,
                pattern_ids=node.pattern_ids,
            )
            for index, node in enumerate(self._states)
        )

    @property
    def n_states(self) -> int:
        return len(self._states)

    def next_state(self, state: int, symbol: str) -> int:
        """Transition from a state on a symbol, falling back to the root."""
        return self._states[state].transitions.get(symbol, ROOT)

    def patterns_at(self, state: int) -> tuple[int, ...]:
        """All pattern ids accepted in a state (empty if none)."""
        return self._states[state].pattern_ids

    def pattern_at(self, state: int) -> int | None:
        """First pattern id accepted in a state, or None."""
        ids = self._states[state].pattern_ids
        return ids[0] if ids else None

    def scan(self, text: str) -> Iterator[tuple[int, tuple[int, ...]]]:
        """Find every pattern occurrence in a text.

        Args:
            text: Symbols to scan (a translated reading frame).

        Yields:
            ``(position, pattern_ids)`` for each position where at least
            one pattern ends; position is the index of its last symbol.
        """
        states = self._states
        state = ROOT
        for position, symbol in enumerate(text):
            state = states[state].transitions.get(symbol, ROOT)
            ids = states[state].pattern_ids
            if ids:
                yield position, ids

    def __len__(self) -> int:
        return len(self.patterns)
