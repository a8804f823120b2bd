"""Cycle detection over a dependency adjacency.

Depth-first traversal with three colours. Reaching a node that is still on the
current DFS stack (grey) closes a cycle; the stack slice from that node to the
top is recorded, so consecutive ids (wrapping back to the first) are connected
by a dependency edge. A self-dependency is a one-node cycle.

The traversal is iterative to keep long dependency chains clear of the
interpreter recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence

logger = logging.getLogger("tgm.cycle_detector")

_WHITE = 0
_GREY = 1
_BLACK = 2


def detect_cycles(
    adjacency: Mapping[str, Sequence[str]],
    roots: Iterable[str] | None = None,
) -> list[list[str]]:
    """Return every cycle found via dependency edges.

    Nodes are started in ``roots`` order first (then adjacency order), and
    neighbours are followed in declared order, so a fixed adjacency always
    yields the same cycles in the same order. Ids missing from the adjacency
    are treated as leaves.
    """
    colour: dict[str, int] = {}
    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()

    start_order = [*(roots or ()), *adjacency]
    for start in start_order:
        if start not in adjacency or colour.get(start, _WHITE) != _WHITE:
            continue

        stack: list[str] = [start]
        positions: dict[str, int] = {start: 0}
        pending: list[Iterator[str]] = [iter(adjacency[start])]
        colour[start] = _GREY

        while pending:
            try:
                nxt = next(pending[-1])
            except StopIteration:
                finished = stack.pop()
                pending.pop()
                del positions[finished]
                colour[finished] = _BLACK
                continue

            if nxt not in adjacency:
                continue
            state = colour.get(nxt, _WHITE)
            if state == _GREY:
                cycle = stack[positions[nxt]:]
                key = tuple(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(list(cycle))
            elif state == _WHITE:
                colour[nxt] = _GREY
                positions[nxt] = len(stack)
                stack.append(nxt)
                pending.append(iter(adjacency[nxt]))

    logger.debug("Cycle detection finished: nodes=%d cycles=%d", len(adjacency), len(cycles))
    return cycles


def cycle_members(cycles: Iterable[Sequence[str]]) -> set[str]:
    """Flatten cycles into the set of ids that sit on at least one of them."""
    members: set[str] = set()
    for cycle in cycles:
        members.update(cycle)
    return members
