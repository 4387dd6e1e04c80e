from __future__ import annotations

import logging
import math
import random
from collections import deque
from typing import Hashable, Iterable, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 100


class DrawError(RuntimeError):
    pass


class TooFewParticipants(DrawError):
    pass


class InfeasibleConstraints(DrawError):
    pass


class InvalidAssignment(DrawError):
    pass


class Entrant(NamedTuple):
    """Minimal record the engine works on. ORM participants work just as well."""
    id: str
    name: str
    group_id: Hashable


def _unique_by_id(participants: Iterable) -> list:
    seen = set()
    roster = []
    for p in participants:
        if p.id in seen:
            continue
        seen.add(p.id)
        roster.append(p)
    return roster


def valid_targets(roster: list) -> dict[str, list[str]]:
    """
    Returns giver_id -> [receiver_id] in roster order.

    With a single group everybody but yourself is allowed, otherwise only
    members of other groups are.
    """
    single_group = len({p.group_id for p in roster}) == 1
    allowed: dict[str, list[str]] = {}
    for p in roster:
        if single_group:
            allowed[p.id] = [t.id for t in roster if t.id != p.id]
        else:
            allowed[p.id] = [t.id for t in roster if t.group_id != p.group_id]
    return allowed


def _augment_layered(start: str, allowed: dict[str, list[str]], dist: dict[str, float],
                     match_giver: dict[str, str], match_receiver: dict[str, str]) -> bool:
    # Iterative DFS along the BFS layers; a giver that dead-ends is dropped from the layering.
    stack = [start]
    taken: list[str] = []
    iters = {start: iter(allowed[start])}
    while stack:
        g = stack[-1]
        for r in iters[g]:
            nxt = match_receiver.get(r)
            if nxt is None:
                taken.append(r)
                for giver, receiver in zip(stack, taken):
                    match_giver[giver] = receiver
                    match_receiver[receiver] = giver
                return True
            if dist.get(nxt) == dist[g] + 1:
                taken.append(r)
                stack.append(nxt)
                iters[nxt] = iter(allowed[nxt])
                break
        else:
            dist[g] = math.inf
            stack.pop()
            if taken:
                taken.pop()
    return False


def maximum_matching(allowed: dict[str, list[str]]) -> dict[str, str]:
    """Hopcroft-Karp over the giver -> receiver compatibility graph."""
    givers = list(allowed)
    match_giver: dict[str, str] = {}
    match_receiver: dict[str, str] = {}
    while True:
        dist: dict[str, float] = {}
        queue = deque()
        for g in givers:
            if g in match_giver:
                dist[g] = math.inf
            else:
                dist[g] = 0
                queue.append(g)
        found = False
        while queue:
            g = queue.popleft()
            for r in allowed[g]:
                nxt = match_receiver.get(r)
                if nxt is None:
                    found = True
                elif dist[nxt] == math.inf:
                    dist[nxt] = dist[g] + 1
                    queue.append(nxt)
        if not found:
            return match_giver
        for g in givers:
            if g not in match_giver:
                _augment_layered(g, allowed, dist, match_giver, match_receiver)


def has_perfect_matching(allowed: dict[str, list[str]]) -> bool:
    return len(maximum_matching(allowed)) == len(allowed)


def _alternating_path(start: str, allowed: dict[str, list[str]], match_giver: dict[str, str],
                      match_receiver: dict[str, str], blocked: set[str]) -> list[tuple[str, str]] | None:
    """BFS from an unmatched giver to a free receiver; returns the (giver, receiver) pairs to flip."""
    reached_by: dict[str, str] = {}
    queue = deque([start])
    seen = {start}
    while queue:
        g = queue.popleft()
        for r in allowed[g]:
            if r in blocked or r in reached_by:
                continue
            reached_by[r] = g
            nxt = match_receiver.get(r)
            if nxt is None:
                path = []
                while True:
                    giver = reached_by[r]
                    path.append((giver, r))
                    if giver == start:
                        return path
                    r = match_giver[giver]
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return None


def _commit(giver: str, receiver: str, allowed: dict[str, list[str]], used: set[str],
            match_giver: dict[str, str], match_receiver: dict[str, str]) -> bool:
    """
    Fixes giver -> receiver if the rest of the roster can still be completed.

    ``match_giver`` is a perfect matching of the givers not yet fixed onto the
    receivers not yet used; it stays one after a successful commit.
    """
    freed = match_giver.pop(giver)
    del match_receiver[freed]
    if freed == receiver:
        return True

    holder = match_receiver.pop(receiver)
    del match_giver[holder]
    path = _alternating_path(holder, allowed, match_giver, match_receiver, used | {receiver})
    if path is None:
        match_giver[giver], match_receiver[freed] = freed, giver
        match_giver[holder], match_receiver[receiver] = receiver, holder
        return False
    for g, r in path:
        match_giver[g] = r
        match_receiver[r] = g
    return True


def _search(order: list[str], allowed: dict[str, list[str]], matching: dict[str, str],
            rng: random.Random) -> dict[str, str] | None:
    match_giver = dict(matching)
    match_receiver = {r: g for g, r in match_giver.items()}
    used: set[str] = set()
    result: dict[str, str] = {}

    for giver in order:
        candidates = [r for r in allowed[giver] if r not in used]
        rng.shuffle(candidates)
        for receiver in candidates:
            if _commit(giver, receiver, allowed, used, match_giver, match_receiver):
                used.add(receiver)
                result[giver] = receiver
                break
        else:
            return None
    return result


def draw(participants: Iterable, rng: random.Random | None = None,
         max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> dict[str, str]:
    """
    Draws a random giver -> receiver mapping for ``participants``.

    Every participant gives exactly once and receives exactly once, never to
    themselves, and never to someone of their own group unless the whole
    roster is a single group.

    Raises TooFewParticipants for fewer than two participants and
    InfeasibleConstraints when no complete assignment can be found.
    """
    rng = rng or random.Random()
    roster = _unique_by_id(participants)
    if len(roster) < 2:
        raise TooFewParticipants("Need at least 2 participants to draw.")

    allowed = valid_targets(roster)
    if any(len(targets) == 0 for targets in allowed.values()):
        raise InfeasibleConstraints(
            "No valid assignment: someone has nobody to give to. Try changing the groups."
        )

    matching = maximum_matching(allowed)
    if len(matching) < len(allowed):
        raise InfeasibleConstraints(
            "No valid assignment exists for these groups. Try changing the groups."
        )

    order = [p.id for p in roster]
    for attempt in range(1, max_attempts + 1):
        rng.shuffle(order)
        logger.debug("Draw attempt %d over %d participants", attempt, len(order))
        assignment = _search(order, allowed, matching, rng)
        if assignment is not None:
            logger.info("Drew %d participants in %d attempt(s)", len(assignment), attempt)
            return assignment

    raise InfeasibleConstraints(
        f"Could not find an assignment after {max_attempts} attempts. Try changing the groups."
    )


def validate_assignment(participants: Iterable, assignment: dict[str, str]) -> None:
    roster = _unique_by_id(participants)
    by_id = {p.id: p for p in roster}
    single_group = len({p.group_id for p in roster}) == 1

    if set(assignment) != set(by_id):
        raise InvalidAssignment("Assignment does not cover every participant exactly once.")
    if set(assignment.values()) != set(by_id) or len(set(assignment.values())) != len(assignment):
        raise InvalidAssignment("Assignment is not one-to-one.")
    for giver, receiver in assignment.items():
        if giver == receiver:
            raise InvalidAssignment(f"{by_id[giver].name} would give to themselves.")
        if not single_group and by_id[giver].group_id == by_id[receiver].group_id:
            raise InvalidAssignment(
                f"{by_id[giver].name} would give to {by_id[receiver].name} from the same group."
            )
