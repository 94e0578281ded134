from __future__ import annotations

import random
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Protocol, Sequence

from loguru import logger

MIN_MEMBERS = 3
MAX_ATTEMPTS = 100


class AssignmentError(RuntimeError):
    pass


class InvalidInputError(AssignmentError, ValueError):
    pass


class Shuffler(Protocol):
    def shuffle(self, x: List) -> None: ...


def _validate_members(members: Sequence[Hashable]) -> None:
    if len(members) < MIN_MEMBERS:
        raise InvalidInputError(f"At least {MIN_MEMBERS} participants are required.")
    if len(set(members)) != len(members):
        raise InvalidInputError("Participants must be unique.")


def _is_derangement(givers: Sequence[Hashable], receivers: Sequence[Hashable]) -> bool:
    return all(giver != receiver for giver, receiver in zip(givers, receivers))


def _single_cycle(order: Sequence[Hashable]) -> Dict:
    size = len(order)
    return {order[index]: order[(index + 1) % size] for index in range(size)}


def generate_assignment(
    members: Sequence[str],
    rng: Optional[Shuffler] = None,
    max_attempts: int = MAX_ATTEMPTS,
) -> Dict[str, str]:
    """Draw a giver -> receiver mapping in which nobody gifts themselves.

    Shuffles the members up to ``max_attempts`` times and keeps the first
    permutation without fixed points. If every attempt is rejected, a shuffled
    single cycle is returned instead, which is always valid for three or more
    members.

    ``rng`` only needs a ``shuffle`` method; pass ``random.Random(seed)`` for a
    reproducible draw. Without it every call gets its own generator.
    """
    _validate_members(members)

    if rng is None:
        rng = random.Random()
    givers = list(members)

    for _ in range(max_attempts):
        receivers = list(givers)
        rng.shuffle(receivers)
        if _is_derangement(givers, receivers):
            return dict(zip(givers, receivers))

    logger.debug("No derangement after {attempts} shuffles, using single cycle", attempts=max_attempts)
    order = list(givers)
    rng.shuffle(order)
    return _single_cycle(order)


def is_valid_assignment(
    mapping: Mapping[str, str],
    members: Optional[Iterable[str]] = None,
) -> bool:
    """Check that ``mapping`` is a permutation of its own keys with no fixed points.

    When ``members`` is given the keys must also be exactly that member set.
    """
    givers = set(mapping.keys())
    receivers = list(mapping.values())

    if len(set(receivers)) != len(receivers):
        return False
    if set(receivers) != givers:
        return False
    if any(giver == receiver for giver, receiver in mapping.items()):
        return False
    if members is not None and givers != set(members):
        return False
    return True
