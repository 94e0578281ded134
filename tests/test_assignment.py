import random

import pytest

from angelito.services.assignment import (
    MAX_ATTEMPTS,
    AssignmentError,
    InvalidInputError,
    generate_assignment,
    is_valid_assignment,
)


class IdentityShuffler:
    """Leaves the list untouched, so every shuffled attempt has fixed points."""

    def __init__(self):
        self.calls = 0

    def shuffle(self, items):
        self.calls += 1


def _assert_derangement(members, assignments):
    assert set(assignments.keys()) == set(members)
    assert set(assignments.values()) == set(members)
    assert all(giver != receiver for giver, receiver in assignments.items())


@pytest.mark.parametrize("size", [3, 4, 5, 7, 12, 50])
def test_assignment_is_derangement(size):
    members = [f"user-{index}" for index in range(size)]
    for _ in range(50):
        _assert_derangement(members, generate_assignment(members))


def test_assignment_three_members_is_one_of_two_cycles():
    members = ["A", "B", "C"]
    valid = [{"A": "B", "B": "C", "C": "A"}, {"A": "C", "B": "A", "C": "B"}]
    for _ in range(100):
        assert generate_assignment(members) in valid


def test_assignment_five_members():
    members = ["A", "B", "C", "D", "E"]
    assignments = generate_assignment(members)
    _assert_derangement(members, assignments)
    assert len(assignments) == 5


def test_assignment_produces_variety():
    members = ["A", "B", "C", "D"]
    seen = {tuple(sorted(generate_assignment(members).items())) for _ in range(200)}
    # 9 derangements of four members exist
    assert 1 < len(seen) <= 9


@pytest.mark.parametrize("members", [[], ["A"], ["A", "B"]])
def test_assignment_fails_for_too_few_members(members):
    with pytest.raises(InvalidInputError, match="At least 3"):
        generate_assignment(members)


def test_invalid_input_is_assignment_and_value_error():
    with pytest.raises(AssignmentError):
        generate_assignment(["A", "B"])
    with pytest.raises(ValueError):
        generate_assignment(["A", "B"])


def test_assignment_rejects_duplicate_members():
    with pytest.raises(InvalidInputError):
        generate_assignment(["A", "B", "B", "C"])


def test_assignment_fails_before_consuming_randomness():
    shuffler = IdentityShuffler()
    with pytest.raises(InvalidInputError):
        generate_assignment(["A", "B"], rng=shuffler)
    assert shuffler.calls == 0


def test_assignment_deterministic_seed():
    members = ["A", "B", "C", "D", "E"]
    first = generate_assignment(members, rng=random.Random(123))
    second = generate_assignment(members, rng=random.Random(123))
    assert first == second


def test_assignment_falls_back_to_single_cycle():
    shuffler = IdentityShuffler()
    members = ["A", "B", "C", "D"]

    assignments = generate_assignment(members, rng=shuffler)

    assert assignments == {"A": "B", "B": "C", "C": "D", "D": "A"}
    assert shuffler.calls == MAX_ATTEMPTS + 1
    assert is_valid_assignment(assignments, members=members)


def test_assignment_respects_max_attempts():
    shuffler = IdentityShuffler()
    generate_assignment(["A", "B", "C"], rng=shuffler, max_attempts=5)
    assert shuffler.calls == 6


def test_assignment_fallback_uses_fresh_shuffle():
    class ReversingAfter:
        def __init__(self, identity_calls):
            self.remaining = identity_calls

        def shuffle(self, items):
            if self.remaining:
                self.remaining -= 1
                return
            items.reverse()

    assignments = generate_assignment(["A", "B", "C"], rng=ReversingAfter(MAX_ATTEMPTS))

    assert assignments == {"C": "B", "B": "A", "A": "C"}


def test_assignment_does_not_mutate_input():
    members = ["A", "B", "C", "D"]
    generate_assignment(members)
    assert members == ["A", "B", "C", "D"]


def test_assignment_accepts_tuple():
    members = ("A", "B", "C")
    _assert_derangement(members, generate_assignment(members))


def test_generated_assignments_are_valid():
    members = [str(index) for index in range(10)]
    for _ in range(100):
        assert is_valid_assignment(generate_assignment(members), members=members)


def test_valid_assignment_two_members():
    assert is_valid_assignment({"A": "B", "B": "A"})


def test_valid_assignment_empty():
    assert is_valid_assignment({})


def test_invalid_assignment_self_assignment():
    assert not is_valid_assignment({"A": "A", "B": "C", "C": "B"})


def test_invalid_assignment_not_bijection():
    assert not is_valid_assignment({"A": "B", "B": "A", "C": "A"})


def test_invalid_assignment_receiver_outside_givers():
    assert not is_valid_assignment({"A": "B", "B": "C", "C": "D"})


def test_invalid_assignment_member_set_mismatch():
    mapping = {"A": "B", "B": "C", "C": "A"}
    assert is_valid_assignment(mapping, members=["C", "B", "A"])
    assert not is_valid_assignment(mapping, members=["A", "B", "C", "D"])
    assert not is_valid_assignment(mapping, members=["A", "B"])
