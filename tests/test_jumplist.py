from jump_beacon.adapters.textual.jumplist import JumpList
from jump_beacon.host import CursorPosition


def at(line: int) -> CursorPosition:
    return CursorPosition(line, 0)


def test_empty_list_goes_nowhere() -> None:
    jumps = JumpList()

    assert jumps.back(at(5)) is None
    assert jumps.forward() is None


def test_back_then_forward_returns_to_origin() -> None:
    jumps = JumpList()
    jumps.record(at(1))
    jumps.record(at(50))

    assert jumps.back(at(300)) == at(50)
    assert jumps.back(at(50)) == at(1)
    assert jumps.back(at(1)) is None
    assert jumps.forward() == at(50)
    assert jumps.forward() == at(300)
    assert jumps.forward() is None


def test_back_skips_entry_equal_to_current() -> None:
    jumps = JumpList()
    jumps.record(at(1))
    jumps.record(at(50))

    assert jumps.back(at(50)) == at(1)


def test_record_while_walking_drops_forward_history() -> None:
    jumps = JumpList()
    jumps.record(at(1))
    jumps.record(at(50))
    jumps.back(at(300))

    jumps.record(at(50))

    assert jumps.entries == [at(1), at(50)]
    assert jumps.forward() is None


def test_capacity_is_enforced() -> None:
    jumps = JumpList(capacity=3)
    for line in range(10):
        jumps.record(at(line))

    assert len(jumps) == 3
    assert jumps.entries[0] == at(7)
