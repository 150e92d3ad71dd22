"""Unit tests for the compound operations built on the primitive contract."""

from unittest.mock import MagicMock

import pytest
from timed_map import (
    ABSENT,
    ConcurrentModificationError,
    InvalidArgumentError,
    TimedHashMap,
    TimedKey,
)


@pytest.fixture
def timed_map():
    """Create a map holding one key with versions at times 10 and 20."""
    m = TimedHashMap()
    m.put("k", 10, 1)
    m.put("k", 20, 2)
    return m


# ----------------------------------------------------------------------
# get_or_default
# ----------------------------------------------------------------------


@pytest.mark.parametrize(
    "key, time, expected",
    [
        ("k", 10, 1),  # exact
        ("k", 15, 1),  # floor
        ("k", 99, 2),  # after last write
        ("k", 5, "dflt"),  # before first write
        ("other", 10, "dflt"),  # unknown key
    ],
)
def test_get_or_default(timed_map, key, time, expected):
    assert timed_map.get_or_default(key, time, "dflt") == expected


def test_get_or_default_keeps_stored_none(timed_map):
    """Test an associated None is returned rather than the default."""
    timed_map.put("n", 1, None)
    assert timed_map.get_or_default("n", 2, "dflt") is None


# ----------------------------------------------------------------------
# put_if_absent
# ----------------------------------------------------------------------


def test_put_if_absent_on_missing(timed_map):
    """Test put_if_absent writes when nothing is associated."""
    assert timed_map.put_if_absent("k", 5, 0) is None
    assert timed_map.get("k", 5) == 0
    assert timed_map.size() == 3


def test_put_if_absent_respects_floor_association(timed_map):
    """Test an earlier usable value blocks the put."""
    assert timed_map.put_if_absent("k", 15, 99) == 1
    assert not timed_map.contains_key("k", 15)


def test_put_if_absent_overwrites_stored_none():
    """Test a stored None counts as absent, unlike presence tests."""
    m = TimedHashMap()
    m.put("k", 1, None)
    assert m.contains_key("k", 1)

    assert m.put_if_absent("k", 1, "filled") is None
    assert m.get("k", 1) == "filled"
    assert m.size() == 1


def test_put_if_absent_over_earlier_none_adds_slot():
    """Test an associated None from an earlier time also counts as absent."""
    m = TimedHashMap()
    m.put("k", 1, None)

    assert m.put_if_absent("k", 5, "v") is None
    assert m.get("k", 5) == "v"
    assert m.get("k", 3) is None
    assert m.size() == 2


# ----------------------------------------------------------------------
# remove(key, time, value)
# ----------------------------------------------------------------------


def test_remove_with_expected_value(timed_map):
    """Test conditional removal only fires on an equal value."""
    assert timed_map.remove("k", 10, 99) is False
    assert timed_map.contains_key("k", 10)

    assert timed_map.remove("k", 10, 1) is True
    assert not timed_map.contains_key("k", 10)


def test_remove_with_expected_value_needs_presence(timed_map):
    """Test a merely associated time is not removed."""
    assert timed_map.remove("k", 15, 1) is False
    assert timed_map.size() == 2


def test_remove_with_expected_none():
    """Test conditional removal matches a stored None."""
    m = TimedHashMap()
    m.put("k", 1, None)
    assert m.remove("k", 1, None) is True
    assert m.is_empty()


# ----------------------------------------------------------------------
# replace
# ----------------------------------------------------------------------


def test_replace_when_present(timed_map):
    """Test replace overwrites a value written at exactly the time."""
    assert timed_map.replace("k", 20, 200) == 2
    assert timed_map.get("k", 20) == 200
    assert timed_map.size() == 2


def test_replace_when_not_associated(timed_map):
    """Test replace is a no-op before the first write."""
    assert timed_map.replace("k", 5, 50) is ABSENT
    assert timed_map.replace("missing", 5, 50) is ABSENT
    assert timed_map.size() == 2


def test_replace_with_old_value(timed_map):
    """Test the conditional form checks the current association."""
    assert timed_map.replace("k", 10, 99, 100) is False
    assert timed_map.get("k", 10) == 1

    assert timed_map.replace("k", 10, 1, 100) is True
    assert timed_map.get("k", 10) == 100


def test_replace_with_old_value_not_associated(timed_map):
    """Test the conditional form never writes before the first write."""
    assert timed_map.replace("k", 1, ABSENT, 5) is False
    assert timed_map.size() == 2


def test_replace_skips_earlier_write():
    """Test replace never writes at a time that only inherits a value."""
    m = TimedHashMap()
    m.put("k", 0, 10)

    assert m.replace("k", 5, 20) is ABSENT
    assert m.replace("k", 5, 10, 20) is False
    assert m.size() == 1
    assert list(m.keys()) == [TimedKey("k", 0)]
    assert m.get("k", 5) == 10


# ----------------------------------------------------------------------
# compute family
# ----------------------------------------------------------------------


def test_compute_overwrites(timed_map):
    """Test compute stores the function's result."""
    fn = MagicMock(return_value=11)

    assert timed_map.compute("k", 10, fn) == 11
    fn.assert_called_once_with("k", 10, 1)
    assert timed_map.get("k", 10) == 11


def test_compute_passes_absent_when_missing():
    """Test compute sees ABSENT for a key with no association."""
    m = TimedHashMap()
    fn = MagicMock(return_value="new")

    assert m.compute("k", 1, fn) == "new"
    fn.assert_called_once_with("k", 1, ABSENT)
    assert m.get("k", 1) == "new"


def test_compute_none_removes(timed_map):
    """Test a None result deletes the slot."""
    assert timed_map.compute("k", 20, lambda k, t, v: None) is None
    assert not timed_map.contains_key("k", 20)
    assert timed_map.get("k", 20) == 1


def test_compute_counter():
    """Test compute can implement a counter."""
    m = TimedHashMap()
    for _ in range(3):
        m.compute("hits", 0, lambda k, t, v: (v or 0) + 1)
    assert m.get("hits", 0) == 3


def test_compute_if_absent_invokes_only_when_missing(timed_map):
    """Test compute_if_absent skips the function for usable values."""
    fn = MagicMock(return_value=42)

    assert timed_map.compute_if_absent("k", 15, fn) == 1
    fn.assert_not_called()

    assert timed_map.compute_if_absent("k", 5, fn) == 42
    fn.assert_called_once_with("k", 5)
    assert timed_map.get("k", 5) == 42


def test_compute_if_absent_none_result_stores_nothing(timed_map):
    """Test a None result from compute_if_absent leaves the map alone."""
    assert timed_map.compute_if_absent("new", 1, lambda k, t: None) is None
    assert not timed_map.contains_key("new")


def test_compute_if_absent_over_stored_none():
    """Test a stored None does not count as a usable value."""
    m = TimedHashMap()
    m.put("k", 1, None)

    assert m.compute_if_absent("k", 1, lambda k, t: "v") == "v"
    assert m.get("k", 1) == "v"


def test_compute_if_present_invokes_only_when_usable(timed_map):
    """Test compute_if_present skips keys without a usable value."""
    fn = MagicMock(return_value=7)

    assert timed_map.compute_if_present("k", 5, fn) is None
    fn.assert_not_called()

    assert timed_map.compute_if_present("k", 20, fn) == 7
    fn.assert_called_once_with("k", 20, 2)
    assert timed_map.get("k", 20) == 7


def test_compute_if_present_none_removes(timed_map):
    """Test compute_if_present deletes on a None result."""
    assert timed_map.compute_if_present("k", 10, lambda k, t, v: None) is None
    assert not timed_map.contains_key("k", 10)
    assert timed_map.size() == 1


def test_compute_if_present_skips_earlier_write():
    """Test compute_if_present ignores a value inherited from an earlier time."""
    m = TimedHashMap()
    m.put("k", 0, 10)
    fn = MagicMock(return_value=99)

    assert m.compute_if_present("k", 5, fn) is None
    fn.assert_not_called()
    assert m.get("k", 5) == 10
    assert m.size() == 1


def test_compute_if_present_none_keeps_earlier_write():
    """Test a None result at a time with no write removes nothing."""
    m = TimedHashMap()
    m.put("k", 0, 10)

    assert m.compute_if_present("k", 5, lambda k, t, v: None) is None
    assert m.contains_key("k", 0)
    assert m.size() == 1


# ----------------------------------------------------------------------
# merge
# ----------------------------------------------------------------------


def test_merge_stores_value_when_missing():
    """Test merge stores the value directly with nothing associated."""
    m = TimedHashMap()
    combiner = MagicMock()

    assert m.merge("k", 1, "a", combiner) == "a"
    combiner.assert_not_called()


def test_merge_combines_with_existing(timed_map):
    """Test merge combines the current and new values."""
    assert timed_map.merge("k", 20, 5, lambda old, new: old + new) == 7
    assert timed_map.get("k", 20) == 7


def test_merge_ignores_earlier_write(timed_map):
    """Test merge stores the value as is when only an earlier time was written."""
    combiner = MagicMock(return_value=None)

    assert timed_map.merge("k", 15, 5, combiner) == 5
    combiner.assert_not_called()
    assert timed_map.get("k", 15) == 5
    assert timed_map.get("k", 10) == 1
    assert timed_map.size() == 3


def test_merge_none_result_removes(timed_map):
    """Test a None combination deletes the slot."""
    assert timed_map.merge("k", 10, 1, lambda old, new: None) is None
    assert not timed_map.contains_key("k", 10)


def test_merge_rejects_none_value(timed_map):
    """Test merge refuses a None value before touching the map."""
    with pytest.raises(InvalidArgumentError):
        timed_map.merge("k", 10, None, lambda old, new: new)
    assert timed_map.get("k", 10) == 1


# ----------------------------------------------------------------------
# argument validation
# ----------------------------------------------------------------------


@pytest.mark.parametrize(
    "call",
    [
        lambda m: m.compute("k", 10, None),
        lambda m: m.compute_if_absent("k", 10, None),
        lambda m: m.compute_if_present("k", 10, None),
        lambda m: m.merge("k", 10, 1, None),
        lambda m: m.for_each(None),
        lambda m: m.replace_all(None),
        lambda m: m.compute("k", 10, "not callable"),
    ],
)
def test_missing_function_fails_fast(timed_map, call):
    """Test higher-order operations reject a missing function without mutating."""
    with pytest.raises(InvalidArgumentError):
        call(timed_map)
    assert timed_map.get("k") == {10: 1, 20: 2}


def test_invalid_argument_is_type_error(timed_map):
    """Test callers catching TypeError also see argument errors."""
    with pytest.raises(TypeError):
        timed_map.compute("k", 10, None)


# ----------------------------------------------------------------------
# for_each / replace_all / put_all
# ----------------------------------------------------------------------


def test_for_each_visits_entries_in_order(timed_map):
    """Test for_each calls the action per entry in view order."""
    timed_map.put("j", 1, 0)
    seen = []
    timed_map.for_each(lambda k, t, v: seen.append((k, t, v)))

    assert seen == [("k", 10, 1), ("k", 20, 2), ("j", 1, 0)]


def test_for_each_detects_structural_change(timed_map):
    """Test a structural change inside the action surfaces as an error."""
    def action(k, t, v):
        timed_map.put(k, t + 1, v)

    with pytest.raises(ConcurrentModificationError):
        timed_map.for_each(action)


def test_replace_all(timed_map):
    """Test replace_all rewrites every value."""
    timed_map.put("j", 1, 5)
    timed_map.replace_all(lambda k, t, v: v * 10)

    assert timed_map.get("k") == {10: 10, 20: 20}
    assert timed_map.get("j", 1) == 50
    assert timed_map.size() == 3


def test_replace_all_detects_removal(timed_map):
    """Test removing inside replace_all surfaces as an error."""
    def fn(k, t, v):
        timed_map.remove(k, t)
        return v

    with pytest.raises(ConcurrentModificationError):
        timed_map.replace_all(fn)


def test_put_all(timed_map):
    """Test put_all copies every entry from another map."""
    other = TimedHashMap()
    other.put("k", 20, 200)
    other.put("z", 0, "z0")

    timed_map.put_all(other)

    assert timed_map.get("k", 20) == 200
    assert timed_map.get("z", 0) == "z0"
    assert timed_map.size() == 3


def test_put_all_from_self(timed_map):
    """Test copying a map into itself is harmless."""
    timed_map.put_all(timed_map)
    assert timed_map.size() == 2
