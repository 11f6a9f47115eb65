"""Tests for the behavior store."""

import random
from types import MappingProxyType

import pytest

from src.personalization.behavior import MAX_SEARCH_HISTORY, BehaviorSnapshot, BehaviorStore


def test_record_view_increments_count(behavior):
    """Test that each view adds one to the product's count."""
    behavior.record_view("1")
    behavior.record_view("1")
    behavior.record_view("2")

    snapshot = behavior.snapshot()
    assert snapshot.views_for("1") == 2
    assert snapshot.views_for("2") == 1
    assert snapshot.views_for("3") == 0


def test_unknown_product_ids_are_tracked(behavior):
    """Test that the store does not validate ids against a catalog."""
    behavior.record_view("not-in-any-catalog")

    assert behavior.snapshot().views_for("not-in-any-catalog") == 1


def test_record_dwell_accumulates(behavior):
    behavior.record_dwell("1", 1500)
    behavior.record_dwell("1", 2500)

    assert behavior.snapshot().dwell_for("1") == 4000


def test_negative_dwell_is_ignored(behavior):
    """Test that negative dwell is dropped without raising."""
    behavior.record_dwell("1", 1000)
    behavior.record_dwell("1", -500)
    behavior.record_dwell("2", -1)

    snapshot = behavior.snapshot()
    assert snapshot.dwell_for("1") == 1000
    assert "2" not in snapshot.dwell_millis


def test_counters_equal_sum_of_valid_increments():
    """Test counters against a random interleaving of view and dwell calls."""
    rng = random.Random(42)
    store = BehaviorStore()
    expected_views = {}
    expected_dwell = {}

    for _ in range(500):
        product_id = str(rng.randint(1, 5))
        if rng.random() < 0.5:
            store.record_view(product_id)
            expected_views[product_id] = expected_views.get(product_id, 0) + 1
        else:
            millis = rng.randint(-1000, 5000)
            store.record_dwell(product_id, millis)
            if millis >= 0:
                expected_dwell[product_id] = expected_dwell.get(product_id, 0) + millis

    snapshot = store.snapshot()
    assert dict(snapshot.views) == expected_views
    assert dict(snapshot.dwell_millis) == expected_dwell
    assert all(v >= 0 for v in snapshot.views.values())
    assert all(v >= 0 for v in snapshot.dwell_millis.values())


def test_record_search_lowercases(behavior):
    behavior.record_search("Wireless HEADPHONES")

    assert behavior.snapshot().searches == ("wireless headphones",)


def test_search_log_is_bounded(behavior):
    """Test that the 51st query evicts the first one."""
    for i in range(MAX_SEARCH_HISTORY + 1):
        behavior.record_search(f"query {i}")

    searches = behavior.snapshot().searches
    assert len(searches) == MAX_SEARCH_HISTORY
    assert "query 0" not in searches
    assert searches[0] == "query 1"
    assert searches[-1] == f"query {MAX_SEARCH_HISTORY}"


def test_search_log_never_exceeds_limit(behavior):
    for i in range(200):
        behavior.record_search(f"q{i}")
        assert len(behavior.snapshot().searches) <= MAX_SEARCH_HISTORY


def test_snapshot_is_immutable_and_detached(behavior):
    """Test that later writes do not leak into an earlier snapshot."""
    behavior.record_view("1")
    snapshot = behavior.snapshot()

    behavior.record_view("1")
    behavior.record_search("late")

    assert snapshot.views_for("1") == 1
    assert snapshot.searches == ()
    assert isinstance(snapshot.views, MappingProxyType)
    with pytest.raises(TypeError):
        snapshot.views["1"] = 99


def test_record_purchase(behavior):
    behavior.record_purchase("3")
    behavior.record_purchase("1")

    assert behavior.snapshot().purchases == ("3", "1")


def test_clear_resets_everything(behavior):
    behavior.record_view("1")
    behavior.record_dwell("1", 10)
    behavior.record_search("x")
    behavior.record_purchase("1")

    behavior.clear()

    assert behavior.snapshot().is_empty


def test_empty_snapshot():
    assert BehaviorSnapshot().is_empty
    assert BehaviorStore().snapshot().is_empty
