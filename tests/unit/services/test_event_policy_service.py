"""Unit tests for event_policy_service."""
import json

import pytest

from navaspurthi.models.event_policy import EXCEPTION, GROUP, SOLO
from navaspurthi.services import event_policy_service
from navaspurthi.services.event_policy_service import (
    DEFAULT_EVENT_POLICIES,
    build_policy_table,
    get_event_policies,
    list_events_by_class,
    load_policy_file,
)
from navaspurthi.utils.exceptions import EventPolicyError


@pytest.fixture
def table():
    return build_policy_table(DEFAULT_EVENT_POLICIES)


@pytest.fixture(autouse=True)
def clear_policy_cache():
    event_policy_service._clear_cache()
    yield
    event_policy_service._clear_cache()


class TestDefaultTable:
    """Test the built-in event table."""

    def test_cricket_is_exactly_eleven(self, table):
        assert table.get("Cricket").size_range == (11, 11)

    def test_exception_events(self, table):
        names = [p.name for p in table.by_class()[EXCEPTION]]
        assert names == ["Photography", "Videography", "Short Movie", "Reel Making"]

    def test_solo_events_are_single_participant(self, table):
        for policy in table.by_class()[SOLO]:
            assert policy.size_range == (1, 1)

    def test_group_events_need_at_least_two(self, table):
        for policy in table.by_class()[GROUP]:
            assert policy.min_size >= 2


class TestResolveName:
    """Test EventPolicyTable.resolve_name."""

    @pytest.mark.parametrize("submitted,expected", [
        ("Group Dance", "Group Dance"),
        ("group dance", "Group Dance"),
        ("GROUP-DANCE", "Group Dance"),
        ("  groupdance ", "Group Dance"),
        ("skit", "Skit Play"),
        ("Mehndi", "Mehendi"),
        ("clay modelling", "Clay Modeling"),
        ("Canvas Painting", "Canva Painting"),
    ])
    def test_variants_resolve(self, table, submitted, expected):
        assert table.resolve_name(submitted) == expected

    def test_unknown_returns_none(self, table):
        assert table.resolve_name("Underwater Chess") is None
        assert table.get("Underwater Chess") is None

    def test_empty_returns_none(self, table):
        assert table.resolve_name("") is None


class TestBuildPolicyTable:
    """Test build_policy_table validation."""

    def test_empty_config_raises(self):
        with pytest.raises(EventPolicyError):
            build_policy_table({})

    def test_invalid_range_raises(self):
        with pytest.raises(EventPolicyError, match="Cricket"):
            build_policy_table({"Cricket": {"class": GROUP, "min": 12, "max": 11}})

    def test_unknown_class_raises(self):
        with pytest.raises(EventPolicyError):
            build_policy_table({"Juggling": {"class": "duo"}})

    def test_alias_collision_raises(self):
        config = {
            "Skit Play": {"class": GROUP, "aliases": ["skit"]},
            "Skit": {"class": SOLO},
        }
        with pytest.raises(EventPolicyError, match="claimed by both"):
            build_policy_table(config)

    def test_defaults_per_class(self):
        table = build_policy_table({"Juggling": {"class": SOLO}, "Relay": {"class": GROUP}})
        assert table.get("Juggling").size_range == (1, 1)
        assert table.get("Relay").size_range == (2, 6)


class TestPolicyFile:
    """Test loading the policy table from EVENT_POLICY_FILE."""

    def test_load_policy_file(self, tmp_path):
        file_path = tmp_path / "events.json"
        file_path.write_text(json.dumps({"events": {"Cricket": {"class": "group", "min": 11, "max": 15}}}))

        table = load_policy_file(str(file_path))

        assert table.get("cricket").size_range == (11, 15)

    def test_missing_events_key_raises(self, tmp_path):
        file_path = tmp_path / "events.json"
        file_path.write_text(json.dumps({"Cricket": {}}))

        with pytest.raises(EventPolicyError, match="Missing 'events'"):
            load_policy_file(str(file_path))

    def test_get_event_policies_uses_configured_file(self, tmp_path, monkeypatch):
        file_path = tmp_path / "events.json"
        file_path.write_text(json.dumps({"events": {"Debate": {"class": "solo"}}}))
        monkeypatch.setattr(event_policy_service, "EVENT_POLICY_FILE", str(file_path))

        assert get_event_policies().names() == ["Debate"]

    def test_get_event_policies_is_cached(self):
        assert get_event_policies() is get_event_policies()


class TestListEventsByClass:
    def test_serializes_all_classes(self):
        grouped = list_events_by_class()

        assert set(grouped) == {SOLO, GROUP, EXCEPTION}
        cricket = next(e for e in grouped[GROUP] if e["name"] == "Cricket")
        assert cricket["class"] == GROUP
        assert cricket["min_size"] == 11
