"""Tests for RulesetRegistry lookup and ruleset authoring."""

import pytest

from ledger.logic.enums import Variant
from ledger.logic.exceptions import InvalidRulesetError, UnknownRulesetError
from ledger.logic.registry import RulesetRegistry
from ledger.logic.rulesets import PRESET_RULESETS, Ruleset


class TestLookup:
    def test_presets_registered(self):
        registry = RulesetRegistry()
        assert [r.id for r in registry.list_rulesets()] == [r.id for r in PRESET_RULESETS]
        assert "hongkong" in registry

    def test_unknown_id(self):
        with pytest.raises(UnknownRulesetError, match="unknown ruleset: nope") as exc_info:
            RulesetRegistry().get("nope")
        assert exc_info.value.ruleset_id == "nope"

    def test_filter_by_kind(self):
        custom = RulesetRegistry().list_rulesets(kind=Variant.CUSTOM)
        assert {r.id for r in custom} == {"custom", "hk-3fan-4", "hk-2fan-5", "hk-1fan-1", "hk-classic"}

    def test_empty_registry(self):
        registry = RulesetRegistry(presets=())
        assert registry.list_rulesets() == []


class TestRegister:
    def test_rejects_duplicate_id(self):
        registry = RulesetRegistry()
        clash = registry.get("hongkong").model_copy(update={"is_preset": False})
        with pytest.raises(InvalidRulesetError, match="already registered"):
            registry.register(clash)
        assert registry.get("hongkong").is_preset

    def test_rejects_invalid_ruleset(self):
        registry = RulesetRegistry()
        broken = Ruleset(id="broken", name="", kind=Variant.CUSTOM, min_unit=1, max_unit=1, unit_points={1: 1})
        with pytest.raises(InvalidRulesetError):
            registry.register(broken)
        assert "broken" not in registry


class TestDuplicate:
    def test_copy_is_editable_custom_ruleset(self):
        registry = RulesetRegistry()
        copy = registry.duplicate("hk-classic", "my-classic")
        source = registry.get("hk-classic")

        assert copy.id == "my-classic"
        assert copy.name == "Classic Hong Kong (copy)"
        assert not copy.is_preset
        assert copy.unit_points == source.unit_points
        assert registry.get("my-classic") == copy

    def test_explicit_name(self):
        copy = RulesetRegistry().duplicate("taiwan", "club-taiwan", name="Club Taiwan")
        assert copy.name == "Club Taiwan"
        assert copy.base_point_unit == 100


class TestSupersede:
    def test_new_ruleset_references_original(self):
        registry = RulesetRegistry()
        registry.duplicate("hk-1fan-1", "house")
        revised = registry.supersede("house", "house-v2", self_draw_multiplier=1.5)

        assert revised.supersedes == "house"
        assert revised.self_draw_multiplier == 1.5
        assert registry.get("house").self_draw_multiplier == 1.0

    def test_preset_can_be_superseded_without_mutation(self):
        registry = RulesetRegistry()
        revised = registry.supersede("taiwan", "taiwan-200", base_point_unit=200)

        assert revised.base_point_unit == 200
        assert not revised.is_preset
        assert registry.get("taiwan").base_point_unit == 100

    def test_changes_are_validated(self):
        registry = RulesetRegistry()
        with pytest.raises(InvalidRulesetError, match="self_draw_multiplier"):
            registry.supersede("hongkong", "hk-cheap", self_draw_multiplier=0.25)
        assert "hk-cheap" not in registry
