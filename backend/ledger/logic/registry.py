"""Ruleset registry: built-in presets plus user-authored rulesets, looked up by id."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from ledger.logic.enums import Variant
from ledger.logic.exceptions import InvalidRulesetError, UnknownRulesetError
from ledger.logic.rulesets import PRESET_RULESETS, Ruleset, ensure_valid_ruleset

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = structlog.get_logger()


class RulesetRegistry:
    """
    In-memory catalogue of rulesets.

    Presets are registered at construction and can never be replaced.
    Editing a ruleset means registering a new one via ``supersede``; the
    superseded value stays available so sessions that started with it keep
    a consistent reference.
    """

    def __init__(self, presets: Iterable[Ruleset] = PRESET_RULESETS) -> None:
        self._rulesets: dict[str, Ruleset] = {}
        for preset in presets:
            self.register(preset)

    def __contains__(self, ruleset_id: object) -> bool:
        return ruleset_id in self._rulesets

    def get(self, ruleset_id: str) -> Ruleset:
        ruleset = self._rulesets.get(ruleset_id)
        if ruleset is None:
            raise UnknownRulesetError(ruleset_id)
        return ruleset

    def list_rulesets(self, *, kind: Variant | None = None) -> list[Ruleset]:
        """Return registered rulesets in registration order, optionally filtered by variant."""
        return [r for r in self._rulesets.values() if kind is None or r.kind == kind]

    def register(self, ruleset: Ruleset) -> Ruleset:
        """Validate and add a ruleset. Raises InvalidRulesetError on violations or id clash."""
        if ruleset.id in self._rulesets:
            raise InvalidRulesetError([f"ruleset id '{ruleset.id}' is already registered"])
        ensure_valid_ruleset(ruleset)
        self._rulesets[ruleset.id] = ruleset
        logger.debug("ruleset registered", ruleset_id=ruleset.id, kind=ruleset.kind)
        return ruleset

    def duplicate(self, source_id: str, new_id: str, name: str | None = None) -> Ruleset:
        """Register an editable (non-preset) copy of an existing ruleset."""
        source = self.get(source_id)
        copy = source.model_copy(
            update={
                "id": new_id,
                "name": name if name is not None else f"{source.name} (copy)",
                "is_preset": False,
                "supersedes": None,
                "unit_points": dict(source.unit_points),
            },
        )
        return self.register(copy)

    def supersede(self, ruleset_id: str, new_id: str, **changes: Any) -> Ruleset:  # noqa: ANN401
        """
        Register a revised ruleset that supersedes an existing one.

        The original is left untouched. The replacement is validated from
        scratch, so ``changes`` go through the model's own field validation.
        """
        original = self.get(ruleset_id)
        data = original.model_dump()
        data.update(changes)
        data.update({"id": new_id, "is_preset": False, "supersedes": original.id})
        revised = Ruleset.model_validate(data)
        return self.register(revised)
