from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ledger.logic import session as engine
from ledger.logic.exceptions import DuplicateSessionError, SessionCapacityError, SessionNotFoundError
from ledger.logic.session import SessionState
from ledger.logic.settlement import calculate_settlement
from ledger.logic.stats import award_titles, compute_player_stats
from ledger.session.settings import LedgerSettings

if TYPE_CHECKING:
    from decimal import Decimal

    from ledger.logic.enums import StatTitle
    from ledger.logic.registry import RulesetRegistry
    from ledger.logic.session import ApplyResult, UndoResult
    from ledger.logic.types import PlayerStats, RoundOutcome, Settlement
    from shared.storage import SessionStorage

logger = structlog.get_logger()


class SessionManager:
    """
    Owns live sessions and serializes every mutation of a session.

    Each session has its own asyncio.Lock, so operations on different
    sessions never wait on each other. A snapshot is persisted before the
    in-memory state is replaced; if persistence fails the previous state
    stays current.
    """

    def __init__(
        self,
        registry: RulesetRegistry,
        storage: SessionStorage | None = None,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._registry = registry
        self._storage = storage
        self._settings = settings or LedgerSettings()
        self._sessions: dict[str, SessionState] = {}
        self._session_locks: dict[str, asyncio.Lock] = {}  # session_id -> Lock

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def get_session(self, session_id: str) -> SessionState:
        state = self._sessions.get(session_id)
        if state is None:
            raise SessionNotFoundError(session_id)
        return state

    def _get_session_lock(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        return lock

    def _reserve(self, session_id: str) -> asyncio.Lock:
        if session_id in self._session_locks:
            raise DuplicateSessionError(session_id)
        if len(self._session_locks) >= self._settings.max_sessions:
            raise SessionCapacityError(f"session limit of {self._settings.max_sessions} reached")
        lock = asyncio.Lock()
        self._session_locks[session_id] = lock
        return lock

    async def _persist(self, state: SessionState) -> None:
        if self._storage is None:
            return
        content = state.model_dump_json()
        await asyncio.to_thread(self._storage.save_snapshot, state.session_id, content)

    async def create_session(
        self,
        session_id: str,
        player_names: list[str],
        ruleset_id: str | None = None,
    ) -> SessionState:
        """Seat four players under a ruleset (the configured default when omitted)."""
        structlog.contextvars.bind_contextvars(session_id=session_id)
        ruleset = self._registry.get(ruleset_id or self._settings.default_ruleset_id)
        lock = self._reserve(session_id)
        try:
            async with lock:
                state = engine.create_session(session_id, player_names, ruleset)
                await self._persist(state)
                self._sessions[session_id] = state
        except BaseException:
            self._session_locks.pop(session_id, None)
            raise
        logger.info("session created", ruleset_id=ruleset.id, players=list(engine.final_totals(state)))
        return state

    async def apply_round(self, session_id: str, outcome: RoundOutcome) -> ApplyResult:
        structlog.contextvars.bind_contextvars(session_id=session_id)
        async with self._get_session_lock(session_id):
            result = engine.apply_round(self.get_session(session_id), outcome)
            await self._persist(result.state)
            self._sessions[session_id] = result.state
        logger.info("round applied", round_id=result.record.round_id, deltas=result.record.deltas)
        return result

    async def undo_round(self, session_id: str) -> UndoResult:
        structlog.contextvars.bind_contextvars(session_id=session_id)
        async with self._get_session_lock(session_id):
            result = engine.undo_round(self.get_session(session_id))
            await self._persist(result.state)
            self._sessions[session_id] = result.state
        logger.info("round undone", round_id=result.removed_round_id)
        return result

    async def complete_session(self, session_id: str) -> SessionState:
        structlog.contextvars.bind_contextvars(session_id=session_id)
        async with self._get_session_lock(session_id):
            current = self.get_session(session_id)
            state = engine.complete_session(current)
            if state is not current:
                await self._persist(state)
                self._sessions[session_id] = state
                logger.info("session completed", rounds=len(state.rounds))
        return state

    def settle(
        self,
        session_id: str,
        *,
        points_per_unit: Decimal | None = None,
        decimal_places: int | None = None,
    ) -> Settlement:
        """Settle current totals with the configured divisor and precision unless overridden."""
        state = self.get_session(session_id)
        return calculate_settlement(
            engine.final_totals(state),
            points_per_unit=points_per_unit if points_per_unit is not None else self._settings.points_per_unit,
            decimal_places=decimal_places if decimal_places is not None else self._settings.money_decimal_places,
        )

    def stats(self, session_id: str) -> tuple[list[PlayerStats], dict[StatTitle, PlayerStats]]:
        player_stats = compute_player_stats(self.get_session(session_id))
        return player_stats, award_titles(player_stats)

    async def restore_session(self, session_id: str) -> SessionState:
        """Load a persisted snapshot back into memory."""
        structlog.contextvars.bind_contextvars(session_id=session_id)
        if self._storage is None:
            raise SessionNotFoundError(session_id)
        lock = self._reserve(session_id)
        try:
            async with lock:
                content = await asyncio.to_thread(self._storage.load_snapshot, session_id)
                if content is None:
                    raise SessionNotFoundError(session_id)
                state = SessionState.model_validate_json(content)
                self._sessions[session_id] = state
        except BaseException:
            self._session_locks.pop(session_id, None)
            raise
        logger.info("session restored", rounds=len(state.rounds), status=state.status)
        return state

    async def remove_session(self, session_id: str, *, delete_snapshot: bool = False) -> None:
        """Drop a session from memory, optionally deleting its stored snapshot."""
        structlog.contextvars.bind_contextvars(session_id=session_id)
        async with self._get_session_lock(session_id):
            self._sessions.pop(session_id, None)
            if delete_snapshot and self._storage is not None:
                await asyncio.to_thread(self._storage.delete_snapshot, session_id)
        self._session_locks.pop(session_id, None)
        logger.info("session removed", snapshot_deleted=delete_snapshot)
