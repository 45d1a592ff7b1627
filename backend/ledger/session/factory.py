"""Wires settings, logging, the ruleset registry and snapshot storage into a SessionManager."""

import structlog

from ledger.logic.registry import RulesetRegistry
from ledger.session.manager import SessionManager
from ledger.session.settings import LedgerSettings
from shared.logging import setup_logging
from shared.storage import LocalSessionStorage

logger = structlog.get_logger()


def create_session_manager(
    settings: LedgerSettings | None = None,
    registry: RulesetRegistry | None = None,
) -> SessionManager:
    if settings is None:  # pragma: no cover
        settings = LedgerSettings()

    if registry is None:
        registry = RulesetRegistry()
    # fail at startup, not on the first session
    registry.get(settings.default_ruleset_id)

    storage = LocalSessionStorage(settings.snapshot_dir)
    manager = SessionManager(registry, storage=storage, settings=settings)
    logger.info("ledger ready", default_ruleset_id=settings.default_ruleset_id, snapshot_dir=settings.snapshot_dir)
    return manager


def get_session_manager() -> SessionManager:  # pragma: no cover
    """Production entry point: configure logging from the environment, then build the manager."""
    settings = LedgerSettings()
    log_path = setup_logging(log_dir=settings.log_dir)
    logger.info("logging configured", log_file=str(log_path) if log_path else None)
    return create_session_manager(settings=settings)
