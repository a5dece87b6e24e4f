"""
Congress DAO — Orchestrator.

Central entrypoint that:
1. Configures structured logging
2. Initializes the National Record journal
3. Builds the Congress facade
4. Serves the HTTP API

This is the entrypoint for the service container.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import structlog
import uvicorn

from congress_dao.config import CongressSettings, settings
from congress_dao.governance.clock import Clock, SystemClock
from congress_dao.governance.congress import Congress

logger = logging.getLogger(__name__)


def configure_logging(config: CongressSettings = settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(level=config.log_level, format="%(message)s", stream=sys.stdout)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer()
                if config.log_format != "json"
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_congress(config: CongressSettings = settings, clock: Clock | None = None) -> Congress:
    """Assemble a Congress from settings, with a journal when enabled."""
    clock = clock or SystemClock()
    ledger = None
    if config.journal_enabled:
        from congress_dao.ledger.service import LedgerService

        ledger = LedgerService(config.database_url_sync)
        ledger.initialize(logical_time=clock.now())

    return Congress(
        owner=config.administrator_principal,
        clock=clock,
        ledger_service=ledger,
        house_capacity=config.house_capacity,
        senate_capacity=config.senate_capacity,
    )


async def main() -> None:
    """Build the services and serve the API until interrupted."""
    configure_logging()
    log = structlog.get_logger()

    log.info(
        "congress_dao.orchestrator.starting",
        administrator=settings.administrator_principal,
        journal_enabled=settings.journal_enabled,
        house_capacity=settings.house_capacity,
        senate_capacity=settings.senate_capacity,
    )

    congress = build_congress(settings)
    if congress.ledger_service is not None:
        is_valid, entries, msg = congress.ledger_service.verify_chain()
        if not is_valid:
            log.critical("congress_dao.orchestrator.integrity_failure", message=msg, entries=entries)
            sys.exit(1)
        log.info("congress_dao.orchestrator.ledger_ready", entries=entries)

    from congress_dao.dashboard.app import app, state as dashboard_state

    dashboard_state.congress = congress
    dashboard_state.ledger_service = congress.ledger_service

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.dashboard_host,
            port=settings.dashboard_port,
            log_config=None,
        )
    )
    log.info(
        "congress_dao.orchestrator.running",
        host=settings.dashboard_host,
        port=settings.dashboard_port,
    )

    try:
        await server.serve()
    except KeyboardInterrupt:
        log.info("congress_dao.orchestrator.shutdown")
    except Exception as e:
        log.exception("congress_dao.orchestrator.fatal_error", error=str(e))
        sys.exit(1)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
