"""Wires the program's components around one set of stores.

Without DATABASE_URL the stores are in-memory and each program instance is
an isolated ledger, which is what tests rely on to start from a clean state.
With it, applications, ambassadors, badges, admins and counters live in SQL
tables and every unit of work is one database transaction.  Fees, the
duration and the treasuries stay in process either way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine

from ambassador.core.config import Settings
from ambassador.db.engine import create_ledger_engine, session_factory
from ambassador.repos.ambassador_repo import AmbassadorRepo, InMemoryAmbassadorRepo
from ambassador.repos.application_repo import ApplicationRepo, InMemoryApplicationRepo
from ambassador.repos.badge_repo import BadgeRepo, InMemoryBadgeRepo
from ambassador.repos.counters import (
    CounterRepo,
    IdSequence,
    InMemoryCounterRepo,
    Sequence,
)
from ambassador.repos.pg_ambassador_repo import PgAmbassadorRepo
from ambassador.repos.pg_application_repo import PgApplicationRepo
from ambassador.repos.pg_badge_repo import PgBadgeRepo
from ambassador.repos.pg_counter_repo import PgCounterRepo, PgSequence
from ambassador.repos.pg_role_repo import PgRoleRepo
from ambassador.repos.role_repo import InMemoryRoleRepo, RoleRepo
from ambassador.services.access_control import AccessControl
from ambassador.services.ambassador_registry import AmbassadorRegistry
from ambassador.services.application_ledger import ApplicationLedger
from ambassador.services.badge_issuer import BadgeIssuer
from ambassador.services.clock import Clock, utc_now
from ambassador.services.expiry_maintenance import ExpiryMaintenance
from ambassador.services.fee_policy import FeeConfig, FeePolicy
from ambassador.services.outbox import Outbox
from ambassador.services.treasury import Treasury
from ambassador.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class AmbassadorProgram:
    access: AccessControl
    fees: FeePolicy
    ledger: ApplicationLedger
    issuer: BadgeIssuer
    registry: AmbassadorRegistry
    maintenance: ExpiryMaintenance
    outbox: Outbox
    ambassadors: AmbassadorRepo
    badges: BadgeRepo
    applications: ApplicationRepo
    roles: RoleRepo
    engine: Engine | None = None


@dataclass
class _Stores:
    uow: UnitOfWork
    counters: CounterRepo
    roles: RoleRepo
    applications: ApplicationRepo
    application_ids: IdSequence
    badges: BadgeRepo
    token_ids: IdSequence
    ambassadors: AmbassadorRepo
    engine: Engine | None = None


def _in_memory_stores(settings: Settings, outbox: Outbox) -> _Stores:
    return _Stores(
        uow=UnitOfWork(outbox),
        counters=InMemoryCounterRepo(),
        roles=InMemoryRoleRepo(owner=settings.owner_id),
        applications=InMemoryApplicationRepo(),
        application_ids=Sequence(),
        badges=InMemoryBadgeRepo(),
        token_ids=Sequence(),
        ambassadors=InMemoryAmbassadorRepo(),
    )


def _sql_stores(settings: Settings, outbox: Outbox, url: str) -> _Stores:
    engine = create_ledger_engine(url, echo=settings.is_dev)
    sessions = session_factory(engine)
    logger.info("Ledger stores backed by %s", engine.url.render_as_string())
    return _Stores(
        uow=UnitOfWork(outbox, sessions=sessions),
        counters=PgCounterRepo(sessions),
        roles=PgRoleRepo(sessions, owner=settings.owner_id),
        applications=PgApplicationRepo(sessions),
        application_ids=PgSequence(sessions, "application"),
        badges=PgBadgeRepo(sessions),
        token_ids=PgSequence(sessions, "token"),
        ambassadors=PgAmbassadorRepo(sessions),
        engine=engine,
    )


def build_program(settings: Settings, clock: Clock = utc_now) -> AmbassadorProgram:
    outbox = Outbox()
    if settings.database_url:
        stores = _sql_stores(settings, outbox, settings.database_url)
    else:
        stores = _in_memory_stores(settings, outbox)
    uow = stores.uow

    access = AccessControl(
        stores.roles,
        orchestrator=settings.registry_id,
        issuer_service=settings.issuer_id,
    )
    fees = FeePolicy(
        FeeConfig(
            elite_fee=settings.elite_fee,
            submission_fee=settings.submission_fee,
        )
    )

    ledger = ApplicationLedger(
        applications=stores.applications,
        counters=stores.counters,
        application_ids=stores.application_ids,
        uow=uow,
        clock=clock,
    )

    issuer = BadgeIssuer(
        badges=stores.badges,
        counters=stores.counters,
        token_ids=stores.token_ids,
        fees=fees,
        access=access,
        treasury=Treasury("issuer"),
        uow=uow,
        clock=clock,
        max_batch_size=settings.max_batch_size,
    )

    registry = AmbassadorRegistry(
        ambassadors=stores.ambassadors,
        ledger=ledger,
        issuer=issuer,
        fees=fees,
        access=access,
        treasury=Treasury("registry"),
        uow=uow,
        clock=clock,
        duration_seconds=settings.duration_seconds,
    )

    maintenance = ExpiryMaintenance(
        registry=registry,
        uow=uow,
        max_batch_size=settings.max_batch_size,
    )

    return AmbassadorProgram(
        access=access,
        fees=fees,
        ledger=ledger,
        issuer=issuer,
        registry=registry,
        maintenance=maintenance,
        outbox=outbox,
        ambassadors=stores.ambassadors,
        badges=stores.badges,
        applications=stores.applications,
        roles=stores.roles,
        engine=stores.engine,
    )
