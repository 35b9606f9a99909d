from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import ambassador` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ambassador.api.dependencies import get_program, get_publisher  # noqa: E402
from ambassador.core.config import Settings  # noqa: E402
from ambassador.main import app  # noqa: E402
from ambassador.models.ambassador import AmbassadorInfo  # noqa: E402
from ambassador.services import token_service  # noqa: E402
from ambassador.services.outbox import InMemoryEventPublisher  # noqa: E402
from ambassador.services.program import AmbassadorProgram, build_program  # noqa: E402

DAY = 86_400
START = 1_760_000_000

OWNER = "owner"
ADMIN = "admin-alice"
REGISTRY = "ambassador-registry"
ISSUER = "badge-issuer"


class FakeClock:
    """Deterministic epoch-seconds clock the tests move by hand."""

    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env="test",
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
    )


@pytest.fixture
def program(settings: Settings, clock: FakeClock) -> AmbassadorProgram:
    p = build_program(settings, clock)
    p.access.set_admin(ADMIN, True)
    return p


@pytest.fixture
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def client(
    program: AmbassadorProgram, publisher: InMemoryEventPublisher
) -> Iterator[TestClient]:
    app.dependency_overrides[get_program] = lambda: program
    app.dependency_overrides[get_publisher] = lambda: publisher
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(identity: str) -> dict[str, str]:
    """Bearer header for a caller identity."""
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=identity)}"}


def event_names(program: AmbassadorProgram) -> list[str]:
    return [n.name for n in program.outbox.peek()]


def assert_stores_consistent(program: AmbassadorProgram) -> None:
    """Active records point at live badges with the same expiration, and
    no holder maps to more than one live badge."""
    live = program.badges.live_holders()
    assert len(set(live.values())) == len(live)
    for info in program.ambassadors.list_active():
        if info.credential_token_id > 0:
            badge = program.badges.get(info.credential_token_id)
            assert badge is not None and badge.exists
            assert badge.holder == info.identity
            assert badge.expires_at == info.expires_at


def active_record(program: AmbassadorProgram, identity: str) -> AmbassadorInfo:
    info = program.registry.get_ambassador_info(identity)
    assert info is not None
    return info
