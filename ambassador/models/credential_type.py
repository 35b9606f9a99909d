from __future__ import annotations

import enum


class Tier(str, enum.Enum):
    STANDARD = "standard"
    ELITE = "elite"


class Category(str, enum.Enum):
    COMMUNITY = "community"
    CONTENT = "content"
    DEVELOPER = "developer"
    EVENTS = "events"


class CredentialType(str, enum.Enum):
    """The eight badge types: every category in a standard and an elite tier.

    Values are ``"<category>:<tier>"`` so they read well in logs and JSON.
    """

    COMMUNITY_STANDARD = "community:standard"
    COMMUNITY_ELITE = "community:elite"
    CONTENT_STANDARD = "content:standard"
    CONTENT_ELITE = "content:elite"
    DEVELOPER_STANDARD = "developer:standard"
    DEVELOPER_ELITE = "developer:elite"
    EVENTS_STANDARD = "events:standard"
    EVENTS_ELITE = "events:elite"


ELITE_TYPES: frozenset[CredentialType] = frozenset(
    {
        CredentialType.COMMUNITY_ELITE,
        CredentialType.CONTENT_ELITE,
        CredentialType.DEVELOPER_ELITE,
        CredentialType.EVENTS_ELITE,
    }
)

# Type recorded by the manual submission path, which never mints.
DEFAULT_CREDENTIAL_TYPE = CredentialType.COMMUNITY_STANDARD


def tier_of(credential_type: CredentialType) -> Tier:
    return Tier.ELITE if credential_type in ELITE_TYPES else Tier.STANDARD


def category_of(credential_type: CredentialType) -> Category:
    return Category(credential_type.value.split(":", 1)[0])


def is_elite(credential_type: CredentialType) -> bool:
    return tier_of(credential_type) is Tier.ELITE
