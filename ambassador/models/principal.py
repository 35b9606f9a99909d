from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated JWT.

    Only the identity is trusted.  What the identity may do is resolved by
    AccessControl against the role table, not read from token claims.
    """

    identity: str
