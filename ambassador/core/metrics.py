"""Prometheus metrics for the ambassador program.

All metrics are defined here so the inventory lives in one place.  Services
import the ones they own and increment them at the point of action, after
the unit of work that justified the increment has committed.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

APPLICATIONS_SUBMITTED = Counter(
    "ambassador_applications_submitted_total",
    "Applications recorded, by submission path",
    ["path"],  # "issuance" or "manual"
)

BADGES_MINTED = Counter(
    "ambassador_badges_minted_total",
    "Badges minted, by tier",
    ["tier"],  # "standard" or "elite"
)

BADGES_BURNED = Counter(
    "ambassador_badges_burned_total",
    "Badges burned, by the path that burned them",
    ["reason"],  # owner|orchestrator|self|sweep
)

ADMIN_ACTIONS = Counter(
    "ambassador_admin_actions_total",
    "Privileged ambassador mutations",
    ["action"],  # revoke|extend|reschedule
)

SWEEP_DEACTIVATIONS = Counter(
    "ambassador_sweep_deactivations_total",
    "Entries deactivated by maintenance sweeps",
    ["sweep"],  # "registry" or "issuer"
)

BUSINESS_REJECTIONS = Counter(
    "ambassador_business_rejections_total",
    "Operations rejected with a business error",
    ["code"],
)

NOTIFICATION_PUBLISH_FAILURES = Counter(
    "ambassador_notification_publish_failures_total",
    "Notifications dropped because the publisher raised",
)

OUTBOX_PENDING = Gauge(
    "ambassador_outbox_pending",
    "Committed notifications waiting to be published",
)
