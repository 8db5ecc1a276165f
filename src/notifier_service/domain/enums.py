"""Domain enums."""
from __future__ import annotations

from enum import Enum


class DeliveryStatus(str, Enum):
    """Outcome of a single delivery attempt."""

    SUCCESS = "success"
    FAILED = "failed"


class WebhookEventType(str, Enum):
    """Event types raised by the admin console's own flows."""

    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    PARTNER_CREATED = "partner.created"
    PARTNER_UPDATED = "partner.updated"
    PARTNER_DELETED = "partner.deleted"
    INTEGRATION_KEY_CREATED = "integration.key.created"
    INTEGRATION_KEY_UPDATED = "integration.key.updated"
    INTEGRATION_KEY_DELETED = "integration.key.deleted"


# Offered when the tenant's catalog cannot be read
DEFAULT_EVENT_TYPES: tuple[str, ...] = tuple(event.value for event in WebhookEventType)
