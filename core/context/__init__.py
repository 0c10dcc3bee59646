"""
Yardbook Context — Public API
==============================
Acting-user identity for stamping.
"""

from core.context.actor_context import (
    UNKNOWN_ACTOR_DISPLAY,
    ActorContext,
    IdentityProvider,
    StaticIdentityProvider,
    actor_label,
)

__all__ = [
    "ActorContext",
    "IdentityProvider",
    "StaticIdentityProvider",
    "UNKNOWN_ACTOR_DISPLAY",
    "actor_label",
]
