"""
Yardbook Context - ActorContext
===============================
Immutable identity of the acting user, supplied by the identity
collaborator. The core only reads it (e.g. for received_by stamping).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

VALID_ACTOR_TYPES = frozenset({"HUMAN", "SYSTEM"})

UNKNOWN_ACTOR_DISPLAY = "Unknown"


@dataclass(frozen=True)
class ActorContext:
    """
    Canonical actor identity context.

    display_name is what gets stamped on documents; it falls back
    to actor_id when the identity provider supplies no name.
    """

    actor_type: str
    actor_id: str
    display_name: str = ""
    actor_roles: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.actor_type not in VALID_ACTOR_TYPES:
            raise ValueError(
                f"actor_type '{self.actor_type}' not valid. "
                f"Must be one of: {sorted(VALID_ACTOR_TYPES)}"
            )

        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        if not isinstance(self.actor_roles, tuple):
            raise ValueError("actor_roles must be a tuple.")

    @property
    def label(self) -> str:
        return self.display_name or self.actor_id


def actor_label(actor: Optional[ActorContext]) -> str:
    """Display identity for stamping, 'Unknown' when there is no actor."""
    if actor is None:
        return UNKNOWN_ACTOR_DISPLAY
    return actor.label


# ══════════════════════════════════════════════════════════════
# IDENTITY COLLABORATOR
# ══════════════════════════════════════════════════════════════

class IdentityProvider(Protocol):
    """Read-only source of the current actor."""

    def current_actor(self) -> Optional[ActorContext]:
        ...  # pragma: no cover


class StaticIdentityProvider:
    """Fixed identity (tests, scripts, single-user installs)."""

    def __init__(self, actor: Optional[ActorContext] = None) -> None:
        self._actor = actor

    def current_actor(self) -> Optional[ActorContext]:
        return self._actor
