"""Capability tags implemented by generated entity types.

Every generated entity class derives from :class:`Resource`, :class:`Accessor`
or both. The builders are parameterized over these capabilities: a grant needs
an ``Accessor`` on the subject side and a ``Resource`` on the object side.

Generated classes carry two static tables:

- ``__entity_name__``: the canonical lower-snake type name used on the wire
- ``__relations__``: field path -> canonical relation name
  (e.g. ``{"editor": "editor", "Perform.edit": "edit"}``)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar


class Entity:
    """Base for generated entity types. Never instantiated."""

    __entity_name__: ClassVar[str] = ""
    __relations__: ClassVar[Mapping[str, str]] = {}


class Resource(Entity):
    """An entity that can be the object of a relation."""


class Accessor(Entity):
    """An entity that can be the subject of a relation (user, group, team)."""


def require_capability(entity: type, capability: type[Entity], role: str) -> None:
    """Ensure an entity class implements the capability its role needs.

    Raises:
        TypeError: If ``entity`` is not a subclass of ``capability``
    """
    if not (isinstance(entity, type) and issubclass(entity, capability)):
        name = getattr(entity, "__name__", repr(entity))
        raise TypeError(
            f"{role} type {name} must implement {capability.__name__}"
        )
