"""Entity naming and relation resolution.

Turns entity types into canonical wire names (``CrmCompany`` -> ``crm_company``)
and relation selectors into canonical relation names. Selectors never rely on
runtime introspection of expressions: generated entity classes carry the
canonical name as the value of every relation field, plus a static
``__relations__`` table keyed by field path.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import keyword
import re
from typing import Any, TypeAlias

from shared_kernel.authorization.entities import Entity

RelationSelector: TypeAlias = str | Callable[[Any], Any] | Sequence[str | int]
"""A plain relation name, a field constant, a callable over the entity class,
a dotted field path (``"Perform.edit"``) or a path tuple (``("Perform", 1)``)."""

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_SEPARATORS = re.compile(r"[-\s.]+")


class RelationSelectorError(ValueError):
    """Raised when a relation selector does not end at a named relation."""


def canonical_name(name: str) -> str:
    """Convert a declared name into canonical lower-snake form.

    Example:
        >>> canonical_name("CrmCompany")
        "crm_company"
        >>> canonical_name("crm_company")
        "crm_company"
    """
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    text = _WORD_BOUNDARY.sub(r"\1_\2", text)
    return _SEPARATORS.sub("_", text).lower()


def field_name(relation: str) -> str:
    """Python attribute name used by generated code for a relation."""
    name = canonical_name(relation)
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return f"{name}_"
    return name


def entity_name(entity: type[Entity] | str) -> str:
    """Canonical wire name of an entity type or raw type name."""
    if isinstance(entity, str):
        return canonical_name(entity)
    declared = getattr(entity, "__entity_name__", "")
    return declared or canonical_name(entity.__name__)


def qualify(entity: type[Entity] | str, entity_id: str | None = None) -> str:
    """Build a qualified entity reference.

    Returns ``type:id`` when an id is given, otherwise the bare type token
    used by type-scoped queries.

    Example:
        >>> qualify("CrmCompany", "acme")
        "crm_company:acme"
        >>> qualify("CrmCompany")
        "crm_company"
    """
    name = entity_name(entity)
    if entity_id is None:
        return name
    return f"{name}:{entity_id}"


def resolve_relation(
    selector: RelationSelector,
    entity: type[Entity] | None = None,
) -> str:
    """Resolve a relation selector to its canonical relation name.

    Nested selectors always resolve to their innermost named member. Positional
    steps into a grouped field use the group's declared element names.

    Args:
        selector: The relation selector
        entity: The entity class the selector applies to; required for
            callables, paths and positional steps

    Raises:
        RelationSelectorError: If the selector does not end at a named relation
    """
    if isinstance(selector, str):
        relations = getattr(entity, "__relations__", None) or {}
        if selector in relations:
            return relations[selector]
        if "." in selector:
            return _walk(entity, tuple(selector.split(".")), selector)
        if not selector:
            raise RelationSelectorError("Empty relation selector")
        # A name of a member of the entity must end at a relation, not a group.
        if entity is not None and not selector.startswith("_"):
            if any(hasattr(entity, c) for c in (selector, field_name(selector))):
                return _walk(entity, (selector,), selector)
        return canonical_name(selector)

    if hasattr(selector, "_fields"):
        raise RelationSelectorError(
            f"Selector {selector!r} targets a relation group, not a relation"
        )

    if callable(selector):
        if entity is None:
            raise RelationSelectorError(
                "A callable relation selector needs the entity type it applies to"
            )
        return _terminal(selector(entity), selector)

    if isinstance(selector, Sequence):
        return _walk(entity, tuple(selector), selector)

    raise RelationSelectorError(f"Unsupported relation selector: {selector!r}")


def _walk(entity: type[Entity] | None, path: tuple[str | int, ...], selector: Any) -> str:
    if not path:
        raise RelationSelectorError("Empty relation selector")
    if entity is None:
        if len(path) == 1 and isinstance(path[0], str):
            return canonical_name(path[0])
        raise RelationSelectorError(
            f"Selector {selector!r} needs the entity type it applies to"
        )

    member: Any = entity
    for step in path:
        member = _step(member, step, selector)
    return _terminal(member, selector)


def _step(member: Any, step: str | int, selector: Any) -> Any:
    fields: tuple[str, ...] | None = getattr(member, "_fields", None)

    if isinstance(step, int):
        if fields is None or not -len(fields) <= step < len(fields):
            raise RelationSelectorError(
                f"Position {step} in {selector!r} does not name a grouped relation"
            )
        step = fields[step]

    if isinstance(member, type) and fields is not None:
        # A NamedTuple class rather than an instance: fall back to its defaults.
        defaults = member._field_defaults
        if step in defaults:
            return defaults[step]
        if step in fields:
            return canonical_name(step.rstrip("_"))
        raise RelationSelectorError(f"Unknown member {step!r} in {selector!r}")

    for candidate in (step, field_name(step)):
        try:
            return getattr(member, candidate)
        except AttributeError:
            continue
    raise RelationSelectorError(f"Unknown member {step!r} in {selector!r}")


def _terminal(value: Any, selector: Any) -> str:
    if isinstance(value, str) and not hasattr(value, "_fields") and value:
        return value
    raise RelationSelectorError(
        f"Selector {selector!r} does not terminate at a named relation"
    )
