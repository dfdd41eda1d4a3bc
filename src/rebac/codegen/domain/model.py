"""Schema model for the entity generator.

These are immutable data structures describing a parsed authorization
schema: its types, their relations, and the parameterized conditions that
can be attached to relationships.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from shared_kernel.authorization.conditions import ParameterKind

INIT_SUFFIX = "_init"
PROVIDED_SUFFIX = "_provided"


class RelationKind(str, Enum):
    """How a relation gets its tuples."""

    DIRECT = "direct"
    COMPUTED = "computed"


class ParameterPhase(str, Enum):
    """When a condition parameter is bound."""

    INIT = "init"
    PROVIDED = "provided"


@dataclass(frozen=True)
class Parameter:
    """A condition parameter.

    The name carries a phase suffix: ``_init`` parameters are bound when the
    relationship is written, ``_provided`` parameters when it is checked.
    Names with neither suffix are bound at write time.
    """

    name: str
    kind: ParameterKind = ParameterKind.STRING

    @property
    def phase(self) -> ParameterPhase:
        if self.name.endswith(PROVIDED_SUFFIX):
            return ParameterPhase.PROVIDED
        return ParameterPhase.INIT

    @property
    def base_name(self) -> str:
        """The name with its phase suffix removed."""
        for suffix in (INIT_SUFFIX, PROVIDED_SUFFIX):
            if self.name.endswith(suffix) and len(self.name) > len(suffix):
                return self.name[: -len(suffix)]
        return self.name


@dataclass(frozen=True)
class Condition:
    name: str
    parameters: tuple[Parameter, ...] = ()

    @property
    def init_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.phase is ParameterPhase.INIT)

    @property
    def provided_parameters(self) -> tuple[Parameter, ...]:
        return tuple(
            p for p in self.parameters if p.phase is ParameterPhase.PROVIDED
        )


@dataclass(frozen=True)
class TypeDefinition:
    """A schema type and its relations in schema order.

    Relation names are canonical lower-snake names, unique within the type.
    """

    name: str
    relations: dict[str, RelationKind] = field(default_factory=dict)

    @property
    def direct_relations(self) -> list[str]:
        return [n for n, k in self.relations.items() if k is RelationKind.DIRECT]

    @property
    def computed_relations(self) -> list[str]:
        return [n for n, k in self.relations.items() if k is RelationKind.COMPUTED]


@dataclass(frozen=True)
class AuthorizationModel:
    type_definitions: tuple[TypeDefinition, ...] = ()
    conditions: dict[str, Condition] = field(default_factory=dict)
