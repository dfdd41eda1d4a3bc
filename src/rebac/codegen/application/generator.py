"""Entity generator.

Renders an :class:`~codegen.domain.model.AuthorizationModel` as a Python
module of entity classes and condition helpers. Every generated class
carries its canonical wire name and a static relation table, so the
permissions builders can resolve relation selectors without inspecting
expressions at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import keyword

from codegen.application.observability import DefaultGeneratorProbe, GeneratorProbe
from codegen.domain.classification import AccessorClassification
from codegen.domain.model import AuthorizationModel, Condition, Parameter, TypeDefinition
from codegen.ports.exceptions import SchemaError
from shared_kernel.authorization.conditions import ParameterKind
from shared_kernel.authorization.naming import canonical_name, field_name

PERFORM_FIELD = "Perform"

_PYTHON_TYPES: dict[ParameterKind, str] = {
    ParameterKind.STRING: "str",
    ParameterKind.INT: "int",
    ParameterKind.BOOL: "bool",
    ParameterKind.TIMESTAMP: "datetime",
    ParameterKind.DURATION: "timedelta",
}

# Names the generated module imports or defines itself.
_RESERVED_NAMES = frozenset(
    {
        "Accessor",
        "Any",
        "CheckContexts",
        "ClassVar",
        "ConditionInstance",
        "Conditions",
        "Mapping",
        "NamedTuple",
        "ParameterKind",
        "Resource",
    }
)

_INDENT = "    "


@dataclass(frozen=True)
class GeneratedEntity:
    """Summary of one generated entity class."""

    class_name: str
    entity_name: str
    is_resource: bool
    is_accessor: bool


@dataclass(frozen=True)
class GeneratedModule:
    """Rendered module source plus what it contains."""

    source: str
    entities: tuple[GeneratedEntity, ...]
    condition_count: int

    @property
    def resource_count(self) -> int:
        return sum(1 for e in self.entities if e.is_resource)

    @property
    def accessor_count(self) -> int:
        return sum(1 for e in self.entities if e.is_accessor)


def class_name(type_name: str) -> str:
    """Python class name for a schema type (``crm_company`` -> ``CrmCompany``)."""
    name = "".join(part.capitalize() for part in canonical_name(type_name).split("_"))
    if keyword.iskeyword(name) or name in _RESERVED_NAMES:
        name = f"{name}_"
    if not name.isidentifier():
        raise SchemaError(f"Type name {type_name!r} is not a valid class name")
    return name


def _literal(value: str) -> str:
    return json.dumps(value)


class EntityGenerator:
    """Generates entity classes and condition helpers from a schema model.

    Args:
        classification: Accessor classification table; defaults to the
            standard suffix list
        probe: Optional domain probe for observability
    """

    def __init__(
        self,
        classification: AccessorClassification | None = None,
        probe: GeneratorProbe | None = None,
    ):
        self._classification = classification or AccessorClassification()
        self._probe = probe or DefaultGeneratorProbe()

    def generate(
        self,
        model: AuthorizationModel,
        source_name: str = "authorization schema",
    ) -> GeneratedModule:
        """Render the Python module for ``model``.

        Raises:
            SchemaError: If two types map onto the same generated name
        """
        blocks: list[str] = []
        entities: list[GeneratedEntity] = []
        defined: set[str] = set()

        for type_definition in model.type_definitions:
            entity, rendered = self._render_type(type_definition)
            names = [entity.class_name]
            if len(type_definition.computed_relations) > 1:
                names.append(f"{entity.class_name}{PERFORM_FIELD}")
            for name in names:
                if name in defined:
                    raise SchemaError(
                        f"Type {type_definition.name!r} generates a duplicate name {name!r}"
                    )
                defined.add(name)
            entities.append(entity)
            blocks.extend(rendered)

        conditions = list(model.conditions.values())
        if conditions:
            blocks.append(self._render_conditions(conditions))
            blocks.append(self._render_check_contexts(conditions))

        source = "\n\n\n".join([self._render_header(model, source_name), *blocks]) + "\n"
        module = GeneratedModule(
            source=source,
            entities=tuple(entities),
            condition_count=len(conditions),
        )
        self._probe.entities_generated(
            resource_count=module.resource_count,
            accessor_count=module.accessor_count,
            condition_count=module.condition_count,
        )
        return module

    def _render_header(self, model: AuthorizationModel, source_name: str) -> str:
        has_relations = any(t.relations for t in model.type_definitions)
        has_groups = any(
            len(t.computed_relations) > 1 for t in model.type_definitions
        )
        kinds = {
            p.kind for c in model.conditions.values() for p in c.parameters
        }

        typing_names = []
        if model.conditions:
            typing_names.append("Any")
        if model.type_definitions:
            typing_names.append("ClassVar")
        if has_groups:
            typing_names.append("NamedTuple")
        datetime_names = [
            name
            for kind, name in (
                (ParameterKind.TIMESTAMP, "datetime"),
                (ParameterKind.DURATION, "timedelta"),
            )
            if kind in kinds
        ]
        capabilities = ["Accessor"]
        if has_relations:
            capabilities.append("Resource")

        lines = [
            f"# This file is auto-generated from {source_name}. Do not edit.",
            '"""Entity types and condition helpers for the authorization model."""',
            "",
            "from __future__ import annotations",
            "",
        ]
        if has_relations:
            lines.append("from collections.abc import Mapping")
        if datetime_names:
            lines.append(f"from datetime import {', '.join(datetime_names)}")
        if typing_names:
            lines.append(f"from typing import {', '.join(typing_names)}")
        lines.append("")
        if model.conditions:
            lines.append(
                "from shared_kernel.authorization.conditions import "
                "ParameterKind, serialize_parameter"
            )
        lines.append(
            f"from shared_kernel.authorization.entities import {', '.join(capabilities)}"
        )
        if model.conditions:
            lines.append(
                "from shared_kernel.authorization.types import ConditionInstance"
            )
        return "\n".join(lines)

    def _render_type(
        self, type_definition: TypeDefinition
    ) -> tuple[GeneratedEntity, list[str]]:
        name = class_name(type_definition.name)
        wire_name = canonical_name(type_definition.name)

        if not type_definition.relations:
            entity = GeneratedEntity(name, wire_name, is_resource=False, is_accessor=True)
            body = [f"__entity_name__: ClassVar[str] = {_literal(wire_name)}"]
            return entity, [self._render_class(name, ["Accessor"], body)]

        is_accessor = self._classification.is_accessor(type_definition.name)
        bases = ["Resource", "Accessor"] if is_accessor else ["Resource"]
        entity = GeneratedEntity(name, wire_name, is_resource=True, is_accessor=is_accessor)

        blocks: list[str] = []
        table: dict[str, str] = {}
        fields: list[str] = []

        for relation in type_definition.direct_relations:
            attribute = field_name(relation)
            table[attribute] = relation
            fields.append(f"{attribute}: ClassVar[str] = {_literal(relation)}")

        computed = type_definition.computed_relations
        if len(computed) == 1:
            table[PERFORM_FIELD] = computed[0]
            fields.append(f"{PERFORM_FIELD}: ClassVar[str] = {_literal(computed[0])}")
        elif computed:
            group = f"{name}{PERFORM_FIELD}"
            elements = []
            for relation in computed:
                attribute = field_name(relation)
                table[f"{PERFORM_FIELD}.{attribute}"] = relation
                elements.append(f"{attribute}: str = {_literal(relation)}")
            blocks.append(self._render_class(group, ["NamedTuple"], elements))
            fields.append(f"{PERFORM_FIELD}: ClassVar[{group}] = {group}()")

        body = [
            f"__entity_name__: ClassVar[str] = {_literal(wire_name)}",
            "__relations__: ClassVar[Mapping[str, str]] = {",
            *(
                f"{_INDENT}{_literal(path)}: {_literal(relation)},"
                for path, relation in table.items()
            ),
            "}",
            "",
            *fields,
        ]
        blocks.append(self._render_class(name, bases, body))
        return entity, blocks

    def _render_class(self, name: str, bases: list[str], body: list[str]) -> str:
        lines = [f"class {name}({', '.join(bases)}):"]
        lines.extend(f"{_INDENT}{line}" if line else "" for line in body)
        return "\n".join(lines)

    def _render_conditions(self, conditions: list[Condition]) -> str:
        lines = [
            "class Conditions:",
            f'{_INDENT}"""Build conditions to attach to relationships at grant time."""',
        ]
        for condition in conditions:
            lines.append("")
            lines.extend(
                self._render_helper(
                    name=f"for_{field_name(condition.name)}",
                    parameters=condition.init_parameters,
                    condition=condition,
                    returns="ConditionInstance",
                )
            )
        return "\n".join(lines)

    def _render_check_contexts(self, conditions: list[Condition]) -> str:
        lines = [
            "class CheckContexts:",
            f'{_INDENT}"""Build check-time contexts for conditional relationships."""',
        ]
        for condition in conditions:
            lines.append("")
            lines.extend(
                self._render_helper(
                    name=field_name(condition.name),
                    parameters=condition.provided_parameters,
                    condition=condition,
                    returns="dict[str, Any]",
                )
            )
        return "\n".join(lines)

    def _render_helper(
        self,
        name: str,
        parameters: tuple[Parameter, ...],
        condition: Condition,
        returns: str,
    ) -> list[str]:
        arguments = self._arguments(parameters, condition)
        signature = ", ".join(
            f"{argument}: {_PYTHON_TYPES[p.kind]}"
            for argument, p in zip(arguments, parameters, strict=True)
        )
        context = [
            f"{_literal(p.name)}: serialize_parameter("
            f"ParameterKind.{p.kind.name}, {argument}),"
            for argument, p in zip(arguments, parameters, strict=True)
        ]

        body = _INDENT * 2
        lines = [
            f"{_INDENT}@staticmethod",
            f"{_INDENT}def {name}({signature}) -> {returns}:",
        ]
        if returns == "ConditionInstance":
            lines.append(f"{body}return ConditionInstance(")
            lines.append(f"{body}{_INDENT}name={_literal(condition.name)},")
            lines.append(f"{body}{_INDENT}context={{")
            lines.extend(f"{body}{_INDENT * 2}{entry}" for entry in context)
            lines.append(f"{body}{_INDENT}}},")
            lines.append(f"{body})")
        else:
            lines.append(f"{body}return {{")
            lines.extend(f"{body}{_INDENT}{entry}" for entry in context)
            lines.append(f"{body}}}")
        return lines

    def _arguments(
        self, parameters: tuple[Parameter, ...], condition: Condition
    ) -> list[str]:
        arguments = [field_name(p.base_name) for p in parameters]
        if len(set(arguments)) != len(arguments):
            raise SchemaError(
                f"Condition {condition.name!r} has parameters that collide once "
                "their phase suffix is removed"
            )
        return arguments
