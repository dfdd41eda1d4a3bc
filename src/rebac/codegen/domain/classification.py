"""Accessor classification policy.

Whether a type with relations can also act as the subject of a relation is a
naming convention, not something the schema states. The convention is kept
as a table of type-name suffixes so deployments can change it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from shared_kernel.authorization.naming import canonical_name

DEFAULT_ACCESSOR_SUFFIXES: tuple[str, ...] = (
    "user",
    "group",
    "team",
    "org",
    "organization",
    "account",
)


@dataclass(frozen=True)
class AccessorClassification:
    """Suffix table deciding which resource types are also accessors.

    Example:
        >>> AccessorClassification().is_accessor("crm_email_account")
        True
        >>> AccessorClassification().is_accessor("form")
        False
    """

    suffixes: tuple[str, ...] = DEFAULT_ACCESSOR_SUFFIXES

    @classmethod
    def from_suffixes(cls, suffixes: Iterable[str]) -> AccessorClassification:
        return cls(
            suffixes=tuple(canonical_name(s.strip()) for s in suffixes if s.strip())
        )

    def is_accessor(self, type_name: str) -> bool:
        """Whether the type name is a suffix or ends with ``_<suffix>``."""
        name = canonical_name(type_name)
        return any(
            name == suffix or name.endswith(f"_{suffix}") for suffix in self.suffixes
        )
