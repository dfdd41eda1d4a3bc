"""Exceptions for the codegen bounded context."""


class SchemaError(ValueError):
    """Raised when an authorization schema cannot be turned into entity types.

    Covers malformed schema documents, unknown condition parameter types and
    relation names that collide once canonicalized.
    """

    pass
