"""Exceptions for the permissions bounded context.

Engine failures are not represented here: they surface unchanged as
``shared_kernel.authorization.spicedb.exceptions.AuthorizationError``.
"""


class OperationSequenceError(RuntimeError):
    """Raised when a builder call is made out of order.

    Examples are a continuation call (``add_also``, ``can_also``) with no
    previously remembered accessor, or a commit with nothing pending. The
    builder state is left unchanged.
    """

    pass
