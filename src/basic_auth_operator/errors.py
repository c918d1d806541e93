"""Error taxonomy shared by the store implementations and the reconcile steps."""

from __future__ import annotations


class OperatorError(Exception):
    """Base class for all operator errors.

    ``retryable`` tells the handler layer whether the failure should be retried
    with backoff or surfaced as permanent for the current change.
    """

    retryable = True

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StoreError(OperatorError):
    """Failure reported by the resource store."""

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.kind = kind
        self.namespace = namespace
        self.name = name


class NotFoundError(StoreError):
    """The requested object does not exist."""


class AlreadyExistsError(StoreError):
    """A create was attempted for an object that is already present."""


class ConflictError(StoreError):
    """A write was based on a stale resource version."""


class TransientStoreError(StoreError):
    """The store is unreachable, throttling or timing out."""


class DependencyNotReady(OperatorError):
    """An object the resource depends on but does not own is not there yet."""


class InvariantViolationError(OperatorError):
    """Live state contradicts an invariant; never repaired automatically."""

    retryable = False


class SpecValidationError(OperatorError):
    """The resource spec cannot be reconciled as written."""

    retryable = False

    def __init__(self, message: str, field: str | None = None) -> None:
        if field:
            message = f"Validation error in field '{field}': {message}"
        super().__init__(message)
        self.field = field


class RequeueRequested(Exception):
    """Control-flow signal raised by a step that wants a fresh reconcile."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
