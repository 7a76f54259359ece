"""Errors raised by the reconciliation context."""

from __future__ import annotations

from collections.abc import Sequence


class ContextError(Exception):
    """Base class for every error the reconciliation context raises."""


class NotFoundError(ContextError):
    """The target object does not exist on the API server."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f"{kind} {namespace}/{name} not found")


class UpstreamError(ContextError):
    """Any other failure reported by the API server or the transport.

    ``status`` is the HTTP status code when the server answered, ``None`` for
    transport failures such as timeouts or refused connections. The original
    exception is kept in ``cause`` and chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        status: int | None = None,
    ):
        self.cause = cause
        self.status = status
        super().__init__(message)

    @property
    def is_conflict(self) -> bool:
        return self.status == 409


class SerializationError(ContextError):
    """An object body could not be encoded or a response could not be decoded."""


class ResourceMismatchError(ContextError):
    """The object's apiVersion/kind disagrees with the kind it is handled as."""


class UpdateError(ContextError):
    """Both steps of a combined event + status update failed."""

    def __init__(self, errors: Sequence[ContextError]):
        self.errors = list(errors)
        details = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} update steps failed: {details}")
