"""Resource store interface consumed by the reconcile steps."""

from __future__ import annotations

from typing import Any, Protocol


class ResourceStore(Protocol):
    """Protocol defining the cluster store operations.

    Objects are plain manifest dicts (``apiVersion``, ``kind``, ``metadata``,
    ``spec``/``data``, ``status``). Every write carries
    ``metadata.resourceVersion`` and fails with ``ConflictError`` when it is
    stale.
    """

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Read one object.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...

    def list(self, kind: str, namespace: str, selector: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """List objects of ``kind`` in ``namespace`` matching a LabelSelector dict."""
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object and return the stored version.

        Raises:
            AlreadyExistsError: If an object with the same name exists
        """
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object (status excluded) and return the stored version.

        Raises:
            ConflictError: If ``metadata.resourceVersion`` is stale
            NotFoundError: If the object no longer exists
        """
        ...

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace only the status subresource and return the stored version.

        Raises:
            ConflictError: If ``metadata.resourceVersion`` is stale
            NotFoundError: If the object no longer exists
        """
        ...

    def set_owner(self, child: dict[str, Any], parent: dict[str, Any]) -> None:
        """Declare that ``child`` is deleted together with ``parent``."""
        ...
