"""Generic CRUD over namespaced Kubernetes objects of any kind."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import urllib3
from kubernetes import client

from . import metrics
from .constants import PROPAGATION_FOREGROUND
from .errors import NotFoundError, SerializationError, UpstreamError
from .resources import ResourceKind

_JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class ResourceClient:
    """Async get/create/delete/replace_status for any kind described by a ``ResourceKind``.

    Objects come back as plain JSON-like dicts. Requests go through the blocking
    ``kubernetes`` ``ApiClient`` in a worker thread, so awaiting a call yields
    the event loop for the duration of the round-trip. Each request carries
    ``request_timeout`` as its deadline.
    """

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        *,
        request_timeout: float | None = 30.0,
    ) -> None:
        self._api_client = api_client if api_client is not None else client.ApiClient()
        self._request_timeout = request_timeout

    @property
    def api_client(self) -> client.ApiClient:
        return self._api_client

    async def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        try:
            return await self._request(
                kind, "get", "GET", kind.get_url(namespace=namespace, name=name)
            )
        except UpstreamError as e:
            if e.status == 404:
                raise NotFoundError(kind.kind, namespace, name) from e
            raise

    async def create(self, kind: ResourceKind, namespace: str, obj: Any) -> dict[str, Any]:
        """Create the object; an existing one is reported as a 409 ``UpstreamError``.

        ``obj`` is a dict or a ``kubernetes.client`` model.
        """
        return await self._request(
            kind, "create", "POST", kind.get_url(namespace=namespace), body=obj
        )

    async def delete(self, kind: ResourceKind, namespace: str, name: str) -> None:
        """Delete with foreground propagation; a missing object counts as deleted."""
        body = {
            "apiVersion": "v1",
            "kind": "DeleteOptions",
            "propagationPolicy": PROPAGATION_FOREGROUND,
        }
        try:
            await self._request(
                kind, "delete", "DELETE", kind.get_url(namespace=namespace, name=name), body=body
            )
        except UpstreamError as e:
            if e.status != 404:
                raise

    async def replace_status(
        self, kind: ResourceKind, namespace: str, name: str, obj: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            kind,
            "replace_status",
            "PUT",
            kind.get_url(namespace=namespace, name=name, subresource="status"),
            body=obj,
        )

    async def _request(
        self,
        kind: ResourceKind,
        verb: str,
        method: str,
        path: str,
        body: Any = None,
    ) -> dict[str, Any]:
        payload = self._serialize(body) if body is not None else None
        try:
            response = await asyncio.to_thread(self._call, method, path, payload)
        except client.exceptions.ApiException as e:
            metrics.API_REQUESTS_TOTAL.labels(kind=kind.kind, verb=verb, result="error").inc()
            raise UpstreamError(
                f"{method} {path} failed with {e.status}: {e.reason}", cause=e, status=e.status
            ) from e
        except urllib3.exceptions.HTTPError as e:
            metrics.API_REQUESTS_TOTAL.labels(kind=kind.kind, verb=verb, result="error").inc()
            raise UpstreamError(f"{method} {path} failed: {e}", cause=e) from e

        metrics.API_REQUESTS_TOTAL.labels(kind=kind.kind, verb=verb, result="success").inc()
        if method == "DELETE":
            # The body is either the deleted object or a Status; neither is used.
            return {}
        if not isinstance(response, dict):
            raise SerializationError(f"{method} {path} returned a non-object body")
        return response

    def _call(self, method: str, path: str, body: Any) -> Any:
        return self._api_client.call_api(
            path,
            method,
            header_params=dict(_JSON_HEADERS),
            body=body,
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _preload_content=True,
            _request_timeout=self._request_timeout,
        )

    def _serialize(self, obj: Any) -> Any:
        """Convert to JSON-compatible data, failing early on unencodable values."""
        try:
            sanitized = self._api_client.sanitize_for_serialization(obj)
            json.dumps(sanitized)
        except (AttributeError, TypeError, ValueError) as e:
            raise SerializationError(f"cannot encode object body: {e}") from e
        return sanitized
