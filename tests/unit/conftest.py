"""Shared fixtures: an in-memory API server behind a real ApiClient."""

from __future__ import annotations

import copy
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from kubernetes import client

from scheduled_cronjob.client import ResourceClient
from scheduled_cronjob.constants import API_GROUP_VERSION, KIND_SCHEDULED_CRONJOB
from scheduled_cronjob.resources import SCHEDULED_CRONJOB, ResourceKind


class FakeApiServer:
    """Serves GET/POST/DELETE/PUT-status for namespaced paths from a dict.

    Objects are keyed by their full object path. ``fail()`` queues exceptions
    that are raised, in order, for the next matching requests.
    """

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.requests: list[dict[str, Any]] = []
        self._failures: dict[tuple[str, str], list[BaseException]] = {}
        self._revision = 100

    def add(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(obj)
        metadata = stored.setdefault("metadata", {})
        metadata.setdefault("uid", str(uuid.uuid4()))
        metadata["resourceVersion"] = self._next_revision()
        path = kind.get_url(namespace=metadata["namespace"], name=metadata["name"])
        self.objects[path] = stored
        return copy.deepcopy(stored)

    def stored(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any] | None:
        return self.objects.get(kind.get_url(namespace=namespace, name=name))

    def list(self, kind: ResourceKind, namespace: str) -> list[dict[str, Any]]:
        prefix = kind.get_url(namespace=namespace) + "/"
        return [obj for path, obj in self.objects.items() if path.startswith(prefix)]

    def fail(self, method: str, path: str, *errors: BaseException) -> None:
        self._failures.setdefault((method, path), []).extend(errors)

    def bump(self, kind: ResourceKind, namespace: str, name: str) -> None:
        """Simulate a concurrent writer touching the object."""
        self.objects[kind.get_url(namespace=namespace, name=name)]["metadata"][
            "resourceVersion"
        ] = self._next_revision()

    def call_api(
        self,
        resource_path: str,
        method: str,
        header_params: dict[str, str] | None = None,
        body: Any = None,
        **kwargs: Any,
    ) -> Any:
        self.requests.append(
            {
                "method": method,
                "path": resource_path,
                "body": copy.deepcopy(body),
                "headers": header_params,
                "timeout": kwargs.get("_request_timeout"),
            }
        )
        queued = self._failures.get((method, resource_path))
        if queued:
            raise queued.pop(0)

        if method == "GET":
            return copy.deepcopy(self._lookup(resource_path))

        if method == "POST":
            path = f"{resource_path}/{body['metadata']['name']}"
            if path in self.objects:
                raise client.exceptions.ApiException(status=409, reason="AlreadyExists")
            stored = copy.deepcopy(body)
            stored["metadata"].setdefault("uid", str(uuid.uuid4()))
            stored["metadata"]["resourceVersion"] = self._next_revision()
            self.objects[path] = stored
            return copy.deepcopy(stored)

        if method == "DELETE":
            self._lookup(resource_path)
            del self.objects[resource_path]
            return {"kind": "Status", "status": "Success"}

        if method == "PUT" and resource_path.endswith("/status"):
            stored = self._lookup(resource_path[: -len("/status")])
            expected = (body.get("metadata") or {}).get("resourceVersion")
            if expected and expected != stored["metadata"]["resourceVersion"]:
                raise client.exceptions.ApiException(status=409, reason="Conflict")
            stored["status"] = copy.deepcopy(body.get("status"))
            stored["metadata"]["resourceVersion"] = self._next_revision()
            return copy.deepcopy(stored)

        raise client.exceptions.ApiException(status=405, reason="MethodNotAllowed")

    def _lookup(self, path: str) -> dict[str, Any]:
        try:
            return self.objects[path]
        except KeyError:
            raise client.exceptions.ApiException(status=404, reason="NotFound") from None

    def _next_revision(self) -> str:
        self._revision += 1
        return str(self._revision)


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def fake_server() -> FakeApiServer:
    return FakeApiServer()


@pytest.fixture
def api_client(fake_server: FakeApiServer, monkeypatch: pytest.MonkeyPatch) -> client.ApiClient:
    api = client.ApiClient()
    monkeypatch.setattr(api, "call_api", fake_server.call_api)
    return api


@pytest.fixture
def resource_client(api_client: client.ApiClient) -> ResourceClient:
    return ResourceClient(api_client, request_timeout=5.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, 250000, tzinfo=UTC))


def make_scheduled_cronjob(
    name: str = "job-a", namespace: str = "ns1", phase: str | None = "Pending"
) -> dict[str, Any]:
    obj: dict[str, Any] = {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_SCHEDULED_CRONJOB,
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"schedule": "*/5 * * * *"},
    }
    if phase is not None:
        obj["status"] = {"phase": phase}
    return obj


@pytest.fixture
def scheduled_cronjob(fake_server: FakeApiServer) -> dict[str, Any]:
    return fake_server.add(SCHEDULED_CRONJOB, make_scheduled_cronjob())


@pytest.fixture
def make_resource():
    return make_scheduled_cronjob
