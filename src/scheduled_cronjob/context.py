"""The single entry point a reconciliation loop uses to talk to the cluster."""

from __future__ import annotations

from typing import Any

from kubernetes import client

from . import logging as structured_logging
from .client import ResourceClient
from .crd import Phase
from .errors import ContextError, UpdateError
from .events import Clock, EventRecorder, utcnow
from .resources import CRONJOB, ResourceKind, resource_key, uid_of
from .settings import Settings
from .status import StatusUpdater


class Context:
    """Announce and persist reconciliation outcomes for ScheduledCronJob objects."""

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        *,
        settings: Settings | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._settings = settings or Settings()
        self._resources = ResourceClient(
            api_client, request_timeout=self._settings.request_timeout
        )
        self._events = EventRecorder(
            self._resources,
            reporting_instance=self._settings.reporting_instance,
            clock=clock,
        )
        self._status = StatusUpdater(
            self._resources,
            conflict_retries=self._settings.status_conflict_retries,
            clock=clock,
        )

    @property
    def api_client(self) -> client.ApiClient:
        """The underlying cluster connection, for collaborators that need raw access."""
        return self._resources.api_client

    @property
    def resources(self) -> ResourceClient:
        return self._resources

    @property
    def settings(self) -> Settings:
        return self._settings

    async def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        return await self._resources.get(kind, namespace, name)

    async def create(
        self, kind: ResourceKind, namespace: str, obj: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._resources.create(kind, namespace, obj)

    async def delete(self, kind: ResourceKind, namespace: str, name: str) -> None:
        await self._resources.delete(kind, namespace, name)

    async def create_cronjob(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._resources.create(CRONJOB, namespace, body)

    async def record_event(
        self, resource: dict[str, Any], event_type: str, reason: str, message: str
    ) -> None:
        await self._events.record_event(resource, event_type, reason, message)

    async def update_status(self, resource: dict[str, Any], phase: Phase, message: str) -> None:
        await self._status.update_status(resource, phase, message)

    async def update(
        self, resource: dict[str, Any], phase: Phase, event_type: str, message: str
    ) -> None:
        """Record an event for the transition, then persist it in the status.

        The status write is attempted even when the event could not be posted.
        A single failure is re-raised as is; two failures raise ``UpdateError``.
        """
        structured_logging.logger.info(
            "Updating status for scheduled cronjob",
            controller="ScheduledCronJob",
            resource=resource_key(resource),
            uid=uid_of(resource),
            phase=phase.as_str(),
            event="update",
            reason=phase.as_str(),
            status_message=message,
        )

        errors: list[ContextError] = []
        try:
            await self._events.record_event(resource, event_type, phase.as_str(), message)
        except ContextError as e:
            structured_logging.logger.warning(
                f"Failed to record event: {e}",
                controller="ScheduledCronJob",
                resource=resource_key(resource),
                uid=uid_of(resource),
                phase=phase.as_str(),
                event="update",
                reason="EventFailed",
            )
            errors.append(e)

        try:
            await self._status.update_status(resource, phase, message)
        except ContextError as e:
            structured_logging.logger.warning(
                f"Failed to update status: {e}",
                controller="ScheduledCronJob",
                resource=resource_key(resource),
                uid=uid_of(resource),
                phase=phase.as_str(),
                event="update",
                reason="StatusFailed",
            )
            errors.append(e)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise UpdateError(errors)
