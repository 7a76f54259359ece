"""Read-modify-write of the ScheduledCronJob status subresource."""

from __future__ import annotations

from typing import Any

from . import logging as structured_logging
from . import metrics
from .client import ResourceClient
from .crd import Phase, ScheduledCronJobStatus
from .errors import NotFoundError, UpstreamError
from .events import Clock, utcnow
from .resources import (
    SCHEDULED_CRONJOB,
    ResourceKind,
    name_of,
    namespace_of,
    resource_key,
    uid_of,
)


class StatusUpdater:
    """Transition a resource to a new phase without clobbering the rest of its state.

    The resource is always re-read before writing, since the caller's copy may
    be stale. The replace carries the fresh ``resourceVersion``; when the
    server rejects it with a conflict, the read and write are repeated up to
    ``conflict_retries`` times. With ``conflict_retries=0`` a lost race is
    reported immediately.
    """

    def __init__(
        self,
        resources: ResourceClient,
        *,
        kind: ResourceKind = SCHEDULED_CRONJOB,
        conflict_retries: int = 3,
        clock: Clock = utcnow,
    ) -> None:
        self._resources = resources
        self._kind = kind
        self._conflict_retries = max(0, conflict_retries)
        self._clock = clock

    async def update_status(self, resource: dict[str, Any], phase: Phase, message: str) -> None:
        namespace = namespace_of(resource)
        name = name_of(resource)
        attempts = self._conflict_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                current = await self._resources.get(self._kind, namespace, name)
            except NotFoundError:
                self._vanished(resource, phase)
                return

            current["status"] = ScheduledCronJobStatus(
                phase=phase,
                message=message,
                last_update_time=self._clock(),
            ).to_dict()

            try:
                await self._resources.replace_status(self._kind, namespace, name, current)
            except UpstreamError as e:
                if e.status == 404:
                    self._vanished(resource, phase)
                    return
                if e.is_conflict:
                    metrics.STATUS_CONFLICTS_TOTAL.inc()
                    if attempt < attempts:
                        structured_logging.logger.info(
                            "Status replace conflicted, retrying with a fresh read",
                            controller=self._kind.kind,
                            resource=f"{namespace}/{name}",
                            uid=uid_of(resource),
                            phase=phase.as_str(),
                            event="status",
                            reason="StatusConflict",
                            attempt=attempt,
                        )
                        continue
                metrics.STATUS_UPDATES_TOTAL.labels(result="failed").inc()
                raise

            metrics.STATUS_UPDATES_TOTAL.labels(result="updated").inc()
            return

    def _vanished(self, resource: dict[str, Any], phase: Phase) -> None:
        metrics.STATUS_UPDATES_TOTAL.labels(result="vanished").inc()
        structured_logging.logger.info(
            "Resource is gone, skipping status update",
            controller=self._kind.kind,
            resource=resource_key(resource),
            uid=uid_of(resource),
            phase=phase.as_str(),
            event="status",
            reason="ResourceGone",
        )
