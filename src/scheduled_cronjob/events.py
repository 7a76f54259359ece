"""Audit events attached to reconciled resources."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from kubernetes import client

from . import logging as structured_logging
from . import metrics
from .client import ResourceClient
from .constants import EVENT_ACTION, REPORTING_COMPONENT, REPORTING_INSTANCE
from .errors import ResourceMismatchError, UpstreamError
from .resources import EVENT, SCHEDULED_CRONJOB, ResourceKind, name_of, namespace_of, uid_of

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def event_name(resource_name: str, moment: datetime) -> str:
    """Per-second event identity; same-second events for one resource collide."""
    return f"{resource_name}-{int(moment.timestamp())}"


def build_event(
    *,
    resource: dict[str, Any],
    kind: ResourceKind,
    event_type: str,
    reason: str,
    message: str,
    now: datetime,
    reporting_instance: str = REPORTING_INSTANCE,
) -> client.CoreV1Event:
    """Render a core/v1 Event for ``resource``.

    This function is pure and safe to unit-test.
    """
    name = name_of(resource)
    namespace = namespace_of(resource)
    now = now.astimezone(UTC)
    # MicroTime needs all six fractional digits, even when they are zero.
    micro_time = now.isoformat(timespec="microseconds")
    whole_second = now.replace(microsecond=0)

    involved = client.V1ObjectReference(
        api_version=kind.api_version,
        kind=kind.kind,
        name=name,
        namespace=namespace,
        uid=uid_of(resource),
    )
    return client.CoreV1Event(
        api_version=EVENT.api_version,
        kind=EVENT.kind,
        metadata=client.V1ObjectMeta(name=event_name(name, now), namespace=namespace),
        action=EVENT_ACTION,
        count=1,
        event_time=micro_time,
        first_timestamp=whole_second,
        last_timestamp=whole_second,
        involved_object=involved,
        message=message,
        reason=reason,
        reporting_component=REPORTING_COMPONENT,
        reporting_instance=reporting_instance,
        type=event_type,
        series=client.CoreV1EventSeries(count=1, last_observed_time=micro_time),
        source=client.V1EventSource(component=REPORTING_COMPONENT),
    )


class EventRecorder:
    """Posts audit events, absorbing same-second duplicates."""

    def __init__(
        self,
        resources: ResourceClient,
        *,
        kind: ResourceKind = SCHEDULED_CRONJOB,
        reporting_instance: str = REPORTING_INSTANCE,
        clock: Clock = utcnow,
    ) -> None:
        self._resources = resources
        self._kind = kind
        self._reporting_instance = reporting_instance
        self._clock = clock

    async def record_event(
        self, resource: dict[str, Any], event_type: str, reason: str, message: str
    ) -> None:
        self._check_identity(resource)
        event = build_event(
            resource=resource,
            kind=self._kind,
            event_type=event_type,
            reason=reason,
            message=message,
            now=self._clock(),
            reporting_instance=self._reporting_instance,
        )
        namespace = event.metadata.namespace

        try:
            await self._resources.create(EVENT, namespace, event)
        except UpstreamError as e:
            if e.is_conflict:
                # An event with this identity was already posted within the same second.
                metrics.EVENTS_TOTAL.labels(result="deduplicated").inc()
                structured_logging.logger.debug(
                    "Duplicate event absorbed",
                    controller=self._kind.kind,
                    resource=f"{namespace}/{name_of(resource)}",
                    uid=uid_of(resource),
                    event="event",
                    reason=reason,
                    event_name=event.metadata.name,
                )
                return
            metrics.EVENTS_TOTAL.labels(result="failed").inc()
            raise

        metrics.EVENTS_TOTAL.labels(result="created").inc()

    def _check_identity(self, resource: dict[str, Any]) -> None:
        api_version = resource.get("apiVersion")
        if api_version and api_version != self._kind.api_version:
            raise ResourceMismatchError(
                f"resource declares apiVersion {api_version!r}, "
                f"expected {self._kind.api_version!r}"
            )
        kind = resource.get("kind")
        if kind and kind != self._kind.kind:
            raise ResourceMismatchError(
                f"resource declares kind {kind!r}, expected {self._kind.kind!r}"
            )
