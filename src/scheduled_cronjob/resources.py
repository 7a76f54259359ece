"""References to the namespaced resource kinds the context works with."""

from __future__ import annotations

from typing import Any

import kopf

from .constants import (
    API_GROUP,
    API_VERSION,
    KIND_SCHEDULED_CRONJOB,
    PLURAL_SCHEDULED_CRONJOB,
)


class ResourceKind(kopf.Resource):
    """A namespaced ``kopf.Resource`` that also knows its ``apiVersion`` string.

    URLs come from ``get_url()``; an empty ``group`` is the legacy core group.
    """

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


SCHEDULED_CRONJOB = ResourceKind(
    API_GROUP,
    API_VERSION,
    PLURAL_SCHEDULED_CRONJOB,
    kind=KIND_SCHEDULED_CRONJOB,
    namespaced=True,
)
CRONJOB = ResourceKind("batch", "v1", "cronjobs", kind="CronJob", namespaced=True)
JOB = ResourceKind("batch", "v1", "jobs", kind="Job", namespaced=True)
EVENT = ResourceKind("", "v1", "events", kind="Event", namespaced=True)


def name_of(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("name") or ""


def namespace_of(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace") or ""


def uid_of(obj: dict[str, Any]) -> str | None:
    return (obj.get("metadata") or {}).get("uid")


def resource_key(obj: dict[str, Any]) -> str:
    return f"{namespace_of(obj)}/{name_of(obj)}"
