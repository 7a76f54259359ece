from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import suppress
from time import monotonic
from typing import Any

import kopf
from kubernetes import config
from prometheus_client import start_http_server

from . import logging as structured_logging
from . import metrics
from .constants import (
    API_GROUP_VERSION,
    EVENT_TYPE_NORMAL,
    KIND_SCHEDULED_CRONJOB,
    PLURAL_SCHEDULED_CRONJOB,
)
from .context import Context
from .crd import Phase, ScheduledCronJobStatus
from .errors import ContextError, NotFoundError, UpdateError, UpstreamError
from .settings import Settings

ACCEPTED_MESSAGE = "Scheduled cron job accepted"
API_THREAD_PREFIX = "scheduled-cronjob-api"


def install_executor(loop: asyncio.AbstractEventLoop, max_workers: int) -> ThreadPoolExecutor:
    """Size the loop's default executor, which runs every API round-trip."""
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=API_THREAD_PREFIX)
    loop.set_default_executor(executor)
    return executor


@kopf.on.startup()
async def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    structured_logging.setup_structured_logging()
    runtime = Settings.from_env()

    settings.posting.level = 0
    settings.networking.request_timeout = runtime.request_timeout
    settings.execution.max_workers = runtime.max_workers
    install_executor(asyncio.get_running_loop(), runtime.max_workers)

    with suppress(Exception):
        start_http_server(runtime.metrics_port)

    # Load cluster config if running in cluster; fallback to local kubeconfig
    try:
        config.load_incluster_config()
    except config.ConfigException:
        try:
            config.load_kube_config()
        except (config.ConfigException, OSError):
            structured_logging.logger.warning(
                "No Kubernetes configuration found, using client defaults",
                event="startup",
                reason="ConfigMissing",
            )

    memo.context = Context(settings=runtime)


def error_policy(error: ContextError, runtime: Settings) -> None:
    """Translate a context failure into kopf's retry semantics.

    A vanished object needs no retry. Upstream failures are transient and the
    handler is retried after ``retry_delay``; anything else will not improve
    on retry.
    """
    if isinstance(error, NotFoundError):
        return
    if isinstance(error, UpstreamError):
        raise kopf.TemporaryError(str(error), delay=runtime.retry_delay) from error
    if isinstance(error, UpdateError) and any(
        isinstance(e, UpstreamError) for e in error.errors
    ):
        raise kopf.TemporaryError(str(error), delay=runtime.retry_delay) from error
    raise kopf.PermanentError(str(error)) from error


@kopf.on.create(API_GROUP_VERSION, PLURAL_SCHEDULED_CRONJOB)
@kopf.on.resume(API_GROUP_VERSION, PLURAL_SCHEDULED_CRONJOB)
async def admit_scheduled_cronjob(
    body: kopf.Body,
    status: dict[str, Any],
    name: str,
    namespace: str,
    uid: str,
    memo: kopf.Memo,
    **_: Any,
) -> None:
    """Move newly seen ScheduledCronJobs into the Pending phase."""
    started_at = monotonic()
    context: Context = memo.context
    try:
        structured_logging.logger.info(
            "Starting scheduled cronjob reconciliation",
            controller=KIND_SCHEDULED_CRONJOB,
            resource=f"{namespace}/{name}",
            uid=uid,
            event="reconcile",
            reason="ReconcileStarted",
        )

        current = ScheduledCronJobStatus.from_dict(dict(status or {}))
        if current is not None:
            structured_logging.logger.debug(
                "Scheduled cronjob already has a phase",
                controller=KIND_SCHEDULED_CRONJOB,
                resource=f"{namespace}/{name}",
                uid=uid,
                phase=current.phase.as_str(),
                event="reconcile",
                reason="AlreadyAdmitted",
            )
        else:
            try:
                await context.update(
                    dict(body), Phase.PENDING, EVENT_TYPE_NORMAL, ACCEPTED_MESSAGE
                )
            except ContextError as e:
                error_policy(e, context.settings)

        structured_logging.logger.info(
            "Scheduled cronjob reconciliation completed successfully",
            controller=KIND_SCHEDULED_CRONJOB,
            resource=f"{namespace}/{name}",
            uid=uid,
            event="reconcile",
            reason="ReconcileSucceeded",
        )
        metrics.RECONCILE_TOTAL.labels(kind=KIND_SCHEDULED_CRONJOB, result="success").inc()
    except Exception as e:
        structured_logging.logger.error(
            f"Scheduled cronjob reconciliation failed: {str(e)}",
            controller=KIND_SCHEDULED_CRONJOB,
            resource=f"{namespace}/{name}",
            uid=uid,
            event="reconcile",
            reason="ReconcileFailed",
        )
        metrics.RECONCILE_TOTAL.labels(kind=KIND_SCHEDULED_CRONJOB, result="error").inc()
        raise
    finally:
        metrics.RECONCILE_DURATION.labels(kind=KIND_SCHEDULED_CRONJOB).observe(
            monotonic() - started_at
        )
