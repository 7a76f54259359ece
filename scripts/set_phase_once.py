#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
from contextlib import suppress

from kubernetes import config

from scheduled_cronjob.constants import EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING
from scheduled_cronjob.context import Context
from scheduled_cronjob.crd import Phase
from scheduled_cronjob.errors import ContextError, NotFoundError
from scheduled_cronjob.resources import SCHEDULED_CRONJOB
from scheduled_cronjob.settings import Settings


async def _run(args: argparse.Namespace) -> int:
    context = Context(settings=Settings.from_env())
    try:
        resource = await context.get(SCHEDULED_CRONJOB, args.namespace, args.name)
    except NotFoundError as e:
        print(str(e))
        return 1

    try:
        await context.update(resource, Phase(args.phase), args.type, args.message)
    except ContextError as e:
        print(f"Update of {args.namespace}/{args.name} failed: {e}")
        return 1

    print(f"Set {args.namespace}/{args.name} to {args.phase}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Record an event and set the phase of one ScheduledCronJob"
    )
    parser.add_argument("--namespace", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--phase", required=True, choices=[p.value for p in Phase])
    parser.add_argument("--message", default="")
    parser.add_argument(
        "--type", default=EVENT_TYPE_NORMAL, choices=[EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING]
    )
    args = parser.parse_args()

    # Load kube config (in-cluster or local)
    with suppress(config.ConfigException):
        config.load_incluster_config()
    with suppress(config.ConfigException, OSError):
        config.load_kube_config()

    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
