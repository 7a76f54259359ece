"""
Pytest configuration and fixtures for integration tests.

These run against whatever cluster the local kubeconfig points at (a kind
cluster in CI) and are skipped when none is reachable.
"""

import time
import uuid
from typing import Generator

import pytest
import urllib3
from kubernetes import client, config

from scheduled_cronjob.constants import (
    API_GROUP,
    API_VERSION,
    KIND_SCHEDULED_CRONJOB,
    PLURAL_SCHEDULED_CRONJOB,
)

CRD_NAME = f"{PLURAL_SCHEDULED_CRONJOB}.{API_GROUP}"


@pytest.fixture(scope="session")
def cluster_available() -> bool:
    """Load the local kubeconfig and check the API server answers."""
    try:
        config.load_kube_config()
        client.VersionApi().get_code(_request_timeout=5)
    except (config.ConfigException, OSError, urllib3.exceptions.HTTPError):
        pytest.skip("no reachable Kubernetes cluster")
    except client.exceptions.ApiException as e:
        pytest.skip(f"Kubernetes cluster not usable: {e.reason}")
    return True


def _crd_manifest() -> dict:
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": CRD_NAME},
        "spec": {
            "group": API_GROUP,
            "scope": "Namespaced",
            "names": {
                "kind": KIND_SCHEDULED_CRONJOB,
                "plural": PLURAL_SCHEDULED_CRONJOB,
                "singular": "scheduledcronjob",
            },
            "versions": [
                {
                    "name": API_VERSION,
                    "served": True,
                    "storage": True,
                    "subresources": {"status": {}},
                    "schema": {
                        "openAPIV3Schema": {
                            "type": "object",
                            "x-kubernetes-preserve-unknown-fields": True,
                        }
                    },
                }
            ],
        },
    }


def wait_for_crd_established(name: str, timeout: int = 60) -> bool:
    """Wait for a CRD to report the Established condition."""
    ext_api = client.ApiextensionsV1Api()
    start_time = time.time()

    while time.time() - start_time < timeout:
        crd = ext_api.read_custom_resource_definition(name)
        conditions = (crd.status.conditions or []) if crd.status else []
        for condition in conditions:
            if condition.type == "Established" and condition.status == "True":
                return True
        time.sleep(1)

    return False


@pytest.fixture(scope="session")
def crd_installed(cluster_available: bool) -> bool:
    """Install the ScheduledCronJob CRD when it is not present yet."""
    ext_api = client.ApiextensionsV1Api()
    try:
        ext_api.create_custom_resource_definition(_crd_manifest())
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
    if not wait_for_crd_established(CRD_NAME):
        pytest.fail(f"CRD {CRD_NAME} never became established")
    return True


@pytest.fixture
def test_namespace(crd_installed: bool) -> Generator[str, None, None]:
    """Create a throwaway namespace for one test."""
    name = f"scj-test-{uuid.uuid4().hex[:8]}"
    v1 = client.CoreV1Api()
    v1.create_namespace(client.V1Namespace(metadata=client.V1ObjectMeta(name=name)))
    yield name
    v1.delete_namespace(name, propagation_policy="Background")
