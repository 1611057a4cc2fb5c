"""
Pytest configuration and fixtures
"""
import copy
import pytest
from unittest.mock import patch

from workerplan.models import ClusterContext, Worker


NAMESPACE = "shoot--foobar--openstack"
CLOUD_PROFILE = "openstack"
REGION = "eu-de-1"
REGION_WITH_IMAGES = "eu-de-2"

IMAGE_NAME = "my-os"
IMAGE_VERSION = "123"
IMAGE = "my-image-in-glance"
IMAGE_ID = "my-image-id"

KEY_NAME = "key-name"
MACHINE_TYPE = "large"
USER_DATA = "some-user-data"
NETWORK_ID = "network-id"
POD_CIDR = "1.2.3.4/5"
SUBNET_ID = "subnetID"
SECURITY_GROUP = "nodes-sec-group"

ZONE_1 = REGION + "a"
ZONE_2 = REGION + "b"

KUBERNETES_VERSION = "1.24.3"

NODE_CAPACITY = {"cpu": "8", "gpu": "1", "memory": "128Gi"}


def make_pool(name, minimum, maximum, max_surge, max_unavailable, **extra):
    pool = {
        "name": name,
        "minimum": minimum,
        "maximum": maximum,
        "maxSurge": max_surge,
        "maxUnavailable": max_unavailable,
        "machineType": MACHINE_TYPE,
        "machineImage": {"name": IMAGE_NAME, "version": IMAGE_VERSION},
        "nodeTemplate": {"capacity": dict(NODE_CAPACITY)},
        "userData": USER_DATA,
        "zones": [ZONE_1, ZONE_2],
    }
    pool.update(extra)
    return pool


# ============================================
# Data Fixtures
# ============================================

@pytest.fixture
def infrastructure_status():
    """Infrastructure status with a nodes network, subnet and security group"""
    return {
        "securityGroups": [{"purpose": "nodes", "name": SECURITY_GROUP}],
        "node": {"keyName": KEY_NAME},
        "networks": {
            "id": NETWORK_ID,
            "subnets": [{"purpose": "nodes", "id": SUBNET_ID}],
        },
    }


@pytest.fixture
def worker_body(infrastructure_status):
    """Worker resource with two pools spread over two zones"""
    return {
        "apiVersion": "workerplan.io/v1alpha1",
        "kind": "Worker",
        "metadata": {"name": "worker", "namespace": NAMESPACE},
        "spec": {
            "secretRef": {"name": "secret", "namespace": NAMESPACE},
            "region": REGION,
            "infrastructureProviderStatus": infrastructure_status,
            "pools": [
                make_pool("pool-1", 5, 10, 3, 2),
                make_pool("pool-2", 30, 45, 10, 15),
            ],
        },
    }


@pytest.fixture
def cluster_body():
    """Cluster resource whose cloud profile knows the pools' image"""
    return {
        "apiVersion": "workerplan.io/v1alpha1",
        "kind": "Cluster",
        "metadata": {"name": NAMESPACE},
        "spec": {
            "cloudProfile": {
                "name": CLOUD_PROFILE,
                "providerConfig": {
                    "keystoneURL": "auth-url",
                    "machineImages": [
                        {
                            "name": IMAGE_NAME,
                            "versions": [
                                {
                                    "version": IMAGE_VERSION,
                                    "image": IMAGE,
                                    "regions": [{"name": REGION_WITH_IMAGES, "id": IMAGE_ID}],
                                }
                            ],
                        }
                    ],
                },
            },
            "shoot": {
                "kubernetesVersion": KUBERNETES_VERSION,
                "region": REGION,
                "podNetwork": POD_CIDR,
            },
        },
    }


@pytest.fixture
def cluster_without_images(cluster_body):
    """Cluster resource whose cloud profile has no images"""
    body = copy.deepcopy(cluster_body)
    body["spec"]["cloudProfile"] = {"name": "another-cloud-profile", "providerConfig": {"keystoneURL": "auth-url"}}
    return body


@pytest.fixture
def worker(worker_body):
    return Worker.from_resource(worker_body)


@pytest.fixture
def cluster(cluster_body):
    return ClusterContext.from_resource(cluster_body)


# ============================================
# Mock Fixtures
# ============================================

@pytest.fixture
def mock_k8s_clients():
    """Mock Kubernetes clients"""
    with patch("kubernetes.client.CustomObjectsApi") as custom_api, \
            patch("kubernetes.client.CoreV1Api") as core_v1:
        yield {
            "custom_api": custom_api.return_value,
            "core_v1": core_v1.return_value,
        }


@pytest.fixture
def api_exception():
    """Factory for Kubernetes API exceptions with a given status"""
    from kubernetes.client.exceptions import ApiException

    def make(status):
        return ApiException(status=status, reason=f"status {status}")
    return make
