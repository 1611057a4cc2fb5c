"""
State management module - Reads cluster context and handles Worker status updates
"""
import copy
import logging

from kubernetes import client

logger = logging.getLogger(__name__)

GROUP = "workerplan.io"
VERSION = "v1alpha1"
WORKERS = "workers"
CLUSTERS = "clusters"


def patch_status(namespace, name, status_patch, plural=WORKERS):
    """
    Patch the status of a namespaced custom resource
    The patch is deep-merged into the current status so other fields survive
    """
    api = client.CustomObjectsApi()

    try:
        current = api.get_namespaced_custom_object_status(GROUP, VERSION, namespace, plural, name)
        current_status = current.get('status') or {}

        merged_status = deep_merge(current_status, status_patch)

        body = {'status': merged_status}
        api.patch_namespaced_custom_object_status(
            GROUP, VERSION, namespace, plural, name, body
        )

        logger.debug(f"Patched status for {plural}/{namespace}/{name}")
        return True

    except client.exceptions.ApiException as e:
        if e.status == 404:
            logger.error(f"Resource {plural}/{namespace}/{name} not found")
            return False

        logger.error(f"Failed to patch status for {plural}/{namespace}/{name}: {e}")
        return False


def deep_merge(base, updates):
    """
    Deep merge two dictionaries
    Updates values in base with values from updates, recursively
    """
    result = copy.deepcopy(base)

    for key, value in updates.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def get_cluster(name):
    """
    Get the Cluster resource describing the shoot a worker belongs to
    Clusters are cluster-scoped and named after the worker's namespace
    """
    api = client.CustomObjectsApi()
    return api.get_cluster_custom_object(GROUP, VERSION, CLUSTERS, name)


def compute_summary(worker, plan):
    """Compute summary statistics from a plan"""
    deployments = plan.deployments
    return {
        'pools': len(worker.pools),
        'machineDeployments': len(deployments),
        'minimum': sum(d.minimum for d in deployments),
        'maximum': sum(d.maximum for d in deployments),
    }
