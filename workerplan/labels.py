"""
Labels module - Label normalization and well-known label keys for machine classes
"""
import re
from typing import Dict, Mapping

# CSI topology keys, set to the zone on every machine deployment
CSI_DISK_DRIVER_TOPOLOGY_KEY = "topology.cinder.csi.openstack.org/zone"
CSI_MANILA_DRIVER_TOPOLOGY_KEY = "topology.manila.csi.openstack.org/zone"

LABEL_PURPOSE = "gardener.cloud/purpose"
PURPOSE_MACHINE_CLASS = "machineclass"

LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
MANAGED_BY = "workerplan"

_INVALID_KEY_CHARS = re.compile(r'[^A-Za-z0-9._-]')


def normalize_label_key(key: str) -> str:
    """Replace every character not allowed in a resource name with '-'"""
    return _INVALID_KEY_CHARS.sub('-', key)


def normalize_labels_for_machine_class(labels: Mapping[str, str]) -> Dict[str, str]:
    """
    Sanitize label keys so they can be used as machine class tags.

    'a/b/c' becomes 'a-b-c'; values are left untouched. Keys are processed in
    sorted order, so when two keys normalize to the same result the
    lexicographically greatest original key wins.
    """
    if not labels:
        return {}

    normalized = {}
    for key in sorted(labels):
        normalized[normalize_label_key(key)] = labels[key]
    return normalized


def zone_topology_labels(zone: str) -> Dict[str, str]:
    """Topology labels for a machine deployment in `zone`"""
    return {
        CSI_DISK_DRIVER_TOPOLOGY_KEY: zone,
        CSI_MANILA_DRIVER_TOPOLOGY_KEY: zone,
    }


def cluster_tags(namespace: str) -> Dict[str, str]:
    """Tags marking a server as a node of the cluster living in `namespace`"""
    return {
        f"kubernetes.io-cluster-{namespace}": "1",
        "kubernetes.io-role-node": "1",
    }


def merge_string_maps(*maps: Mapping[str, str]) -> Dict[str, str]:
    """Merge maps left to right; later maps win. None entries are skipped"""
    merged = {}
    for m in maps:
        if m:
            merged.update(m)
    return merged
