"""
Hashing module - Computes the rolling-update identity of a worker pool

The hash becomes part of the machine class name. It must change whenever a
change to the pool requires replacing its machines, and must not change for
anything else (labels that do not trigger rolling, declaration order, ...).
"""
import hashlib
from typing import Iterable, List, Optional

from .models import MachineLabel, WorkerPool
from .version import major_minor

HASH_LENGTH = 5


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode('utf-8')).hexdigest()


def filter_rolling_labels(machine_labels: Iterable[MachineLabel]) -> List[MachineLabel]:
    """Return the labels that trigger rolling on update, sorted by name"""
    rolling = [ml for ml in machine_labels or () if ml.trigger_rolling_on_update]
    return sorted(rolling, key=lambda ml: (ml.name, ml.value))


def hash_data(pool: WorkerPool, kubernetes_version: str, image_reference: Optional[str] = None,
              extra: Optional[str] = None) -> List[str]:
    """
    Build the ordered list of values the pool hash is computed over.

    Raises ConfigurationError when the effective Kubernetes version is invalid.
    """
    data = [
        major_minor(pool.kubernetes_version or kubernetes_version),
        pool.machine_type,
        f"{pool.machine_image.name}:{pool.machine_image.version}",
    ]

    if image_reference is not None:
        data.append(f"image={image_reference}")

    if pool.volume is not None:
        data.append(f"volume.size={pool.volume.size}")
        if pool.volume.type:
            data.append(f"volume.type={pool.volume.type}")

    for label in filter_rolling_labels(pool.machine_labels):
        data.append(f"label:{label.name}={label.value}")

    if extra is not None:
        data.append(f"extra={extra}")

    return data


def worker_pool_hash(pool: WorkerPool, kubernetes_version: str, image_reference: Optional[str] = None,
                     extra: Optional[str] = None) -> str:
    """
    Compute the short identity hash of a worker pool.

    Every value is hashed on its own and the digests are hashed again, so no
    value can bleed into its neighbour. `extra` is an optional identity input
    such as the id of the pool's server group; None leaves it out entirely.
    """
    digests = "".join(_sha256_hex(v) for v in hash_data(pool, kubernetes_version, image_reference, extra))
    return _sha256_hex(digests)[:HASH_LENGTH]
