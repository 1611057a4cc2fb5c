"""
Planner module - Computes machine deployments and machine classes for worker pools

make_plan is a pure function of its inputs: it performs no I/O, keeps no state
between calls and either returns the complete plan or raises a PlanningError.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from kubernetes.utils import parse_quantity

from .distribution import distribute_max_surge, distribute_max_unavailable, distribute_over_zones, parse_budget
from .errors import ConfigurationError, ResolutionError
from .hashing import worker_pool_hash
from .images import append_machine_image, find_image_in_catalog, find_machine_image
from .infrastructure import decode_infrastructure_status, find_security_group_by_purpose, find_subnet_by_purpose
from .labels import (
    LABEL_PURPOSE,
    PURPOSE_MACHINE_CLASS,
    cluster_tags,
    merge_string_maps,
    normalize_labels_for_machine_class,
    zone_topology_labels,
)
from .models import (
    PROVIDER_API_VERSION,
    PURPOSE_NODES,
    ClusterContext,
    InfrastructureStatus,
    MachineClass,
    MachineImageStatus,
    NodeTemplate,
    ServerGroupDependency,
    Worker,
    WorkerPool,
    ZoneDeployment,
)
from .version import Version

_GIB = 1024 ** 3


@dataclass(frozen=True)
class Plan:
    """
    Result of planning a worker.

    `deployments` and `machine_classes` are parallel: entry i of both belongs
    to the same pool and zone. Iterating a plan yields those pairs ordered by
    pool declaration, then zone index.
    """
    deployments: Tuple[ZoneDeployment, ...]
    machine_classes: Tuple[MachineClass, ...]
    machine_images: Tuple[MachineImageStatus, ...]

    def __iter__(self) -> Iterator[Tuple[ZoneDeployment, MachineClass]]:
        return iter(zip(self.deployments, self.machine_classes))

    def __len__(self) -> int:
        return len(self.deployments)


def deployment_name(namespace: str, pool_name: str, zone_index: int) -> str:
    """Name of the machine deployment of a pool in the zone at `zone_index` (0-based)"""
    return f"{namespace}-{pool_name}-z{zone_index + 1}"


def validate_pool(pool: WorkerPool):
    """Reject pools whose sizes or zones cannot be planned"""
    if not pool.zones:
        raise ConfigurationError(f"pool {pool.name!r} does not define any zones")
    if pool.minimum < 0 or pool.maximum < 0:
        raise ConfigurationError(f"pool {pool.name!r} has a negative minimum or maximum")
    if pool.minimum > pool.maximum:
        raise ConfigurationError(
            f"pool {pool.name!r} has minimum {pool.minimum} greater than maximum {pool.maximum}"
        )
    parse_budget(pool.max_surge)
    parse_budget(pool.max_unavailable)


def resolve_machine_image(pool: WorkerPool, worker: Worker, cluster: ClusterContext) -> MachineImageStatus:
    """
    Resolve the pool's machine image for the worker's region.

    The cloud profile catalog is consulted first; images recorded in the
    worker's previous status are the fallback for images that were removed
    from the cloud profile after they were rolled out.
    """
    name = pool.machine_image.name
    version = pool.machine_image.version
    region = worker.region or cluster.region

    image = find_image_in_catalog(cluster.image_catalog, name, version, region, pool.architecture)
    if image is not None:
        return image

    image = find_machine_image(worker.machine_images, name, version, pool.architecture)
    if image is not None:
        return image

    raise ResolutionError(
        f"could not find machine image for pool {pool.name!r}: {name}/{version}/{pool.architecture} "
        f"is not defined in cloud profile {cluster.cloud_profile_name!r} for region {region!r}"
    )


def resolve_server_group_id(pool: WorkerPool, dependencies: Mapping[str, ServerGroupDependency]) -> Optional[str]:
    """Return the id of the pool's server group, or None if the pool does not use one"""
    if pool.provider_config.server_group is None:
        return None

    dependency = dependencies.get(pool.name)
    if dependency is None:
        raise ResolutionError(
            f'server group is required for pool "{pool.name}", but no server group dependency found'
        )
    return dependency.id


def root_disk_size_gib(size: str) -> int:
    try:
        quantity = parse_quantity(size)
    except ValueError as e:
        raise ConfigurationError(f"invalid volume size {size!r}: {e}") from e
    return int(quantity // _GIB)


def _machine_class(worker: Worker, cluster: ClusterContext, pool: WorkerPool, zone: str, class_name: str,
                   infrastructure: InfrastructureStatus, security_group: str, subnet_id: str,
                   image: MachineImageStatus, server_group_id: Optional[str]) -> MachineClass:
    region = worker.region or cluster.region
    machine_labels = {ml.name: ml.value for ml in pool.machine_labels}

    node_template = None
    if pool.node_capacity:
        node_template = NodeTemplate(
            capacity=dict(pool.node_capacity),
            instance_type=pool.machine_type,
            region=region,
            zone=zone,
        )

    return MachineClass(
        name=class_name,
        region=region,
        availability_zone=zone,
        machine_type=pool.machine_type,
        key_name=infrastructure.key_name,
        network_id=infrastructure.network_id,
        subnet_id=subnet_id,
        security_groups=(security_group,),
        tags=merge_string_maps(
            normalize_labels_for_machine_class(pool.labels),
            machine_labels,
            cluster_tags(worker.namespace),
        ),
        secret={'cloudConfig': pool.user_data},
        labels={LABEL_PURPOSE: PURPOSE_MACHINE_CLASS},
        credentials_secret_ref=worker.secret_ref,
        image_name=image.image if not image.id else None,
        image_id=image.id or None,
        pod_network_cidr=cluster.pod_network,
        server_group_id=server_group_id,
        root_disk_size=root_disk_size_gib(pool.volume.size) if pool.volume else None,
        root_disk_type=pool.volume.type if pool.volume else None,
        node_template=node_template,
    )


def make_plan(worker: Worker, cluster: ClusterContext) -> Plan:
    """
    Plan all pools of `worker`.

    Returns the complete Plan, or raises ConfigurationError, ResolutionError
    or PreconditionError without any partial result.
    """
    Version(cluster.kubernetes_version)

    infrastructure = decode_infrastructure_status(worker.infrastructure_status)
    security_group = find_security_group_by_purpose(infrastructure, PURPOSE_NODES)
    subnet = find_subnet_by_purpose(infrastructure, PURPOSE_NODES)

    dependencies = {d.pool_name: d for d in worker.server_group_dependencies}

    seen = set()
    deployments: List[ZoneDeployment] = []
    machine_classes: List[MachineClass] = []
    machine_images: List[MachineImageStatus] = []

    for pool in worker.pools:
        if pool.name in seen:
            raise ConfigurationError(f"pool {pool.name!r} is defined more than once")
        seen.add(pool.name)

        validate_pool(pool)

        image = resolve_machine_image(pool, worker, cluster)
        append_machine_image(machine_images, image)

        server_group_id = resolve_server_group_id(pool, dependencies)

        pool_hash = worker_pool_hash(
            pool,
            cluster.kubernetes_version,
            image_reference=image.id or image.image,
            extra=server_group_id,
        )

        machine_configuration = None
        if pool.rolling_update_settings is not None:
            machine_configuration = pool.rolling_update_settings.to_machine_configuration()

        zone_count = len(pool.zones)
        for zone_index, zone in enumerate(pool.zones):
            name = deployment_name(worker.namespace, pool.name, zone_index)
            class_name = f"{name}-{pool_hash}"

            deployments.append(ZoneDeployment(
                name=name,
                class_name=class_name,
                secret_name=class_name,
                minimum=distribute_over_zones(zone_index, pool.minimum, zone_count),
                maximum=distribute_over_zones(zone_index, pool.maximum, zone_count),
                max_surge=distribute_max_surge(zone_index, pool.max_surge, zone_count, pool.maximum),
                max_unavailable=distribute_max_unavailable(zone_index, pool.max_unavailable, zone_count, pool.minimum),
                labels=merge_string_maps(pool.labels, zone_topology_labels(zone)),
                machine_configuration=machine_configuration,
            ))
            machine_classes.append(_machine_class(
                worker, cluster, pool, zone, class_name, infrastructure,
                security_group.name, subnet.id, image, server_group_id,
            ))

    return Plan(
        deployments=tuple(deployments),
        machine_classes=tuple(machine_classes),
        machine_images=tuple(machine_images),
    )


def machine_class_values(plan: Plan) -> Dict[str, Any]:
    """Values for the machine class chart"""
    return {'machineClasses': [mc.to_values() for mc in plan.machine_classes]}


def worker_provider_status(plan: Plan, server_group_dependencies: Iterable[ServerGroupDependency] = ()) -> Dict[str, Any]:
    """WorkerStatus document listing the images the plan resolved"""
    status = {
        'apiVersion': PROVIDER_API_VERSION,
        'kind': 'WorkerStatus',
        'machineImages': [image.to_dict() for image in plan.machine_images],
    }
    dependencies = [d.to_dict() for d in server_group_dependencies]
    if dependencies:
        status['serverGroupDependencies'] = dependencies
    return status
