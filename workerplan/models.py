"""
Models module - Typed views of the Worker, Cluster and machine class documents

Inputs are pydantic models validated from the camelCase custom resource
documents with `from_dict`/`from_resource`; invalid documents raise
ConfigurationError. Outputs are plain records rendering back to camelCase
with `to_dict`/`to_values`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError

ARCHITECTURE_AMD64 = "amd64"
ARCHITECTURE_ARM64 = "arm64"

PURPOSE_NODES = "nodes"

PROVIDER_API_VERSION = "workerplan.io/v1alpha1"

DocumentT = TypeVar('DocumentT', bound='Document')


def _validate(model: Type[DocumentT], data: Any, kind: str) -> DocumentT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid {kind}: {e}") from e


def _default_architecture(value: Any) -> Any:
    return value or ARCHITECTURE_AMD64


class Document(BaseModel):
    """Base of the records read from camelCase resource documents"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @field_validator('*', mode='before')
    @classmethod
    def null_means_unset(cls, value, info):
        # An explicit null in a document behaves like an omitted field
        if value is None:
            field_info = cls.model_fields[info.field_name]
            if not field_info.is_required():
                return field_info.get_default(call_default_factory=True)
        return value


# ----------------------------------------------------------------------------
# Worker pool
# ----------------------------------------------------------------------------

class MachineImage(Document):
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)


class MachineLabel(Document):
    """A provider label; only rolling-triggering labels take part in the pool hash"""
    name: str = Field(min_length=1)
    value: str = ""
    trigger_rolling_on_update: StrictBool = False


class ServerGroup(Document):
    policy: str = Field(min_length=1)


class WorkerConfig(Document):
    """Provider specific configuration of a worker pool"""
    server_group: Optional[ServerGroup] = None
    machine_labels: Tuple[MachineLabel, ...] = ()


class Volume(Document):
    size: str = Field(min_length=1)
    type: Optional[str] = None


class RollingUpdateSettings(Document):
    """Settings handed to the machine controller as they are"""
    drain_timeout: Optional[str] = None
    creation_timeout: Optional[str] = None
    health_timeout: Optional[str] = None
    max_evict_retries: Optional[StrictInt] = Field(default=None, ge=0)
    node_conditions: Tuple[str, ...] = ()

    def to_machine_configuration(self) -> Dict[str, Any]:
        """Render in the machine controller format (node conditions comma-joined)"""
        config = self.model_dump(
            by_alias=True,
            exclude_none=True,
            include={'drain_timeout', 'creation_timeout', 'health_timeout', 'max_evict_retries'},
        )
        if self.node_conditions:
            config['nodeConditions'] = ",".join(self.node_conditions)
        return config


class PoolNodeTemplate(Document):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    capacity: Dict[str, str] = Field(default_factory=dict)


class WorkerPool(Document):
    name: str = Field(min_length=1)
    minimum: StrictInt = 0
    maximum: StrictInt = 0
    max_surge: Union[StrictInt, StrictStr] = 0
    max_unavailable: Union[StrictInt, StrictStr] = 0
    machine_type: str = Field(min_length=1)
    machine_image: MachineImage
    zones: Tuple[str, ...] = ()
    labels: Dict[str, str] = Field(default_factory=dict)
    provider_config: WorkerConfig = Field(default_factory=WorkerConfig)
    rolling_update_settings: Optional[RollingUpdateSettings] = None
    kubernetes_version: Optional[str] = None
    volume: Optional[Volume] = None
    node_template: Optional[PoolNodeTemplate] = None
    user_data: str = ""
    architecture: str = ARCHITECTURE_AMD64

    default_architecture = field_validator('architecture', mode='before')(_default_architecture)

    @property
    def machine_labels(self) -> Tuple[MachineLabel, ...]:
        return self.provider_config.machine_labels

    @property
    def node_capacity(self) -> Optional[Dict[str, str]]:
        if self.node_template is None or not self.node_template.capacity:
            return None
        return self.node_template.capacity

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkerPool:
        return _validate(cls, data, f"pool {data.get('name')!r}")


# ----------------------------------------------------------------------------
# Worker and its previously persisted provider status
# ----------------------------------------------------------------------------

class SecretReference(Document):
    name: str = ""
    namespace: str = ""

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class ServerGroupDependency(Document):
    pool_name: str = ""
    name: str = ""
    id: str = ""

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class MachineImageStatus(Document):
    """A resolved machine image; exactly one of `image` (name) or `id` is set"""
    name: str = ""
    version: str = ""
    image: Optional[str] = None
    id: Optional[str] = None
    architecture: str = ARCHITECTURE_AMD64

    default_architecture = field_validator('architecture', mode='before')(_default_architecture)

    @field_validator('image', 'id', mode='before')
    @classmethod
    def empty_reference(cls, value):
        return value or None

    def to_dict(self) -> Dict[str, str]:
        result = {'name': self.name, 'version': self.version}
        if self.id:
            result['id'] = self.id
        else:
            result['image'] = self.image
        result['architecture'] = self.architecture
        return result


class Worker(Document):
    namespace: str = ""
    region: str = ""
    secret_ref: SecretReference = Field(default_factory=SecretReference)
    pools: Tuple[WorkerPool, ...] = ()
    infrastructure_status: Any = None
    server_group_dependencies: Tuple[ServerGroupDependency, ...] = ()
    machine_images: Tuple[MachineImageStatus, ...] = ()

    @classmethod
    def from_resource(cls, body: Mapping[str, Any]) -> Worker:
        """Validate a Worker resource together with its last recorded provider status"""
        metadata = body.get('metadata') or {}
        spec = body.get('spec') or {}
        provider_status = (body.get('status') or {}).get('providerStatus') or {}

        namespace = metadata.get('namespace') or ''
        secret_ref = spec.get('secretRef') or {}

        return _validate(cls, {
            'namespace': namespace,
            'region': spec.get('region'),
            'secretRef': {
                'name': secret_ref.get('name'),
                'namespace': secret_ref.get('namespace') or namespace,
            },
            'pools': spec.get('pools'),
            'infrastructureStatus': spec.get('infrastructureProviderStatus'),
            'serverGroupDependencies': provider_status.get('serverGroupDependencies'),
            'machineImages': provider_status.get('machineImages'),
        }, f"worker {namespace}/{metadata.get('name')}")


# ----------------------------------------------------------------------------
# Cluster context and the cloud profile image catalog
# ----------------------------------------------------------------------------

class RegionImageMapping(Document):
    name: str = ""
    id: str = ""
    architecture: str = ARCHITECTURE_AMD64

    default_architecture = field_validator('architecture', mode='before')(_default_architecture)


class CatalogImageVersion(Document):
    version: str = ""
    image: Optional[str] = None
    regions: Tuple[RegionImageMapping, ...] = ()

    @field_validator('image', mode='before')
    @classmethod
    def empty_image(cls, value):
        return value or None


class CatalogImage(Document):
    name: str = ""
    versions: Tuple[CatalogImageVersion, ...] = ()


class ImageCatalog(Document):
    images: Tuple[CatalogImage, ...] = ()

    @classmethod
    def from_provider_config(cls, config: Optional[Mapping[str, Any]]) -> ImageCatalog:
        """Build the catalog from a cloud profile's provider config `machineImages`"""
        if not config:
            return cls()
        return _validate(cls, {'images': config.get('machineImages')}, "cloud profile machine images")


class ClusterContext(Document):
    kubernetes_version: str = ""
    region: str = ""
    cloud_profile_name: str = ""
    image_catalog: ImageCatalog = Field(default_factory=ImageCatalog)
    pod_network: Optional[str] = None

    @classmethod
    def from_resource(cls, body: Mapping[str, Any]) -> ClusterContext:
        metadata = body.get('metadata') or {}
        spec = body.get('spec') or {}
        cloud_profile = spec.get('cloudProfile') or {}
        shoot = spec.get('shoot') or {}
        return _validate(cls, {
            'kubernetesVersion': shoot.get('kubernetesVersion'),
            'region': shoot.get('region'),
            'cloudProfileName': cloud_profile.get('name'),
            'imageCatalog': ImageCatalog.from_provider_config(cloud_profile.get('providerConfig')),
            'podNetwork': shoot.get('podNetwork'),
        }, f"cluster {metadata.get('name')}")


# ----------------------------------------------------------------------------
# Infrastructure status
# ----------------------------------------------------------------------------

class SecurityGroup(Document):
    purpose: str = ""
    name: str = ""
    id: Optional[str] = None


class Subnet(Document):
    purpose: str = ""
    id: str = ""


class Networks(Document):
    id: str = ""
    subnets: Tuple[Subnet, ...] = ()


class NodeAccess(Document):
    key_name: str = ""


class InfrastructureStatus(Document):
    networks: Networks = Field(default_factory=Networks)
    node: NodeAccess = Field(default_factory=NodeAccess)
    security_groups: Tuple[SecurityGroup, ...] = ()

    @property
    def network_id(self) -> str:
        return self.networks.id

    @property
    def subnets(self) -> Tuple[Subnet, ...]:
        return self.networks.subnets

    @property
    def key_name(self) -> str:
        return self.node.key_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InfrastructureStatus:
        return _validate(cls, data, "infrastructure provider status")


# ----------------------------------------------------------------------------
# Planning outputs
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class ZoneDeployment:
    name: str
    class_name: str
    secret_name: str
    minimum: int
    maximum: int
    max_surge: int
    max_unavailable: int
    labels: Mapping[str, str] = field(default_factory=dict)
    machine_configuration: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.name,
            'className': self.class_name,
            'secretName': self.secret_name,
            'minimum': self.minimum,
            'maximum': self.maximum,
            'maxSurge': self.max_surge,
            'maxUnavailable': self.max_unavailable,
            'labels': dict(self.labels),
        }
        if self.machine_configuration:
            result['machineConfiguration'] = dict(self.machine_configuration)
        return result


@dataclass(frozen=True)
class NodeTemplate:
    capacity: Mapping[str, str]
    instance_type: str
    region: str
    zone: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'capacity': dict(self.capacity),
            'instanceType': self.instance_type,
            'region': self.region,
            'zone': self.zone,
        }


@dataclass(frozen=True)
class MachineClass:
    """
    Machine class payload for the OpenStack machine provider.

    `to_values` renders the flat document consumed by the machine class
    chart. Optional fields are left out of the document when unset.
    """
    VERSION = "v1alpha1"

    name: str
    region: str
    availability_zone: str
    machine_type: str
    key_name: str
    network_id: str
    subnet_id: str
    security_groups: Tuple[str, ...]
    tags: Mapping[str, str]
    secret: Mapping[str, str]
    labels: Mapping[str, str]
    credentials_secret_ref: SecretReference
    image_name: Optional[str] = None
    image_id: Optional[str] = None
    pod_network_cidr: Optional[str] = None
    server_group_id: Optional[str] = None
    root_disk_size: Optional[int] = None
    root_disk_type: Optional[str] = None
    node_template: Optional[NodeTemplate] = None

    def to_values(self) -> Dict[str, Any]:
        values = {
            'name': self.name,
            'region': self.region,
            'availabilityZone': self.availability_zone,
            'machineType': self.machine_type,
            'keyName': self.key_name,
            'networkID': self.network_id,
            'subnetID': self.subnet_id,
            'securityGroups': list(self.security_groups),
            'tags': dict(self.tags),
            'secret': dict(self.secret),
            'labels': dict(self.labels),
            'credentialsSecretRef': self.credentials_secret_ref.to_dict(),
        }
        if self.image_id:
            values['imageID'] = self.image_id
        else:
            values['imageName'] = self.image_name
        if self.pod_network_cidr:
            values['podNetworkCidr'] = self.pod_network_cidr
        if self.server_group_id:
            values['serverGroupID'] = self.server_group_id
        if self.root_disk_size is not None:
            values['rootDiskSize'] = self.root_disk_size
        if self.root_disk_type:
            values['rootDiskType'] = self.root_disk_type
        if self.node_template is not None:
            values['nodeTemplate'] = self.node_template.to_dict()
        return values
