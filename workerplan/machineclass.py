"""
Machine class module - Applies planned machine classes to the cluster
"""
import logging

from kubernetes import client

from .labels import LABEL_MANAGED_BY, MANAGED_BY
from .models import MachineClass

logger = logging.getLogger(__name__)

MACHINE_GROUP = "machine.sapcloud.io"
MACHINE_VERSION = MachineClass.VERSION
MACHINE_CLASSES = "machineclasses"

PROVIDER = "OpenStack"

# Keys of the chart values that live outside the provider spec
_TOP_LEVEL_KEYS = ('name', 'labels', 'credentialsSecretRef', 'nodeTemplate', 'secret')


def build_machine_class(namespace, values):
    """Build a MachineClass object from the chart values of one machine class"""
    name = values['name']
    provider_spec = {k: v for k, v in values.items() if k not in _TOP_LEVEL_KEYS}

    labels = dict(values.get('labels') or {})
    labels[LABEL_MANAGED_BY] = MANAGED_BY

    body = {
        'apiVersion': f"{MACHINE_GROUP}/{MACHINE_VERSION}",
        'kind': 'MachineClass',
        'metadata': {
            'name': name,
            'namespace': namespace,
            'labels': labels,
        },
        'provider': PROVIDER,
        'providerSpec': provider_spec,
        'credentialsSecretRef': values['credentialsSecretRef'],
        'secretRef': {
            'name': name,
            'namespace': namespace,
        },
    }
    if 'nodeTemplate' in values:
        body['nodeTemplate'] = values['nodeTemplate']
    return body


def build_user_data_secret(namespace, values):
    """Build the Secret carrying the cloud config of one machine class"""
    return client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=values['name'],
            namespace=namespace,
            labels={LABEL_MANAGED_BY: MANAGED_BY},
        ),
        type='Opaque',
        string_data={'userData': (values.get('secret') or {}).get('cloudConfig', '')},
    )


def _apply_secret(v1, namespace, secret):
    name = secret.metadata.name
    try:
        v1.create_namespaced_secret(namespace, secret)
        logger.info(f"Created user data secret {namespace}/{name}")
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
        v1.patch_namespaced_secret(name, namespace, secret)
        logger.debug(f"Updated user data secret {namespace}/{name}")


def _apply_machine_class(api, namespace, body):
    name = body['metadata']['name']
    try:
        api.create_namespaced_custom_object(MACHINE_GROUP, MACHINE_VERSION, namespace, MACHINE_CLASSES, body)
        logger.info(f"Created machine class {namespace}/{name}")
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
        api.patch_namespaced_custom_object(MACHINE_GROUP, MACHINE_VERSION, namespace, MACHINE_CLASSES, name, body)
        logger.debug(f"Updated machine class {namespace}/{name}")


def deploy_machine_classes(namespace, values):
    """
    Create or update every machine class in the chart values
    Returns the names of the applied machine classes
    """
    api = client.CustomObjectsApi()
    v1 = client.CoreV1Api()

    applied = []
    for class_values in values.get('machineClasses', []):
        try:
            _apply_secret(v1, namespace, build_user_data_secret(namespace, class_values))
            _apply_machine_class(api, namespace, build_machine_class(namespace, class_values))
        except Exception as e:
            logger.error(f"Failed to apply machine class {class_values.get('name')}: {e}")
            raise
        applied.append(class_values['name'])

    return applied


def _delete_machine_class(api, v1, namespace, name):
    """
    Delete a machine class and its user data secret
    The secret is deleted first; a class whose secret cannot be deleted is kept
    Returns False when the class had to be kept
    """
    try:
        v1.delete_namespaced_secret(name, namespace)
    except client.exceptions.ApiException as e:
        if e.status != 404:
            logger.warning(f"Failed to delete user data secret {namespace}/{name}, keeping machine class: {e}")
            return False
        logger.debug(f"User data secret {namespace}/{name} already gone")

    try:
        api.delete_namespaced_custom_object(MACHINE_GROUP, MACHINE_VERSION, namespace, MACHINE_CLASSES, name)
    except client.exceptions.ApiException as e:
        if e.status != 404:
            logger.warning(f"Failed to delete machine class {namespace}/{name}: {e}")
            return False
        logger.debug(f"Machine class {namespace}/{name} already gone")

    return True


def cleanup_machine_classes(namespace, keep=()):
    """
    Delete managed machine classes (and their secrets) that are not in `keep`
    Returns the names of the machine classes that are gone afterwards
    """
    api = client.CustomObjectsApi()
    v1 = client.CoreV1Api()
    keep = set(keep)

    try:
        existing = api.list_namespaced_custom_object(
            MACHINE_GROUP, MACHINE_VERSION, namespace, MACHINE_CLASSES,
            label_selector=f"{LABEL_MANAGED_BY}={MANAGED_BY}"
        )
    except Exception as e:
        logger.error(f"Failed to list machine classes in {namespace}: {e}")
        raise

    deleted = []
    for item in existing.get('items', []):
        name = item['metadata']['name']
        if name in keep:
            continue
        if _delete_machine_class(api, v1, namespace, name):
            logger.info(f"Deleted stale machine class {namespace}/{name}")
            deleted.append(name)

    return deleted
