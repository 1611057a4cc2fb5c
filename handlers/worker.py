"""
Worker CR Handler
Plans machine deployments and machine classes for Worker resources and applies them
"""
import kopf
import logging
from datetime import datetime, timezone
from kubernetes import client

from workerplan import config, machineclass, metrics, planner, state
from workerplan.errors import PlanningError
from workerplan.models import ClusterContext, Worker

logger = logging.getLogger(__name__)

GROUP = state.GROUP
VERSION = state.VERSION
PLURAL = state.WORKERS

RECONCILE_INTERVAL = config.get_operator_config()['reconcile_interval']


def load_cluster(namespace):
    """Load the cluster context of the shoot living in `namespace`"""
    try:
        cluster = state.get_cluster(namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise kopf.TemporaryError(f"Cluster {namespace} not found", delay=config.get_operator_config()['retry_delay'])
        logger.error(f"Failed to read cluster {namespace}: {e}")
        raise

    return ClusterContext.from_resource(cluster)


def previous_class_names(body):
    """Machine class names recorded by the last successful reconciliation"""
    deployments = (body.get('status') or {}).get('machineDeployments') or []
    return {d['className'] for d in deployments if d.get('className')}


def report_failure(namespace, name, message, retry_delay):
    """Record a failed reconciliation in the metrics and the status, and ask kopf to retry"""
    worker_key = f"{namespace}/{name}"
    logger.error(f"{message} for worker {worker_key}")
    metrics.observe_planning(worker_key, 'failed')
    state.patch_status(namespace, name, {
        'phase': 'Failed',
        'message': message,
        'lastUpdated': datetime.now(timezone.utc).isoformat()
    })
    return kopf.TemporaryError(message, delay=retry_delay)


def reconcile(body, name, namespace):
    """
    Plan the worker, apply the result and remove machine classes no longer in use
    Planning and apply errors are reported in the status and retried by kopf
    """
    settings = config.get_operator_config()
    worker_key = f"{namespace}/{name}"

    with metrics.worker_planning_duration.labels(worker=worker_key).time():
        cluster = load_cluster(namespace)

        try:
            worker = Worker.from_resource(body)
            plan = planner.make_plan(worker, cluster)
        except PlanningError as e:
            raise report_failure(namespace, name, f"Planning failed: {e}", settings['retry_delay'])

        logger.info(f"Planned {len(plan)} machine deployments for worker {worker_key}")

        # Classes of the previous generation stay until the next reconciliation
        keep = {d.class_name for d in plan.deployments} | previous_class_names(body)
        try:
            applied = machineclass.deploy_machine_classes(namespace, planner.machine_class_values(plan))
            removed = machineclass.cleanup_machine_classes(namespace, keep=keep)
        except client.exceptions.ApiException as e:
            raise report_failure(namespace, name, f"Applying machine classes failed: {e}", settings['retry_delay'])

    metrics.observe_planning(worker_key, 'succeeded', deployments=len(plan))

    state.patch_status(namespace, name, {
        'phase': 'Ready',
        'message': f'{len(applied)} machine classes applied, {len(removed)} removed',
        'providerStatus': planner.worker_provider_status(plan, worker.server_group_dependencies),
        'machineDeployments': [d.to_dict() for d in plan.deployments],
        'summary': state.compute_summary(worker, plan),
        'lastUpdated': datetime.now(timezone.utc).isoformat()
    })

    return {'message': f'Worker {name} planned with {len(plan)} machine deployments'}


@kopf.on.resume(GROUP, VERSION, PLURAL)
@kopf.on.create(GROUP, VERSION, PLURAL)
@kopf.on.update(GROUP, VERSION, PLURAL)
def reconcile_worker(body, name, namespace, **kwargs):
    """Handle Worker creation, update and operator restarts"""
    logger.info(f"Reconciling worker {namespace}/{name}")
    return reconcile(body, name, namespace)


@kopf.timer(GROUP, VERSION, PLURAL, interval=RECONCILE_INTERVAL, idle=RECONCILE_INTERVAL)
def resync_worker(body, name, namespace, **kwargs):
    """Periodically re-plan so changes in the cluster or cloud profile are picked up"""
    logger.debug(f"Resyncing worker {namespace}/{name}")
    reconcile(body, name, namespace)


@kopf.on.delete(GROUP, VERSION, PLURAL)
def delete_worker(name, namespace, **kwargs):
    """Handle Worker deletion"""
    logger.info(f"Worker {namespace}/{name} deleted")
    deleted = machineclass.cleanup_machine_classes(namespace)
    return {'message': f'Worker {name} cleanup complete, removed {len(deleted)} machine classes'}
