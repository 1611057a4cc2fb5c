"""
Metrics module - Prometheus metrics for worker planning
"""
from prometheus_client import Counter, Gauge, Histogram

worker_planning_total = Counter(
    'worker_planning_total',
    'Total number of worker planning runs',
    ['worker', 'result']
)
worker_machine_deployments = Gauge(
    'worker_machine_deployments',
    'Number of machine deployments planned for a worker',
    ['worker']
)
worker_planning_duration = Histogram(
    'worker_planning_duration_seconds',
    'Duration of planning and applying a worker',
    ['worker']
)


def observe_planning(worker, result, deployments=None):
    """Record the outcome of a planning run"""
    worker_planning_total.labels(worker=worker, result=result).inc()
    if deployments is not None:
        worker_machine_deployments.labels(worker=worker).set(deployments)
