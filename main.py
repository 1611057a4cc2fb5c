#!/usr/bin/env python3
"""
WORKERPLAN - Worker pool planner for OpenStack-backed Kubernetes clusters
Operator entry point: logging, cluster access and kopf settings
"""
import sys
import logging
from datetime import datetime, timezone

import kopf
from kubernetes import config
from prometheus_client import start_http_server

from workerplan.config import get_operator_config

OPERATOR_CONFIG = get_operator_config()

logging.basicConfig(
    level=getattr(logging, OPERATOR_CONFIG['log_level'], logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

PEERING_LIFETIME = 60
WATCH_SERVER_TIMEOUT = 600
WATCH_CLIENT_TIMEOUT = 660


def load_kubernetes_config():
    """Use the in-cluster service account, falling back to the local kubeconfig"""
    for loader, source in ((config.load_incluster_config, "in-cluster"), (config.load_kube_config, "kubeconfig")):
        try:
            loader()
        except config.ConfigException:
            continue
        logger.info(f"Loaded {source} Kubernetes configuration")
        return

    logger.error("Could not load Kubernetes configuration")
    sys.exit(1)


def configure_peering(settings: kopf.OperatorSettings):
    if not OPERATOR_CONFIG['leader_election']:
        settings.peering.standalone = True
        return
    settings.peering.priority = 0
    settings.peering.name = OPERATOR_CONFIG['operator_name']
    settings.peering.lifetime = PEERING_LIFETIME


def start_metrics_server():
    if not OPERATOR_CONFIG['metrics_enabled']:
        logger.info("Metrics server disabled")
        return
    port = OPERATOR_CONFIG['metrics_port']
    start_http_server(port)
    logger.info(f"Metrics server started on port {port}")


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_):
    """Apply operator settings and start the metrics server"""
    load_kubernetes_config()
    configure_peering(settings)

    settings.watching.server_timeout = WATCH_SERVER_TIMEOUT
    settings.watching.client_timeout = WATCH_CLIENT_TIMEOUT

    start_metrics_server()
    logger.info(f"Operator {OPERATOR_CONFIG['operator_name']} configured")


@kopf.on.probe(id='now')
def get_current_timestamp(**kwargs):
    """Liveness probe reporting the current time"""
    return datetime.now(timezone.utc).isoformat()


# Registers the Worker handlers with kopf
from handlers import worker  # noqa: E402,F401


if __name__ == '__main__':
    kopf.run()
