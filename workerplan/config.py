"""
Config module - Operator settings read from the environment
"""
import logging
import os

logger = logging.getLogger(__name__)


def _env_bool(name, default):
    return os.getenv(name, default).lower() == 'true'


def _env_float(name, default):
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid value {value!r} for {name}, using {default}")
        return default


def get_operator_config():
    """Get operator configuration from environment"""
    return {
        'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'leader_election': _env_bool('LEADER_ELECTION_ENABLED', 'true'),
        'operator_name': os.getenv('OPERATOR_NAME', 'workerplan'),
        'metrics_enabled': _env_bool('METRICS_ENABLED', 'true'),
        'metrics_port': int(_env_float('METRICS_PORT', 8080)),
        'retry_delay': _env_float('RETRY_DELAY_SECONDS', 30.0),
        'reconcile_interval': _env_float('RECONCILE_INTERVAL_SECONDS', 300.0),
    }
