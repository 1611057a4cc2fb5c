"""
Errors module - Failures raised while planning worker pools
"""


class PlanningError(Exception):
    """Base class for all planning failures"""


class ConfigurationError(PlanningError):
    """Malformed or unparsable input (versions, budgets, status documents)"""


class ResolutionError(PlanningError):
    """An image or external dependency could not be resolved for a pool"""


class PreconditionError(PlanningError):
    """Required infrastructure state is missing"""
