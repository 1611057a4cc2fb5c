"""
Infrastructure module - Decodes the infrastructure status and checks node prerequisites
"""
import json
from collections.abc import Mapping
from typing import Any

from .errors import ConfigurationError, PreconditionError
from .models import InfrastructureStatus, SecurityGroup, Subnet


def decode_infrastructure_status(raw: Any) -> InfrastructureStatus:
    """
    Decode the infrastructure provider status of a worker.

    Accepts an already-parsed document or its JSON encoding. A missing or
    empty raw value cannot be decoded.
    """
    if raw is None:
        raise ConfigurationError("infrastructure provider status is missing")

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode('utf-8')

    if isinstance(raw, str):
        if not raw.strip():
            raise ConfigurationError("infrastructure provider status is empty")
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise ConfigurationError(f"could not decode infrastructure provider status: {e}") from e

    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"could not decode infrastructure provider status: expected an object, got {type(raw).__name__}"
        )

    return InfrastructureStatus.from_dict(dict(raw))


def find_security_group_by_purpose(status: InfrastructureStatus, purpose: str) -> SecurityGroup:
    for group in status.security_groups:
        if group.purpose == purpose:
            return group
    raise PreconditionError(f"cannot find security group with purpose {purpose!r}")


def find_subnet_by_purpose(status: InfrastructureStatus, purpose: str) -> Subnet:
    for subnet in status.subnets:
        if subnet.purpose == purpose:
            return subnet
    raise PreconditionError(f"cannot find subnet with purpose {purpose!r}")
