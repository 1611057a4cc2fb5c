"""
Unit tests for infrastructure status decoding
"""
import json

import pytest

from workerplan.errors import ConfigurationError, PreconditionError
from workerplan.infrastructure import (
    decode_infrastructure_status,
    find_security_group_by_purpose,
    find_subnet_by_purpose,
)


class TestDecodeInfrastructureStatus:
    """Tests for decode_infrastructure_status"""

    def test_document(self, infrastructure_status):
        status = decode_infrastructure_status(infrastructure_status)
        assert status.network_id == "network-id"
        assert status.key_name == "key-name"
        assert find_subnet_by_purpose(status, "nodes").id == "subnetID"
        assert find_security_group_by_purpose(status, "nodes").name == "nodes-sec-group"

    def test_json(self, infrastructure_status):
        raw = json.dumps(infrastructure_status)
        assert decode_infrastructure_status(raw) == decode_infrastructure_status(infrastructure_status)
        assert decode_infrastructure_status(raw.encode()) == decode_infrastructure_status(infrastructure_status)

    def test_undecodable(self):
        """Test missing, empty and malformed raw status"""
        for raw in (None, "", b"", "{not json", "[]", 42):
            with pytest.raises(ConfigurationError):
                decode_infrastructure_status(raw)

    def test_invalid_document(self, infrastructure_status):
        """Test documents of the wrong shape are configuration errors"""
        infrastructure_status["securityGroups"] = "nodes-sec-group"
        with pytest.raises(ConfigurationError):
            decode_infrastructure_status(infrastructure_status)

    def test_empty_document_decodes(self):
        status = decode_infrastructure_status({})
        assert status.security_groups == ()


class TestFindByPurpose:
    """Tests for the purpose lookups"""

    def test_missing_security_group(self):
        with pytest.raises(PreconditionError):
            find_security_group_by_purpose(decode_infrastructure_status({}), "nodes")

    def test_missing_subnet(self, infrastructure_status):
        infrastructure_status["networks"]["subnets"] = [{"purpose": "router", "id": "x"}]
        with pytest.raises(PreconditionError):
            find_subnet_by_purpose(decode_infrastructure_status(infrastructure_status), "nodes")
