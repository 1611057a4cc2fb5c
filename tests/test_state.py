"""
Unit tests for status handling
"""
from workerplan import state
from workerplan.planner import make_plan


class TestDeepMerge:
    """Tests for deep_merge"""

    def test_nested(self):
        base = {"a": {"b": 1, "c": 2}, "d": [1]}
        merged = state.deep_merge(base, {"a": {"c": 3}, "d": [2]})
        assert merged == {"a": {"b": 1, "c": 3}, "d": [2]}

    def test_base_untouched(self):
        base = {"a": {"b": 1}}
        state.deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestPatchStatus:
    """Tests for patch_status"""

    def test_merges_current_status(self, mock_k8s_clients):
        api = mock_k8s_clients["custom_api"]
        api.get_namespaced_custom_object_status.return_value = {"status": {"phase": "Failed", "keep": "me"}}

        assert state.patch_status("ns", "worker", {"phase": "Ready"}) is True

        api.patch_namespaced_custom_object_status.assert_called_once_with(
            state.GROUP, state.VERSION, "ns", state.WORKERS, "worker",
            {"status": {"phase": "Ready", "keep": "me"}},
        )

    def test_not_found(self, mock_k8s_clients, api_exception):
        api = mock_k8s_clients["custom_api"]
        api.get_namespaced_custom_object_status.side_effect = api_exception(404)
        assert state.patch_status("ns", "worker", {"phase": "Ready"}) is False
        api.patch_namespaced_custom_object_status.assert_not_called()

    def test_api_error(self, mock_k8s_clients, api_exception):
        api = mock_k8s_clients["custom_api"]
        api.get_namespaced_custom_object_status.return_value = {}
        api.patch_namespaced_custom_object_status.side_effect = api_exception(500)
        assert state.patch_status("ns", "worker", {"phase": "Ready"}) is False


class TestClusterAndSummary:
    """Tests for get_cluster and compute_summary"""

    def test_get_cluster(self, mock_k8s_clients, cluster_body):
        api = mock_k8s_clients["custom_api"]
        api.get_cluster_custom_object.return_value = cluster_body
        assert state.get_cluster("shoot--foobar--openstack") == cluster_body
        api.get_cluster_custom_object.assert_called_once_with(
            state.GROUP, state.VERSION, state.CLUSTERS, "shoot--foobar--openstack"
        )

    def test_compute_summary(self, worker, cluster):
        summary = state.compute_summary(worker, make_plan(worker, cluster))
        assert summary == {"pools": 2, "machineDeployments": 4, "minimum": 35, "maximum": 55}
