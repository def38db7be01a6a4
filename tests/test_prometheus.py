import json

import pytest

from meshcheck.prometheus import (
    DEFAULT_CUSTOM_PROMETHEUS,
    DEFAULT_PROMETHEUS,
    DEFAULT_THANOS,
    Prometheus,
    PrometheusResponse,
    PrometheusResponseError,
    PrometheusResult,
    api_url,
    parse_response,
)


class FakeExecutor:
    def __init__(self, output):
        self.output = output
        self.calls = []

    def __call__(self, selector, namespace, container, command):
        self.calls.append((selector, namespace, container, command))
        return self.output


SAMPLE = {
    "status": "success",
    "data": {
        "resultType": "vector",
        "result": [
            {"metric": {"__name__": "up", "job": "istiod"}, "value": [1700000000.5, "1"]}
        ],
    },
}


def test_parse_response_reads_fields():
    response = parse_response(json.dumps(SAMPLE))
    assert response.status == "success"
    assert response.data.result_type == "vector"
    assert response.data.result == [
        PrometheusResult(metric={"__name__": "up", "job": "istiod"}, value=[1700000000.5, "1"])
    ]


def test_parse_response_missing_fields_are_empty():
    response = parse_response('{"status": "success", "extra": 1}')
    assert response.status == "success"
    assert response.data.result == []
    assert response.data.result_type == ""


def test_parse_response_null_is_empty():
    assert parse_response("null") == PrometheusResponse()


def test_parse_response_invalid_json():
    with pytest.raises(PrometheusResponseError) as info:
        parse_response("not json")
    assert info.value.response == "not json"


@pytest.mark.parametrize(
    "document",
    ['{"status": 3}', '{"data": []}', '{"data": {"result": {}}}', "[1, 2]",
     '{"data": {"result": [{"metric": {"a": 1}}]}}'],
)
def test_parse_response_wrong_types(document):
    with pytest.raises(PrometheusResponseError):
        parse_response(document)


def test_api_url():
    assert api_url("targets?state=active") == "http://localhost:9090/api/v1/targets?state=active"


def test_api_command_uses_wget_and_escapes_quotes():
    command = DEFAULT_PROMETHEUS.api_command("a'b")
    assert command.startswith("wget -qO- '")
    assert "'\\\\''" in command
    assert command == "wget -qO- '" + api_url("a'b").replace("'", "'\\\\''") + "'"


def test_with_selector_returns_copy():
    changed = DEFAULT_PROMETHEUS.with_selector("x=y")
    assert changed.selector == "x=y"
    assert changed.container_name == DEFAULT_PROMETHEUS.container_name
    assert DEFAULT_PROMETHEUS.selector == "app=prometheus"


def test_with_container_name_returns_copy():
    changed = DEFAULT_PROMETHEUS.with_container_name("other")
    assert changed.container_name == "other"
    assert DEFAULT_PROMETHEUS.container_name == "prometheus"


def test_defaults():
    custom = DEFAULT_PROMETHEUS.with_selector("prometheus=prometheus")
    assert (custom.selector, custom.container_name) == (
        DEFAULT_CUSTOM_PROMETHEUS.selector,
        DEFAULT_CUSTOM_PROMETHEUS.container_name,
    )
    assert DEFAULT_CUSTOM_PROMETHEUS.container_name == "prometheus"

    thanos = DEFAULT_PROMETHEUS.with_selector(
        "app.kubernetes.io/instance=thanos-querier"
    ).with_container_name("thanos-query")
    assert (thanos.selector, thanos.container_name) == (
        DEFAULT_THANOS.selector,
        DEFAULT_THANOS.container_name,
    )
    assert DEFAULT_THANOS.selector == "app.kubernetes.io/instance=thanos-querier"
    assert DEFAULT_THANOS.container_name == "thanos-query"


def test_query_runs_command_and_parses():
    fake = FakeExecutor(json.dumps(SAMPLE))
    prom = Prometheus("app=prometheus", "prometheus", executor=fake)
    response = prom.query("istio-system", 'pilot_info{mesh_id="unique-mesh-id"}')
    assert response.status == "success"
    assert len(response.data.result) == 1
    selector, namespace, container, command = fake.calls[0]
    assert (selector, namespace, container) == ("app=prometheus", "istio-system", "prometheus")
    assert "query?query=pilot_info%7Bmesh_id%3D%22unique-mesh-id%22%7D" in command


def test_query_encodes_spaces_as_plus():
    fake = FakeExecutor("{}")
    Prometheus("s", "c", executor=fake).query("ns", "up == 1")
    assert "query?query=up+%3D%3D+1" in fake.calls[0][3]


def test_query_bad_output_raises():
    prom = Prometheus("s", "c", executor=FakeExecutor("<html>"))
    with pytest.raises(PrometheusResponseError):
        prom.query("ns", "up")


def test_targets_returns_raw_output():
    fake = FakeExecutor('{"status":"success"}')
    thanos = DEFAULT_THANOS.with_container_name("thanos-query")
    thanos = Prometheus(thanos.selector, thanos.container_name, executor=fake)
    assert thanos.targets("openshift-monitoring") == '{"status":"success"}'
    assert fake.calls[0][3] == "wget -qO- '" + api_url("targets?state=active") + "'"
    assert fake.calls[0][1] == "openshift-monitoring"