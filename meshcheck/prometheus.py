"""Querying Prometheus or Thanos running inside a cluster pod."""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass, field, replace
from typing import Any, Callable
from urllib.parse import urlencode

from meshcheck import shell

__all__ = [
    "PrometheusResult",
    "PrometheusResultData",
    "PrometheusResponse",
    "Prometheus",
    "PrometheusResponseError",
    "parse_response",
    "api_url",
    "DEFAULT_PROMETHEUS",
    "DEFAULT_CUSTOM_PROMETHEUS",
    "DEFAULT_THANOS",
]

PodExecutor = Callable[[str, str, str, str], str]
"""Runs ``command`` in ``container`` of the first pod matching ``selector`` in ``namespace``."""


class PrometheusResponseError(ValueError):
    """The Prometheus API answer is not the expected JSON document."""

    def __init__(self, message: str, response: str):
        self.response = response
        super().__init__(f"could not parse Prometheus response as JSON: {message}")


@dataclass
class PrometheusResult:
    metric: dict[str, str] = field(default_factory=dict)
    value: list[Any] = field(default_factory=list)


@dataclass
class PrometheusResultData:
    result_type: str = ""
    result: list[PrometheusResult] = field(default_factory=list)


@dataclass
class PrometheusResponse:
    status: str = ""
    data: PrometheusResultData = field(default_factory=PrometheusResultData)


def _expect(value: Any, kind: type, what: str, response: str) -> Any:
    if not isinstance(value, kind):
        raise PrometheusResponseError(
            f"{what}: expected {kind.__name__}, got {type(value).__name__}", response
        )
    return value


def _parse_result(item: Any, response: str) -> PrometheusResult:
    if item is None:
        return PrometheusResult()
    _expect(item, dict, "result", response)
    metric = item.get("metric") or {}
    _expect(metric, dict, "metric", response)
    for key, val in metric.items():
        _expect(val, str, f"metric label {key}", response)
    value = item.get("value") or []
    _expect(value, list, "value", response)
    return PrometheusResult(metric=dict(metric), value=list(value))


def parse_response(text: str) -> PrometheusResponse:
    """Parse the JSON answer of the Prometheus query API.

    Missing fields take empty values and unknown fields are ignored.
    Raises PrometheusResponseError on malformed JSON or mistyped fields.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PrometheusResponseError(str(exc), text) from exc
    if document is None:
        return PrometheusResponse()
    _expect(document, dict, "response", text)

    status = document.get("status") or ""
    _expect(status, str, "status", text)

    data = document.get("data") or {}
    _expect(data, dict, "data", text)
    result_type = data.get("resultType") or ""
    _expect(result_type, str, "resultType", text)
    results = data.get("result") or []
    _expect(results, list, "result", text)

    return PrometheusResponse(
        status=status,
        data=PrometheusResultData(
            result_type=result_type,
            result=[_parse_result(item, text) for item in results],
        ),
    )


def api_url(endpoint: str) -> str:
    """Return the local URL of a Prometheus API v1 endpoint."""
    return f"http://localhost:9090/api/v1/{endpoint}"


def _oc_exec(selector: str, namespace: str, container: str, command: str) -> str:
    """Run ``command`` with ``oc exec`` in the first pod matching ``selector``."""
    pod_name = shell.execute(
        f"oc get pods -n {shlex.quote(namespace)} -l {shlex.quote(selector)} "
        f"-o jsonpath='{{.items[0].metadata.name}}'"
    ).strip()
    return shell.execute(
        f"oc exec -n {shlex.quote(namespace)} {shlex.quote(pod_name)} "
        f"-c {shlex.quote(container)} -- sh -c {shlex.quote(command)}"
    )


@dataclass(frozen=True)
class Prometheus:
    """A Prometheus-compatible API reachable from inside a pod."""

    selector: str
    container_name: str
    executor: PodExecutor = field(default=_oc_exec, compare=False, repr=False)

    def with_selector(self, selector: str) -> Prometheus:
        return replace(self, selector=selector)

    def with_container_name(self, container_name: str) -> Prometheus:
        return replace(self, container_name=container_name)

    def api_command(self, endpoint: str) -> str:
        """Shell command fetching ``endpoint`` (the image has wget but no curl)."""
        escaped = api_url(endpoint).replace("'", "'\\\\''")
        return f"wget -qO- '{escaped}'"

    def _get(self, namespace: str, endpoint: str) -> str:
        return self.executor(self.selector, namespace, self.container_name, self.api_command(endpoint))

    def query(self, namespace: str, query: str) -> PrometheusResponse:
        """Run a PromQL query and return the parsed response."""
        return parse_response(self._get(namespace, f"query?{urlencode({'query': query})}"))

    def targets(self, namespace: str) -> str:
        """Return the raw JSON listing the active scrape targets."""
        return self._get(namespace, "targets?state=active")


DEFAULT_PROMETHEUS = Prometheus("app=prometheus", "prometheus")
DEFAULT_CUSTOM_PROMETHEUS = DEFAULT_PROMETHEUS.with_selector("prometheus=prometheus")
DEFAULT_THANOS = DEFAULT_PROMETHEUS.with_selector(
    "app.kubernetes.io/instance=thanos-querier"
).with_container_name("thanos-query")