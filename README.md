# meshcheck

Building blocks for end-to-end tests of a service mesh running on a
Kubernetes or OpenShift cluster. You call these helpers from your own test
code, for example from pytest.

## Installation

```
pip install meshcheck
pip install "meshcheck[test]"   # also installs pytest, for the test suite
```

## Modules

### `meshcheck.version`

`parse_version` reads strings such as `"v2.5"`, `"2.5"` or `"4.12.0"` into a
`Version` holding `major` and `minor`. A leading `v` is dropped and anything
after the minor part is ignored. A string that has no readable major and minor
part raises `ValueError`.

`Version` has `equals`, `less_than`, `less_than_or_equal`, `greater_than` and
`greater_than_or_equal`. It is a frozen, ordered dataclass, so `<`, `==` and
similar operators work as well. `str(version)` gives `"v2.5"`.

The module also defines constants for known versions: `SMCP_2_0` to
`SMCP_2_6`, `OCP_4_9` to `OCP_4_14` and `OCP_4_16`, and `OPERATOR_2_5_2`,
`OPERATOR_2_6_0` and `OPERATOR_2_6_2`.

### `meshcheck.sampling`

- `is_within_percentage(count, total, rate, tolerance)` tells whether
  `count` out of `total` falls inside `rate ± tolerance`. Both bounds are
  truncated to whole counts.
- `generate_strings(prefix, count)` returns `["<prefix>0", "<prefix>1", ...]`.
  A negative count raises `ValueError`.

### `meshcheck.retry`

`until_success(func, options=None, log=print, log_failed_attempts=True)`
calls `func(log)` until the call no longer raises, and returns the value of
the call that succeeded. Before the last attempt, whatever an attempt logs is
buffered. An attempt that fails is followed by a pause of `delay` seconds. On
the last attempt `func` is called with `log` itself, and its exception reaches
the caller. If success took 75 % or 90 % of the allowed attempts, a flakiness
warning is logged.

`options()` returns the default `RetryOptions`: 60 attempts, 1 second delay,
attempts logged. You derive new settings with `with_max_attempts`,
`with_delay` and `with_log_attempts`.

`attempt(func)` runs a check once. It returns an `AttemptResult` with
`value`, `error`, `failed` and the buffered `messages`. Its `flush_log(log)`
method hands the buffered messages on.

### `meshcheck.shell`

- `execute(cmd, *checks, env=None, input_text="")` runs `cmd` with
  `sh -c` and returns stdout and stderr together. Afterwards every check is
  called with that output. `env` may be a mapping or a list of `KEY=VALUE`
  strings. A command that cannot start, or that exits with a non-zero status,
  raises `CommandError`, which carries `cmd`, `output` and `returncode`.
- `executef(fmt, *args)` fills in the command with `%` formatting and runs it.
- `create_temp_dir(name_prefix)` creates a new directory under `/tmp` and
  returns its path.

### `meshcheck.images`

`ImageCatalog.load(path)` reads a YAML file of the form
`name: {architecture: image}`. `catalog.image(name, arch)` returns the
matching container image. An unknown name or architecture raises
`ImageNotFoundError`. A file that cannot be read raises `OSError`, and one
that cannot be parsed raises `ValueError`.

### `meshcheck.template`

`render(template, variables=None, image_resolver=None)` renders a Jinja2
template. `variables` may be a mapping, a dataclass instance or any object
with attributes. Inside the template these functions are available:

- `to_yaml(value)`, also spelled `toYaml`
- `indent(spaces, text)`, which indents every line except the first
- `until(n)`, which returns `[0, ..., n-1]`
- `image(name)`, which calls `image_resolver`. Without a resolver it raises
  an error.

Syntax and rendering errors raise `TemplateError`. For syntax errors the
message includes the template with line numbers, produced by
`add_line_numbers`. The helper functions can also be imported directly.

### `meshcheck.request`

Options that adjust a `requests` request and the `requests.Session` that
sends it. Each option has `apply_to_request(request)` and
`apply_to_client(session)`.

- `with_header(name, value)` returns a `HeaderOption`, which sets a header.
- `with_host(host)` returns a `HostOption`, which overrides the `Host` header.
- `options(*opts)` returns a `RequestOptionList`, which applies the given
  options in order.
- `with_tls(ca_cert_file, host, ingress_host, secure_ingress_port)` returns a
  `TLSRequestOption`. It sets the `Host` header and makes the session trust
  the CA file. It also routes HTTPS requests for `host:port` to
  `ingress_host:port` while keeping `host` as the TLS server name.
  `with_client_certificate(cert_file, key_file)` adds a client certificate.

### `meshcheck.prometheus`

`Prometheus(selector, container_name)` queries a Prometheus-compatible API
from inside a pod. By default it finds the first pod that matches `selector`
with `oc get pods` and runs `wget` in it with `oc exec`. A different
`executor(selector, namespace, container, command)` can be supplied instead.

- `query(namespace, promql)` returns a parsed `PrometheusResponse`.
- `targets(namespace)` returns the raw JSON of the active targets.
- `with_selector` and `with_container_name` return modified copies.

`DEFAULT_PROMETHEUS`, `DEFAULT_CUSTOM_PROMETHEUS` and `DEFAULT_THANOS` are
preconfigured instances. `parse_response(text)` turns API JSON into
`PrometheusResponse` / `PrometheusResultData` / `PrometheusResult`. Malformed
input raises `PrometheusResponseError`.

## Example

```python
from meshcheck.retry import options, until_success
from meshcheck.shell import execute
from meshcheck.version import SMCP_2_5, parse_version

if parse_version("v2.6").greater_than_or_equal(SMCP_2_5):
    def check(log):
        out = execute("oc get smcp -n istio-system")
        log(out)
        assert "Ready" in out

    until_success(check, options().with_max_attempts(10).with_delay(2.0))
```

## What it does not do

meshcheck is a library only. It has no command-line interface and no test
runner, and it ships no test suites for a cluster. It does not install
operators, control planes or sample applications. It includes no image
catalogue file, so you pass your own file to `ImageCatalog.load`. The
architecture is never detected for you; you always pass it to `image`. Apart
from the `oc` calls that `Prometheus` makes by default, every command run
against a cluster is one you write yourself.