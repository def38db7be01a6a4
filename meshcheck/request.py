"""Options that adjust an outgoing HTTP request or the session sending it."""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.adapters import DEFAULT_POOLBLOCK, HTTPAdapter

__all__ = [
    "RequestOption",
    "HeaderOption",
    "HostOption",
    "RequestOptionList",
    "TLSRequestOption",
    "with_header",
    "with_host",
    "options",
    "with_tls",
]

_CONNECT_TIMEOUT = 30.0


class RequestOption(ABC):
    """Something that can modify a request and the session that sends it."""

    @abstractmethod
    def apply_to_request(self, request: Any) -> None:
        """Modify a ``requests.Request`` or ``PreparedRequest`` in place."""

    @abstractmethod
    def apply_to_client(self, session: requests.Session) -> None:
        """Modify the session in place."""


@dataclass(frozen=True)
class HeaderOption(RequestOption):
    """Sets request headers."""

    headers: Mapping[str, str] = field(default_factory=dict)

    def apply_to_request(self, request: Any) -> None:
        for name, value in self.headers.items():
            request.headers[name] = value

    def apply_to_client(self, session: requests.Session) -> None:
        pass


@dataclass(frozen=True)
class HostOption(RequestOption):
    """Overrides the Host header."""

    host: str

    def apply_to_request(self, request: Any) -> None:
        request.headers["Host"] = self.host

    def apply_to_client(self, session: requests.Session) -> None:
        pass


@dataclass(frozen=True)
class RequestOptionList(RequestOption):
    """Applies several options in order; the first error stops the rest."""

    options: tuple[RequestOption, ...] = ()

    def __iter__(self) -> Iterator[RequestOption]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)

    def apply_to_request(self, request: Any) -> None:
        for option in self.options:
            option.apply_to_request(request)

    def apply_to_client(self, session: requests.Session) -> None:
        for option in self.options:
            option.apply_to_client(session)


class _IngressAdapter(HTTPAdapter):
    """Sends requests for ``host:port`` to ``ingress_host:port``, keeping TLS names."""

    def __init__(self, host: str, ingress_host: str, port: str):
        self._host = host
        self._ingress_host = ingress_host
        self._port = port
        super().__init__()

    def init_poolmanager(self, connections, maxsize, block=DEFAULT_POOLBLOCK, **pool_kwargs):
        pool_kwargs.setdefault("server_hostname", self._host)
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parts = urlsplit(request.url)
        port = str(parts.port or 443)
        if (parts.hostname or "").lower() == self._host.lower() and port == self._port:
            request = request.copy()
            request.headers.setdefault("Host", parts.netloc)
            request.url = urlunsplit(parts._replace(netloc=f"{self._ingress_host}:{self._port}"))
        if timeout is None:
            timeout = (_CONNECT_TIMEOUT, None)
        return super().send(
            request, stream=stream, timeout=timeout, verify=verify, cert=cert, proxies=proxies
        )


@dataclass(frozen=True)
class TLSRequestOption(RequestOption):
    """HTTPS to a virtual host served by an ingress gateway at another address."""

    ca_cert_file: str
    host: str
    ingress_host: str
    secure_ingress_port: str
    client_cert_file: str = ""
    client_key_file: str = ""

    def with_client_certificate(self, client_cert_file: str, client_key_file: str) -> TLSRequestOption:
        return replace(self, client_cert_file=client_cert_file, client_key_file=client_key_file)

    def apply_to_request(self, request: Any) -> None:
        request.headers["Host"] = self.host

    def apply_to_client(self, session: requests.Session) -> None:
        """Trust the CA file, add the client certificate and route to the ingress.

        Raises OSError when the CA file cannot be read and ssl.SSLError or
        OSError when the client certificate pair cannot be loaded.
        """
        with open(self.ca_cert_file, "rb"):
            pass
        session.verify = self.ca_cert_file

        if self.client_cert_file:
            ssl.create_default_context().load_cert_chain(self.client_cert_file, self.client_key_file)
            session.cert = (self.client_cert_file, self.client_key_file)

        adapter = _IngressAdapter(self.host, self.ingress_host, self.secure_ingress_port)
        session.mount(f"https://{self.host}:{self.secure_ingress_port}/", adapter)
        if self.secure_ingress_port == "443":
            session.mount(f"https://{self.host}/", adapter)


def with_header(name: str, value: str) -> HeaderOption:
    return HeaderOption({name: value})


def with_host(host: str) -> HostOption:
    return HostOption(host)


def options(*args: RequestOption) -> RequestOptionList:
    return RequestOptionList(tuple(args))


def with_tls(ca_cert_file: str, host: str, ingress_host: str, secure_ingress_port: str) -> TLSRequestOption:
    return TLSRequestOption(
        ca_cert_file=ca_cert_file,
        host=host,
        ingress_host=ingress_host,
        secure_ingress_port=secure_ingress_port,
    )