"""Major/minor versions of the mesh control plane, the operator and the cluster."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "Version",
    "parse_version",
    "OCP_4_9",
    "OCP_4_10",
    "OCP_4_11",
    "OCP_4_12",
    "OCP_4_13",
    "OCP_4_14",
    "OCP_4_16",
    "OPERATOR_2_5_2",
    "OPERATOR_2_6_0",
    "OPERATOR_2_6_2",
    "SMCP_2_0",
    "SMCP_2_1",
    "SMCP_2_2",
    "SMCP_2_3",
    "SMCP_2_4",
    "SMCP_2_5",
    "SMCP_2_6",
]

_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)


@dataclass(frozen=True, order=True)
class Version:
    """A version reduced to its major and minor components."""

    major: int
    minor: int

    def equals(self, other: Version) -> bool:
        return self.major == other.major and self.minor == other.minor

    def less_than(self, other: Version) -> bool:
        if self.major != other.major:
            return self.major < other.major
        return self.minor < other.minor

    def less_than_or_equal(self, other: Version) -> bool:
        return self.less_than(other) or self.equals(other)

    def greater_than(self, other: Version) -> bool:
        return not self.less_than_or_equal(other)

    def greater_than_or_equal(self, other: Version) -> bool:
        return not self.less_than(other)

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}"


def _component(text: str, version: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid version: {version}")
    return int(text)


def parse_version(version: str) -> Version:
    """Parse strings such as ``v2.1``, ``2.1.0`` or ``4.10.0``.

    A leading ``v`` is ignored and anything after the minor component is
    dropped. Raises ValueError when major and minor cannot be read.
    """
    if version.startswith("v"):
        version = version[1:]
    parts = version.split(".")
    if len(parts) < 2:
        raise ValueError(f"invalid version: {version}")
    return Version(_component(parts[0], version), _component(parts[1], version))


OCP_4_9 = parse_version("4.9.0")
OCP_4_10 = parse_version("4.10.0")
OCP_4_11 = parse_version("4.11.0")
OCP_4_12 = parse_version("4.12.0")
OCP_4_13 = parse_version("4.13.0")
OCP_4_14 = parse_version("4.14.0")
OCP_4_16 = parse_version("4.16.0")

OPERATOR_2_5_2 = parse_version("2.5.2")
OPERATOR_2_6_0 = parse_version("2.6.0")
OPERATOR_2_6_2 = parse_version("2.6.2")

SMCP_2_0 = parse_version("v2.0")
SMCP_2_1 = parse_version("v2.1")
SMCP_2_2 = parse_version("v2.2")
SMCP_2_3 = parse_version("v2.3")
SMCP_2_4 = parse_version("v2.4")
SMCP_2_5 = parse_version("v2.5")
SMCP_2_6 = parse_version("v2.6")