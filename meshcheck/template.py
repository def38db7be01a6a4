"""Rendering resource templates with a few helper functions."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Callable, Optional

import jinja2
import yaml

__all__ = ["TemplateError", "render", "indent", "to_yaml", "until", "add_line_numbers"]

ImageResolver = Callable[[str], str]


class TemplateError(Exception):
    """A template could not be parsed or rendered."""


def indent(spaces: int, source: str) -> str:
    """Prefix every line but the first with ``spaces`` spaces."""
    pad = " " * abs(spaces)
    first, *rest = source.split("\n")
    return "\n".join([first, *(pad + line for line in rest)])


def to_yaml(value: Any) -> str:
    """Serialise ``value`` as block-style YAML with sorted keys."""
    try:
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=True, allow_unicode=True)
    except yaml.YAMLError as exc:
        raise TemplateError(f"Unable to marshal {value}") from exc


def until(n: int) -> list[int]:
    """Return ``[0, 1, ..., n-1]``."""
    if n < 0:
        raise ValueError(f"length out of range: {n}")
    return list(range(n))


def add_line_numbers(text: str) -> str:
    """Prefix each line with its right-aligned number."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return "".join(f"{number:3d}: {line.removesuffix(chr(13))}\n" for number, line in enumerate(lines, 1))


def _no_image(name: str) -> str:
    raise TemplateError(f"no image resolver configured to look up image {name!r}")


def _context(variables: Any) -> dict[str, Any]:
    if variables is None:
        return {}
    if isinstance(variables, Mapping):
        return {str(key): value for key, value in variables.items()}
    if dataclasses.is_dataclass(variables) and not isinstance(variables, type):
        return {f.name: getattr(variables, f.name) for f in dataclasses.fields(variables)}
    return dict(vars(variables))


def render(
    template: str,
    variables: Any = None,
    image_resolver: Optional[ImageResolver] = None,
) -> str:
    """Render ``template`` with ``variables``.

    The functions ``toYaml``/``to_yaml``, ``indent``, ``until`` and ``image``
    are available inside the template; ``image`` uses ``image_resolver``.
    """
    environment = jinja2.Environment(keep_trailing_newline=True, autoescape=False)
    environment.globals.update(
        toYaml=to_yaml,
        to_yaml=to_yaml,
        indent=indent,
        until=until,
        image=image_resolver or _no_image,
    )
    try:
        compiled = environment.from_string(template)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(
            f"could not execute template: {exc}:\n{add_line_numbers(template)}"
        ) from exc
    try:
        return compiled.render(**_context(variables))
    except TemplateError:
        raise
    except Exception as exc:  # errors from template expressions or helper functions
        raise TemplateError(str(exc)) from exc