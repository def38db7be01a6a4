"""Container images per architecture, read from a YAML catalogue."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import yaml

__all__ = ["ImageCatalog", "ImageNotFoundError"]


class ImageNotFoundError(LookupError):
    """No image is known for the requested name or architecture."""


@dataclass(frozen=True)
class ImageCatalog:
    """Maps an image name to the container image for each architecture."""

    images: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    path: str = ""

    @classmethod
    def load(cls, path: str) -> ImageCatalog:
        """Read the catalogue from a YAML file of ``name: {arch: image}``."""
        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise OSError(f"couldn't read file {path}: {exc}") from exc
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"couldn't parse file {path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, Mapping) or not all(
            isinstance(arches, Mapping) for arches in data.values()
        ):
            raise ValueError(f"couldn't parse file {path}: expected a mapping of mappings")
        images = {
            str(name): {str(arch): str(image) for arch, image in arches.items()}
            for name, arches in data.items()
        }
        return cls(images=images, path=path)

    def image(self, name: str, arch: str) -> str:
        """Return the container image of ``name`` for architecture ``arch``."""
        arches = self.images.get(name)
        if arches is None:
            raise ImageNotFoundError(f"could not find image {name!r} in {self.path}")
        try:
            return arches[arch]
        except KeyError:
            raise ImageNotFoundError(
                f"could not find image {name!r} for architecture {arch!r} in {self.path}"
            ) from None