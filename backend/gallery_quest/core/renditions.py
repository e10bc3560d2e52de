from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

FULL_SIZE = "full"


@dataclass(frozen=True, slots=True)
class RenditionSize:
    name: str
    max_width: int


# Width-limited soft crops; height is unconstrained.
RENDITION_SIZES: tuple[RenditionSize, ...] = (
    RenditionSize(name="thumb", max_width=300),
    RenditionSize(name="medium", max_width=600),
    RenditionSize(name="large", max_width=1200),
)

RENDITION_NAMES: tuple[str, ...] = tuple(s.name for s in RENDITION_SIZES) + (FULL_SIZE,)

_SIZES_BY_NAME = {s.name: s for s in RENDITION_SIZES}


class MediaFile(Protocol):
    file_path: str | None
    width: int | None
    height: int | None


def rendition_dimensions(size: RenditionSize, *, width: int, height: int) -> tuple[int, int] | None:
    """Scaled dimensions for a size, or None when the original is not wider than it."""
    if width <= 0 or height <= 0 or width <= size.max_width:
        return None
    scaled_h = max(1, int(round(height * size.max_width / width)))
    return size.max_width, scaled_h


def rendition_file_path(file_path: str, *, width: int, height: int) -> str:
    directory, filename = posixpath.split(file_path)
    stem, ext = posixpath.splitext(filename)
    return posixpath.join(directory, f"{stem}-{width}x{height}{ext}")


@dataclass(frozen=True, slots=True)
class RenditionResolver:
    base_url: str

    def _url(self, file_path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{quote(file_path.lstrip('/'))}"

    def rendition_url(self, image: MediaFile, size: str) -> str | None:
        file_path = (image.file_path or "").strip()
        if not file_path:
            return None
        if size == FULL_SIZE:
            return self._url(file_path)

        rendition = _SIZES_BY_NAME.get(size)
        if rendition is None:
            raise ValueError(f"unknown rendition size: {size!r}")

        dims = rendition_dimensions(rendition, width=int(image.width or 0), height=int(image.height or 0))
        if dims is None:
            # No intermediate file is generated for small originals.
            return self._url(file_path)
        return self._url(rendition_file_path(file_path, width=dims[0], height=dims[1]))

    def urls(self, image: MediaFile) -> dict[str, str | None]:
        return {name: self.rendition_url(image, name) for name in RENDITION_NAMES}
