"""Resolution of logical resource names to media files."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal, Protocol, Sequence

ResourceKind = Literal["bgm", "se", "image", "movie"]

_AUDIO_EXTENSIONS: tuple[str, ...] = ("mp3", "ogg", "wav")
_IMAGE_EXTENSIONS: tuple[str, ...] = ("png", "jpg", "jpeg")
_MOVIE_EXTENSIONS: tuple[str, ...] = ("mp4", "webm", "avi")


class ResourceResolver(Protocol):
    """Interface consumed by the engine; a None result means unresolved."""

    def resolve_bgm(self, name: str) -> Path | None: ...

    def resolve_se(self, name: str) -> Path | None: ...

    def resolve_image(self, name: str) -> Path | None: ...

    def resolve_movie(self, name: str) -> Path | None: ...


def resolve_resource(resolver: ResourceResolver, kind: ResourceKind, name: str) -> Path | None:
    """Dispatch to the resolver method matching ``kind``."""
    if kind == "bgm":
        return resolver.resolve_bgm(name)
    if kind == "se":
        return resolver.resolve_se(name)
    if kind == "image":
        return resolver.resolve_image(name)
    return resolver.resolve_movie(name)


class InMemoryResourceResolver:
    """Resolver backed by explicit registrations, mainly for tests and tools."""

    def __init__(self) -> None:
        self._paths: Dict[ResourceKind, Dict[str, Path]] = {
            "bgm": {},
            "se": {},
            "image": {},
            "movie": {},
        }

    def register(self, kind: ResourceKind, name: str, path: Path | str) -> None:
        self._paths[kind][name] = Path(path)

    def resolve_bgm(self, name: str) -> Path | None:
        return self._paths["bgm"].get(name)

    def resolve_se(self, name: str) -> Path | None:
        return self._paths["se"].get(name)

    def resolve_image(self, name: str) -> Path | None:
        return self._paths["image"].get(name)

    def resolve_movie(self, name: str) -> Path | None:
        return self._paths["movie"].get(name)


class FileSystemResourceResolver:
    """Looks up ``<base>/<subdir>/<name>.<ext>`` for each known extension."""

    def __init__(
        self,
        base_dir: Path | str,
        *,
        audio_extensions: Sequence[str] = _AUDIO_EXTENSIONS,
        image_extensions: Sequence[str] = _IMAGE_EXTENSIONS,
        movie_extensions: Sequence[str] = _MOVIE_EXTENSIONS,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._audio_extensions = tuple(audio_extensions)
        self._image_extensions = tuple(image_extensions)
        self._movie_extensions = tuple(movie_extensions)

    def resolve_bgm(self, name: str) -> Path | None:
        return self._find("bgm", name, self._audio_extensions)

    def resolve_se(self, name: str) -> Path | None:
        return self._find("sounds", name, self._audio_extensions)

    def resolve_image(self, name: str) -> Path | None:
        return self._find("images", name, self._image_extensions)

    def resolve_movie(self, name: str) -> Path | None:
        return self._find("movies", name, self._movie_extensions)

    def _find(self, subdir: str, name: str, extensions: Sequence[str]) -> Path | None:
        directory = self._base_dir / subdir
        for extension in extensions:
            candidate = directory / f"{name}.{extension}"
            if candidate.is_file():
                return candidate
        return None
