from pathlib import Path

from scenescript.services.resources import (
    FileSystemResourceResolver,
    InMemoryResourceResolver,
    resolve_resource,
)


def test_filesystem_resolver_searches_kind_subdirectories(tmp_path: Path) -> None:
    (tmp_path / "bgm").mkdir()
    (tmp_path / "sounds").mkdir()
    (tmp_path / "images").mkdir()
    (tmp_path / "bgm" / "theme.ogg").write_bytes(b"")
    (tmp_path / "sounds" / "door.wav").write_bytes(b"")
    (tmp_path / "images" / "forest.png").write_bytes(b"")
    resolver = FileSystemResourceResolver(tmp_path)
    assert resolver.resolve_bgm("theme") == tmp_path / "bgm" / "theme.ogg"
    assert resolver.resolve_se("door") == tmp_path / "sounds" / "door.wav"
    assert resolver.resolve_image("forest") == tmp_path / "images" / "forest.png"
    assert resolver.resolve_movie("intro") is None
    assert resolver.resolve_bgm("door") is None


def test_filesystem_resolver_honours_extension_order(tmp_path: Path) -> None:
    (tmp_path / "movies").mkdir()
    (tmp_path / "movies" / "intro.webm").write_bytes(b"")
    (tmp_path / "movies" / "intro.mp4").write_bytes(b"")
    resolver = FileSystemResourceResolver(tmp_path, movie_extensions=("webm", "mp4"))
    assert resolver.resolve_movie("intro") == tmp_path / "movies" / "intro.webm"


def test_resolve_resource_dispatches_by_kind() -> None:
    resolver = InMemoryResourceResolver()
    resolver.register("image", "alice", "art/alice.png")
    assert resolve_resource(resolver, "image", "alice") == Path("art/alice.png")
    assert resolve_resource(resolver, "bgm", "alice") is None
