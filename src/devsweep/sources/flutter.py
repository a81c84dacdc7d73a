"""Source for Flutter and Dart caches."""

from __future__ import annotations

from devsweep.models.source import ArtifactRule, DevToolSource

_PUBSPEC = ("pubspec.yaml",)


class FlutterSource(DevToolSource):
    """Reports the pub cache and Flutter project build output."""

    id = "flutter"
    name = "Flutter"
    ecosystem = "flutter"
    description = "Pub cache, Dart tool caches and Flutter project builds"
    sort_order = 40
    _cache_paths = (
        (".pub-cache", "Pub Cache"),
        (".dart_tool", "Dart Tool Cache"),
        ("Library/Caches/Flutter", "Flutter Cache"),
        ("Library/Caches/dart", "Dart Cache"),
    )
    _artifacts = (
        ArtifactRule("build", markers=_PUBSPEC),
        ArtifactRule(".dart_tool", markers=_PUBSPEC),
    )
