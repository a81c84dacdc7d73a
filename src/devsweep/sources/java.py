"""Source for Maven and Gradle caches and JVM project build output."""

from __future__ import annotations

from devsweep.models.source import ArtifactRule, DevToolSource

_GRADLE = ("build.gradle", "build.gradle.kts", "settings.gradle", "settings.gradle.kts")


class JavaSource(DevToolSource):
    """Reports the local Maven repository, Gradle daemon data and project builds."""

    id = "java"
    name = "Java"
    ecosystem = "java"
    description = "Maven repository and Gradle daemon data plus project builds"
    _cache_paths = (
        (".m2/repository", "Maven Local Repository"),
        (".gradle/daemon", "Gradle Daemon Logs"),
    )
    _artifacts = (
        ArtifactRule("target", markers=("pom.xml",), label_suffix=" (Maven)"),
        ArtifactRule("build", markers=_GRADLE, label_suffix=" (Gradle)"),
        ArtifactRule(".gradle", markers=_GRADLE),
    )
    _extra_project_dirs = ("IdeaProjects",)
