"""Source for Android SDK and Gradle caches."""

from __future__ import annotations

from devsweep.models.source import DevToolSource


class AndroidSource(DevToolSource):
    """Reports Gradle caches, Android build caches and system images."""

    id = "android"
    name = "Android"
    ecosystem = "android"
    description = "Gradle caches and wrapper, Android SDK caches and system images"
    sort_order = 20
    _cache_paths = (
        (".gradle/caches", "Gradle Caches"),
        (".gradle/wrapper", "Gradle Wrapper"),
        (".android/cache", "Android SDK Cache"),
        (".android/build-cache", "Android Build Cache"),
        ("Library/Android/sdk/system-images", "Android System Images"),
    )
