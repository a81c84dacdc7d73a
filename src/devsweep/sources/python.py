"""Source for Python package manager caches and project artifacts."""

from __future__ import annotations

from devsweep.models.source import ArtifactRule, DevToolSource


class PythonSource(DevToolSource):
    """Reports pip/Poetry/uv caches and per-project virtualenvs and caches."""

    id = "python"
    name = "Python"
    ecosystem = "python"
    description = "pip, Poetry, pdm and uv caches plus project virtualenvs and tool caches"
    _cache_paths = (
        (".cache/pip", "pip Cache"),
        (".cache/pypoetry", "Poetry Cache"),
        (".cache/pdm", "pdm Cache"),
        (".cache/uv", "uv Cache"),
        (".local/share/virtualenvs", "pipenv virtualenvs"),
        ("Library/Caches/pip", "pip Cache"),
    )
    _artifacts = (
        ArtifactRule("__pycache__"),
        ArtifactRule(".venv"),
        ArtifactRule("venv", markers=("requirements.txt", "pyproject.toml", "setup.py", "Pipfile")),
        ArtifactRule(".pytest_cache"),
        ArtifactRule(".mypy_cache"),
        ArtifactRule(".ruff_cache"),
        ArtifactRule(".tox"),
    )
