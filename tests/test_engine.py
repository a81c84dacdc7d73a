"""Tests for the scan orchestration engine."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path

from devsweep.core.engine import ScanEngine, sort_by_size
from devsweep.core.registry import SourceRegistry
from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.source import DevToolSource, ScanSource
from devsweep.sources.java import JavaSource
from devsweep.sources.react_native import ReactNativeSource
from devsweep.sources.rust import RustSource
from tests.conftest import sparse_file, write_file

GB = 1024**3


def make_candidate(path: str, size: int, ecosystem: str = "fake") -> Candidate:
    return Candidate(path=Path(path), label=Path(path).name, size_bytes=size, file_count=1, ecosystem=ecosystem)


class FakeSource(ScanSource):
    """Test source that doesn't touch the filesystem."""

    def __init__(
        self,
        source_id: str = "fake",
        candidates: list[Candidate] | None = None,
        available: bool = True,
        fail: bool = False,
        scan_delay: float = 0,
        ecosystem: str = "fake",
    ):
        self._id = source_id
        self._candidates = candidates or []
        self._available = available
        self._fail = fail
        self._scan_delay = scan_delay
        self._ecosystem = ecosystem
        self.scan_threads: list[str] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return f"Fake Source ({self._id})"

    @property
    def ecosystem(self) -> str:
        return self._ecosystem

    def unavailable_reason(self, options: ScanOptions | None = None) -> str | None:
        return None if self._available else "disabled for test"

    def scan(self, options: ScanOptions) -> list[Candidate]:
        self.scan_threads.append(threading.current_thread().name)
        if self._scan_delay:
            time.sleep(self._scan_delay)
        if self._fail:
            raise RuntimeError("scan exploded")
        return list(self._candidates)


def make_engine(*sources: ScanSource) -> ScanEngine:
    registry = SourceRegistry()
    for source in sources:
        registry.register(source)
    return ScanEngine(registry)


class TestScanAll:
    def test_collects_all_sources(self, tmp_path):
        engine = make_engine(
            FakeSource("a", [make_candidate("/x/a1", 10), make_candidate("/x/a2", 30)]),
            FakeSource("b", [make_candidate("/x/b1", 20)]),
        )
        results = engine.scan_all(options=ScanOptions(home=tmp_path))
        assert len(results) == 3
        assert [c.size_bytes for c in sort_by_size(results)] == [30, 20, 10]

    def test_failing_source_is_isolated(self, tmp_path):
        events: list[tuple[str, str]] = []
        lock = threading.Lock()

        def on_progress(source_id, status):
            with lock:
                events.append((source_id, status))

        engine = make_engine(
            FakeSource("good", [make_candidate("/x/good", 5)]),
            FakeSource("bad", fail=True),
        )
        results = engine.scan_all(options=ScanOptions(home=tmp_path), on_progress=on_progress)

        assert [c.path for c in results] == [Path("/x/good")]
        assert ("bad", "error") in events
        assert ("good", "done") in events

    def test_sources_run_concurrently(self, tmp_path):
        sources = [FakeSource(f"slow{i}", [make_candidate(f"/x/{i}", i + 1)], scan_delay=0.3) for i in range(4)]
        engine = make_engine(*sources)

        start = time.monotonic()
        results = engine.scan_all(options=ScanOptions(home=tmp_path))
        elapsed = time.monotonic() - start

        assert len(results) == 4
        assert elapsed < 1.0
        assert len({s.scan_threads[0] for s in sources}) == 4

    def test_every_source_gets_a_thread(self, tmp_path):
        sources = [FakeSource(f"s{i}", [make_candidate(f"/x/{i}", 1)], scan_delay=0.2) for i in range(10)]
        make_engine(*sources).scan_all(options=ScanOptions(home=tmp_path))
        assert len({s.scan_threads[0] for s in sources}) == 10

    def test_duplicate_paths_kept_once(self, tmp_path):
        engine = make_engine(
            FakeSource("a", [make_candidate("/x/shared", 10), make_candidate("/x/a", 1)]),
            FakeSource("b", [make_candidate("/x/shared", 10, "other")]),
        )
        results = engine.scan_all(options=ScanOptions(home=tmp_path))
        assert sorted(str(c.path) for c in results) == ["/x/a", "/x/shared"]
        assert engine.get_last_scan("/x/shared").ecosystem == "fake"

    def test_no_sources(self, tmp_path):
        assert make_engine().scan_all(options=ScanOptions(home=tmp_path)) == []

    def test_unknown_and_unavailable_ids_skipped(self, tmp_path):
        engine = make_engine(
            FakeSource("on", [make_candidate("/x/on", 1)]),
            FakeSource("off", [make_candidate("/x/off", 1)], available=False),
        )
        results = engine.scan_all(source_ids=["on", "off", "missing"], options=ScanOptions(home=tmp_path))
        assert [c.path for c in results] == [Path("/x/on")]

    def test_unavailable_sources_not_scanned_by_default(self, tmp_path):
        off = FakeSource("off", [make_candidate("/x/off", 1)], available=False)
        engine = make_engine(off)
        assert engine.scan_all(options=ScanOptions(home=tmp_path)) == []
        assert off.scan_threads == []

    def test_ecosystem_filter(self, tmp_path):
        engine = make_engine(
            FakeSource("n", [make_candidate("/x/n", 1, "node")], ecosystem="node"),
            FakeSource("r", [make_candidate("/x/r", 1, "rust")], ecosystem="rust"),
        )
        results = engine.scan_all(options=ScanOptions(home=tmp_path), ecosystems=["rust"])
        assert [c.ecosystem for c in results] == ["rust"]

    def test_last_scan_replaced(self, tmp_path):
        source = FakeSource("a", [make_candidate("/x/first", 1)])
        engine = make_engine(source)
        engine.scan_all(options=ScanOptions(home=tmp_path))
        assert engine.get_last_scan("/x/first") is not None

        source._candidates = [make_candidate("/x/second", 2)]
        engine.scan_all(options=ScanOptions(home=tmp_path))
        assert engine.get_last_scan("/x/first") is None
        assert engine.get_last_scan(Path("/x/second")).size_bytes == 2


class FakeCacheSource(DevToolSource):
    id = "fake_cache"
    name = "Fake Cache"
    ecosystem = "fake"
    _cache_paths = (
        ("Library/Caches/FakeA", "Fake A"),
        (".fakeB", "Fake B"),
        (".fakeMissing", "Fake Missing"),
    )


def test_scan_real_cache_directories(fake_home):
    sparse_file(fake_home / "Library" / "Caches" / "FakeA" / "blob", 5 * GB)
    sparse_file(fake_home / ".fakeB" / "blob", 2 * GB)

    engine = make_engine(FakeCacheSource())
    results = sort_by_size(engine.scan_all(options=ScanOptions.for_home(fake_home)))

    assert [(c.label, c.size_bytes) for c in results] == [("Fake A", 5 * GB), ("Fake B", 2 * GB)]
    assert results[0].path == fake_home / "Library" / "Caches" / "FakeA"
    assert all(c.file_count == 1 for c in results)


def test_sort_by_size_tie_breaks_on_path():
    ordered = sort_by_size([make_candidate("/b", 5), make_candidate("/a", 5), make_candidate("/c", 9)])
    assert [str(c.path) for c in ordered] == ["/c", "/a", "/b"]


class TestBuiltinSources:
    def test_configured_project_dirs_decide_availability(self, fake_home):
        crate = fake_home / "src" / "app"
        write_file(crate / "Cargo.toml", 1)
        write_file(crate / "target" / "debug" / "bin", 100)
        options = ScanOptions.for_home(fake_home, project_dirs=("src",))
        engine = make_engine(RustSource())

        assert [c.path for c in engine.scan_all(options=options)] == [crate / "target"]
        assert [c.path for c in engine.scan_all(source_ids=["rust"], options=options)] == [crate / "target"]
        assert engine.scan_all(options=ScanOptions.for_home(fake_home)) == []

    def test_react_native_android_build_reported_once(self, fake_home):
        app = fake_home / "Projects" / "rnapp"
        write_file(app / "package.json", 0)
        (app / "package.json").write_text(json.dumps({"dependencies": {"react-native": "0.74.0"}}))
        write_file(app / "android" / "build.gradle", 1)
        write_file(app / "android" / "build" / "out.bin", 2048)

        engine = make_engine(JavaSource(), ReactNativeSource())
        results = engine.scan_all(options=ScanOptions.for_home(fake_home))

        assert [c.path for c in results] == [app / "android" / "build"]
        assert sum(c.size_bytes for c in results) == 2048
        assert results[0].ecosystem == "react-native"
