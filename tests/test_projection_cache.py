import json
import threading
from pathlib import Path

import numpy as np

from doppelgangers.core import projection_cache
from doppelgangers.core.projection_cache import ProjectionCache, build_projection, default_cache_path
from doppelgangers.core.projector import Projection


def _projection(n):
    return Projection(
        coords_2d=np.arange(n * 2, dtype=np.float32).reshape(n, 2),
        coords_3d=np.arange(n * 3, dtype=np.float32).reshape(n, 3),
    )


def test_default_cache_path_sits_next_to_output():
    assert default_cache_path(Path("out/triage.html")) == Path("out/triage.projection.json")


def test_save_then_load(tmp_path):
    cache = ProjectionCache(tmp_path / "p.json")
    cache.save(_projection(4))
    loaded = cache.load(expected_count=4)
    assert np.allclose(loaded.coords_2d, _projection(4).coords_2d)
    assert np.allclose(loaded.coords_3d, _projection(4).coords_3d)
    assert set(json.loads(cache.path.read_text())) == {"coords2d", "coords3d"}
    assert [p.name for p in tmp_path.iterdir()] == ["p.json"]


def test_missing_file_is_a_miss(tmp_path):
    assert ProjectionCache(tmp_path / "none.json").load() is None


def test_malformed_file_is_a_miss(tmp_path):
    path = tmp_path / "p.json"
    path.write_text("{broken")
    assert ProjectionCache(path).load() is None

    path.write_text(json.dumps({"coords2d": [[0, 0]]}))
    assert ProjectionCache(path).load() is None

    path.write_text(json.dumps({"coords2d": [[0, 0, 0]], "coords3d": [[0, 0, 0]]}))
    assert ProjectionCache(path).load() is None


def test_count_mismatch_is_a_miss(tmp_path):
    cache = ProjectionCache(tmp_path / "p.json")
    cache.save(_projection(3))
    assert cache.load(expected_count=4) is None
    assert cache.load(expected_count=3) is not None


def test_build_projection_reuses_cache(tmp_path, monkeypatch):
    calls = []

    def fake_reduce(vectors, projection_config=None):
        calls.append(len(vectors))
        return _projection(len(vectors))

    monkeypatch.setattr(projection_cache, "reduce_embeddings", fake_reduce)
    vectors = [[0.1, 0.2]] * 5
    path = tmp_path / "p.json"

    first = build_projection(vectors, path)
    second = build_projection(vectors, path)
    assert calls == [5]
    assert np.allclose(first.coords_3d, second.coords_3d)

    messages = []
    build_projection(vectors, path, force=True, progress_callback=messages.append)
    assert calls == [5, 5]
    assert any("Force" in m for m in messages)


def test_build_projection_recomputes_for_different_dataset(tmp_path, monkeypatch):
    calls = []

    def fake_reduce(vectors, projection_config=None):
        calls.append(len(vectors))
        return _projection(len(vectors))

    monkeypatch.setattr(projection_cache, "reduce_embeddings", fake_reduce)
    path = tmp_path / "p.json"
    build_projection([[0.0]] * 3, path)
    projection = build_projection([[0.0]] * 6, path)
    assert calls == [3, 6]
    assert len(projection) == 6
    assert len(ProjectionCache(path).load()) == 6


def test_concurrent_builds_compute_once(tmp_path, monkeypatch):
    calls = []

    def fake_reduce(vectors, projection_config=None):
        calls.append(len(vectors))
        return _projection(len(vectors))

    monkeypatch.setattr(projection_cache, "reduce_embeddings", fake_reduce)
    path = tmp_path / "p.json"
    results = []

    def run():
        results.append(build_projection([[0.0]] * 4, path))

    threads = [threading.Thread(target=run) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == [4]
    assert len(results) == 4
    assert all(np.allclose(r.coords_2d, results[0].coords_2d) for r in results)


def test_clear_removes_file(tmp_path):
    cache = ProjectionCache(tmp_path / "p.json")
    cache.save(_projection(2))
    assert cache.exists()
    cache.clear()
    assert not cache.exists()
