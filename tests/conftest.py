import json

import numpy as np
import pytest

from doppelgangers.core import projector
from doppelgangers.core.points import Point
from doppelgangers.viewer.render import ManualFrameSource, RecordingCanvas
from doppelgangers.viewer.state import CanvasSize, ViewerState


class FakeUMAP:
    """Deterministic stand-in for umap.UMAP: keeps the leading input columns."""

    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        FakeUMAP.instances.append(self)

    def fit_transform(self, matrix):
        matrix = np.asarray(matrix, dtype=np.float32)
        n_components = self.kwargs["n_components"]
        coords = np.zeros((len(matrix), n_components), dtype=np.float32)
        width = min(n_components, matrix.shape[1])
        coords[:, :width] = matrix[:, :width]
        return coords


@pytest.fixture
def fake_umap(monkeypatch):
    FakeUMAP.instances = []
    monkeypatch.setattr(projector.umap, "UMAP", FakeUMAP)
    return FakeUMAP


def make_point(x=0.5, y=0.5, x3d=0.5, y3d=0.5, z3d=0.5, **kwargs):
    fields = dict(title="item", url="https://github.com/o/r/pull/1", body="")
    fields.update(kwargs)
    return Point(x=x, y=y, x3d=x3d, y3d=y3d, z3d=z3d, **fields)


@pytest.fixture
def point_factory():
    return make_point


@pytest.fixture
def square_canvas():
    return CanvasSize(100, 100)


@pytest.fixture
def viewer_state(square_canvas):
    return ViewerState(canvas=square_canvas)


@pytest.fixture
def recording_canvas():
    return RecordingCanvas()


@pytest.fixture
def frames():
    return ManualFrameSource()


def embedding_line(url, embedding, **extra):
    record = {"url": url, "title": f"title {url}", "body": "body", "embedding": embedding}
    record.update(extra)
    return json.dumps(record)


@pytest.fixture
def write_jsonl(tmp_path):
    def write(lines, name="embeddings.jsonl"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return write


@pytest.fixture
def embeddings_file(write_jsonl):
    rng = np.random.default_rng(7)
    lines = [
        embedding_line(
            f"https://github.com/o/r/pull/{i}",
            rng.normal(size=8).round(4).tolist(),
            number=i,
            state="open" if i % 2 else "closed",
            type="pr" if i % 3 else "issue",
        )
        for i in range(12)
    ]
    return write_jsonl(lines)


class FakeEmbedder:
    """Embedder that maps each text to a fixed vector, or fails on demand."""

    def __init__(self, vectors=None, dimension=4, error=None):
        self.vectors = vectors or {}
        self._dimension = dimension
        self.error = error
        self.calls = []

    @property
    def name(self):
        return "fake"

    @property
    def dimension(self):
        return self._dimension

    def embed(self, texts):
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        rows = []
        for text in texts:
            if text in self.vectors:
                rows.append(self.vectors[text])
            else:
                rows.append([float(len(text) % 7 + 1)] + [0.0] * (self._dimension - 1))
        return np.asarray(rows, dtype=np.float32)

    def embed_single(self, text):
        return self.embed([text])[0]


@pytest.fixture
def fake_embedder():
    return FakeEmbedder


@pytest.fixture
def make_line():
    return embedding_line
