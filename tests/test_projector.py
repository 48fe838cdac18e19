import numpy as np
import pytest

from doppelgangers.core.projector import (
    ProjectionConfig,
    UMAPProjector,
    linear_layout,
    pre_reduce,
    reduce_embeddings,
    stack_vectors,
)
from doppelgangers.errors import VectorLengthMismatchError


def test_reduce_embeddings_single_point_is_origin(fake_umap):
    projection = reduce_embeddings([[0.1, -0.2, 0.3]])
    assert projection.coords_2d.shape == (1, 2)
    assert projection.coords_3d.shape == (1, 3)
    assert np.allclose(projection.coords_2d, 0.0)
    assert np.allclose(projection.coords_3d, 0.0)
    assert fake_umap.instances == []


def test_reduce_embeddings_empty():
    projection = reduce_embeddings([])
    assert projection.coords_2d.shape == (0, 2)
    assert projection.coords_3d.shape == (0, 3)
    assert len(projection) == 0


def test_tiny_dataset_uses_linear_layout(fake_umap):
    vectors = [[0.0, 0.0, 1.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]]
    projection = reduce_embeddings(vectors)
    assert projection.coords_2d.shape == (4, 2)
    assert projection.coords_3d.shape == (4, 3)
    assert np.all(np.isfinite(projection.coords_3d))
    # 4 points fit UMAP in 2D but not in 3D
    assert [u.kwargs["n_components"] for u in fake_umap.instances] == [2]


def test_small_dataset_clamps_neighbors_and_uses_random_init(fake_umap):
    rng = np.random.default_rng(0)
    UMAPProjector(n_components=2, n_neighbors=15).fit(rng.normal(size=(5, 4)))
    params = fake_umap.instances[-1].kwargs
    assert params["n_neighbors"] == 4
    assert params["init"] == "random"
    assert params["metric"] == "cosine"


def test_larger_dataset_uses_spectral_init(fake_umap):
    rng = np.random.default_rng(0)
    projector = UMAPProjector(n_components=3, n_neighbors=15, min_dist=0.2, spread=1.5)
    coords = projector.fit(rng.normal(size=(40, 6)))
    params = fake_umap.instances[-1].kwargs
    assert coords.shape == (40, 3)
    assert params["init"] == "spectral"
    assert params["n_neighbors"] == 15
    assert params["min_dist"] == 0.2
    assert params["spread"] == 1.5
    assert projector.is_fitted


def test_projection_config_is_passed_through(fake_umap):
    rng = np.random.default_rng(1)
    config = ProjectionConfig(n_neighbors=5, min_dist=0.3, pca_components=4, random_state=42)
    projection = reduce_embeddings(rng.normal(size=(30, 10)).tolist(), config)
    assert len(projection) == 30
    assert {u.kwargs["n_components"] for u in fake_umap.instances} == {2, 3}
    assert all(u.kwargs["random_state"] == 42 for u in fake_umap.instances)
    assert all(u.kwargs["n_neighbors"] == 5 for u in fake_umap.instances)


def test_pre_reduce_limits_dimensions():
    rng = np.random.default_rng(2)
    matrix = rng.normal(size=(20, 12)).astype(np.float32)
    assert pre_reduce(matrix, 5).shape == (20, 5)
    # Never more components than samples
    assert pre_reduce(matrix[:4], 5).shape == (4, 4)


def test_pre_reduce_skips_when_already_small():
    matrix = np.ones((10, 3), dtype=np.float32)
    assert pre_reduce(matrix, 50) is matrix


def test_linear_layout_pads_missing_axes():
    coords = linear_layout(np.array([[0.0, 1.0], [1.0, 0.0]]), 3)
    assert coords.shape == (2, 3)
    assert np.allclose(coords[:, 1:], 0.0)
    assert not np.isclose(coords[0, 0], coords[1, 0])


def test_stack_vectors_reports_offending_indices():
    with pytest.raises(VectorLengthMismatchError) as info:
        stack_vectors([[1.0, 2.0], [1.0, 2.0], [1.0]])
    assert info.value.expected == 2
    assert info.value.offending == [2]


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(min_dist=2.0),
        dict(spread=0.0),
        dict(spread=0.5, min_dist=0.6),
        dict(min_dist=-0.1),
        dict(n_neighbors=1),
        dict(pca_components=0),
    ],
)
def test_projection_config_rejects_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        ProjectionConfig(**kwargs)


def test_projection_config_accepts_min_dist_equal_to_spread():
    assert ProjectionConfig(min_dist=1.0, spread=1.0).min_dist == 1.0


def test_real_umap_keeps_clusters_apart():
    rng = np.random.default_rng(11)
    first = np.concatenate([np.ones(8), np.zeros(8)])
    second = np.concatenate([np.zeros(8), np.ones(8)])
    vectors = np.vstack([
        first + rng.normal(scale=0.05, size=(30, 16)),
        second + rng.normal(scale=0.05, size=(30, 16)),
    ])

    projection = reduce_embeddings(vectors.tolist(), ProjectionConfig(pca_components=8, random_state=0))

    for coords in (projection.coords_2d, projection.coords_3d):
        assert np.isfinite(coords).all()
        a, b = coords[:30], coords[30:]
        gap = np.linalg.norm(a.mean(axis=0) - b.mean(axis=0))
        within = max(
            np.linalg.norm(a - a.mean(axis=0), axis=1).max(),
            np.linalg.norm(b - b.mean(axis=0), axis=1).max(),
        )
        assert gap > within
