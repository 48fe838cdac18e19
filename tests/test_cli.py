import json

import pytest
from typer.testing import CliRunner

from doppelgangers import cli
from doppelgangers.core.projection_cache import default_cache_path
from doppelgangers.pipeline import embed as embed_module

runner = CliRunner()


def test_build_command_writes_viewer(embeddings_file, tmp_path, fake_umap):
    output = tmp_path / "viewer.html"
    result = runner.invoke(
        cli.app,
        ["build", "--input", str(embeddings_file), "--output", str(output), "--pca-dims", "4", "--neighbors", "5"],
    )

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert default_cache_path(output).exists()
    assert all(instance.kwargs["n_neighbors"] == 5 for instance in fake_umap.instances)


def test_build_command_without_pca_dims_uses_default(embeddings_file, tmp_path, monkeypatch):
    seen = []
    monkeypatch.setattr(cli, "build_viewer", lambda *args, **kwargs: seen.append(kwargs) or tmp_path / "x.html")

    result = runner.invoke(cli.app, ["build", "--input", str(embeddings_file), "--output", str(tmp_path / "x.html")])

    assert result.exit_code == 0, result.output
    assert seen[0]["projection_config"].pca_components == 50


def test_build_command_reports_mismatch(write_jsonl, make_line, tmp_path):
    path = write_jsonl([make_line("a", [1.0, 2.0]), make_line("b", [1.0])])
    result = runner.invoke(cli.app, ["build", "--input", str(path), "--output", str(tmp_path / "v.html")])

    assert result.exit_code == 1
    assert "mismatch" in result.output
    assert not (tmp_path / "v.html").exists()


def test_build_command_missing_input(tmp_path):
    result = runner.invoke(cli.app, ["build", "--input", str(tmp_path / "nope.jsonl"), "--pca-dims", "4"])
    assert result.exit_code == 1


def test_embed_command(tmp_path, fake_embedder, monkeypatch):
    items = tmp_path / "items.json"
    items.write_text(json.dumps([{"url": "u1", "title": "t", "body": "b"}]), encoding="utf-8")
    output = tmp_path / "embeddings.jsonl"
    monkeypatch.setattr(embed_module, "OpenAIEmbedder", lambda **kwargs: fake_embedder(dimension=2))

    result = runner.invoke(cli.app, ["embed", "--input", str(items), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8").splitlines()[0])["url"] == "u1"


def test_embed_command_without_key(tmp_path, monkeypatch):
    items = tmp_path / "items.json"
    items.write_text(json.dumps([{"url": "u1", "title": "t"}]), encoding="utf-8")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    result = runner.invoke(cli.app, ["embed", "--input", str(items), "--output", str(tmp_path / "e.jsonl")])

    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_triage_rejects_bad_repo():
    result = runner.invoke(cli.app, ["triage", "--repo", "not-a-repo"])
    assert result.exit_code == 1
    assert "Could not parse repo" in result.output


def test_build_command_rejects_min_dist_above_spread(embeddings_file, tmp_path):
    output = tmp_path / "v.html"
    for flags in (["--min-dist", "2.0"], ["--spread", "0"]):
        result = runner.invoke(
            cli.app,
            ["build", "--input", str(embeddings_file), "--output", str(output), "--pca-dims", "4", *flags],
        )
        assert result.exit_code == 1
        assert "Invalid projection settings" in result.output
        assert not isinstance(result.exception, ValueError)
    assert not output.exists()


def test_triage_validates_settings_before_fetching(monkeypatch):
    monkeypatch.setattr(cli, "fetch_items", lambda *args, **kwargs: pytest.fail("fetched with invalid settings"))
    result = runner.invoke(cli.app, ["triage", "--repo", "acme/widgets", "--pca-dims", "4", "--min-dist", "3"])
    assert result.exit_code == 1
    assert "Invalid projection settings" in result.output
