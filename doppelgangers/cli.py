"""
Doppelgangers CLI

Commands:
  triage   Fetch a repository's pull requests, embed them and build the viewer
  embed    Embed a fetched items file into embeddings JSONL
  build    Project embeddings and write the standalone HTML viewer

Environment:
  OPENAI_API_KEY   Required for embedding generation (read from .env too)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from doppelgangers.core.projector import ProjectionConfig
from doppelgangers.errors import EmbeddingRequestError, GitHubFetchError, VectorLengthMismatchError
from doppelgangers.pipeline.build import build as build_viewer
from doppelgangers.pipeline.embed import embed_items
from doppelgangers.sources.github import fetch_items, parse_repo
import config

app = typer.Typer(help="Find duplicate pull requests and issues through embedding visualization")
console = Console()

logger = logging.getLogger("doppelgangers")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False, markup=False)],
        force=True,
    )


def _resolve_pca_dims(pca_dims: Optional[int]) -> int:
    """Explicit value, else ask on an interactive terminal, else the default."""
    if pca_dims is not None:
        return pca_dims
    if sys.stdin.isatty():
        return typer.prompt("PCA dimensions before UMAP", default=config.PCA_COMPONENTS, type=int)
    return config.PCA_COMPONENTS


def _fail(message: str) -> None:
    console.print(f"[red]Error[/]: {message}")
    raise typer.Exit(code=1)


def _projection_config(neighbors: int, min_dist: float, spread: float, pca_dims: Optional[int]) -> ProjectionConfig:
    try:
        return ProjectionConfig(
            n_neighbors=neighbors,
            min_dist=min_dist,
            spread=spread,
            pca_components=_resolve_pca_dims(pca_dims),
        )
    except ValueError as e:
        _fail(f"Invalid projection settings: {e}")


def _run_build(
    input_path: Path,
    output_path: Path,
    projection_config: ProjectionConfig,
    force: bool,
    include_embeddings: bool,
    projection: Optional[Path],
) -> Path:
    try:
        return build_viewer(
            input_path,
            output_path,
            projection_config=projection_config,
            force=force,
            include_embeddings=include_embeddings,
            cache_path=projection,
        )
    except VectorLengthMismatchError as e:
        _fail(str(e))
    except FileNotFoundError as e:
        _fail(str(e))


def _run_embed(**kwargs) -> int:
    try:
        return embed_items(**kwargs)
    except EmbeddingRequestError as e:
        _fail(f"{e} (after {e.attempts} attempt(s))")
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def triage(
    repo: str = typer.Option(..., help="GitHub repository (https://github.com/org/repo or org/repo)"),
    output: Path = typer.Option(config.ITEMS_JSON_PATH, help="Output path for fetched items JSON"),
    embeddings: Path = typer.Option(config.EMBEDDINGS_PATH, help="Output path for embeddings JSONL"),
    html: Path = typer.Option(config.HTML_PATH, help="Output path for the HTML viewer"),
    state: str = typer.Option(config.STATE_OPEN, help="Item state to fetch: open, closed or all"),
    include_issues: bool = typer.Option(False, "--include-issues", help="Fetch issues as well as pull requests"),
    model: str = typer.Option(config.OPENAI_MODEL, help="OpenAI embedding model"),
    batch: int = typer.Option(config.OPENAI_BATCH_SIZE, min=1, help="Batch size for embeddings"),
    max_chars: int = typer.Option(config.EMBED_MAX_CHARS, min=1, help="Max chars for embedding input"),
    body_chars: int = typer.Option(config.EMBED_BODY_CHARS, min=0, help="Max chars for body snippet"),
    neighbors: int = typer.Option(config.UMAP_N_NEIGHBORS, min=2, help="UMAP neighbors"),
    min_dist: float = typer.Option(config.UMAP_MIN_DIST, min=0.0, help="UMAP min distance"),
    spread: float = typer.Option(config.UMAP_SPREAD, min=0.0, help="UMAP spread"),
    pca_dims: Optional[int] = typer.Option(None, min=2, help="PCA dimensions before UMAP (prompts when omitted)"),
    force: bool = typer.Option(False, "--force", help="Recompute the projection even if cached"),
    include_embeddings: bool = typer.Option(False, "--include-embeddings", help="Embed vectors in the page for search"),
    projection: Optional[Path] = typer.Option(None, help="Projection cache path (default: next to the HTML)"),
) -> None:
    """Fetch, embed and build in one go."""
    parsed = parse_repo(repo)
    if parsed is None:
        _fail("Could not parse repo. Use https://github.com/org/repo or org/repo")
    owner, name = parsed
    projection_config = _projection_config(neighbors, min_dist, spread, pca_dims)

    console.print(f"Fetching items for [cyan]{owner}/{name}[/]")
    try:
        fetched = fetch_items(owner, name, output, state=state, include_issues=include_issues)
    except (GitHubFetchError, ValueError) as e:
        _fail(str(e))
    console.print(f"[green]Wrote[/] {output} ({fetched} items)")

    _run_embed(
        input_path=output,
        output_path=embeddings,
        model=model,
        batch_size=batch,
        max_chars=max_chars,
        body_chars=body_chars,
        resume=False,
    )

    written = _run_build(embeddings, html, projection_config, force, include_embeddings, projection)
    console.print(f"[green]Done.[/] Open {written.resolve()}")


@app.command()
def embed(
    input: Path = typer.Option(config.ITEMS_JSON_PATH, "--input", help="Fetched items JSON"),
    output: Path = typer.Option(config.EMBEDDINGS_PATH, help="Embeddings JSONL to write"),
    model: str = typer.Option(config.OPENAI_MODEL, help="OpenAI embedding model"),
    batch: int = typer.Option(config.OPENAI_BATCH_SIZE, min=1, help="Batch size for embeddings"),
    max_chars: int = typer.Option(config.EMBED_MAX_CHARS, min=1, help="Max chars for embedding input"),
    body_chars: int = typer.Option(config.EMBED_BODY_CHARS, min=0, help="Max chars for body snippet"),
    resume: bool = typer.Option(True, "--resume/--no-resume", help="Skip items already in the output"),
) -> None:
    """Embed fetched items."""
    processed = _run_embed(
        input_path=input,
        output_path=output,
        model=model,
        batch_size=batch,
        max_chars=max_chars,
        body_chars=body_chars,
        resume=resume,
    )
    console.print(f"[green]Embedded[/] {processed} item(s) into {output}")


@app.command()
def build(
    input: Path = typer.Option(config.EMBEDDINGS_PATH, "--input", help="Embeddings JSONL"),
    output: Path = typer.Option(config.HTML_PATH, help="HTML viewer to write"),
    neighbors: int = typer.Option(config.UMAP_N_NEIGHBORS, min=2, help="UMAP neighbors"),
    min_dist: float = typer.Option(config.UMAP_MIN_DIST, min=0.0, help="UMAP min distance"),
    spread: float = typer.Option(config.UMAP_SPREAD, min=0.0, help="UMAP spread"),
    pca_dims: Optional[int] = typer.Option(None, min=2, help="PCA dimensions before UMAP (prompts when omitted)"),
    force: bool = typer.Option(False, "--force", help="Recompute the projection even if cached"),
    include_embeddings: bool = typer.Option(False, "--include-embeddings", help="Embed vectors in the page for search"),
    projection: Optional[Path] = typer.Option(None, help="Projection cache path (default: next to the HTML)"),
) -> None:
    """Project embeddings and write the HTML viewer."""
    projection_config = _projection_config(neighbors, min_dist, spread, pca_dims)
    written = _run_build(input, output, projection_config, force, include_embeddings, projection)
    console.print(f"[green]Wrote[/] {written}")


if __name__ == "__main__":
    app()
