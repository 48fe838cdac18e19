"""Documentation tabs content (Methodology and Architecture)."""

import streamlit as st


def render_methodology_tab() -> None:
    """Render the Methodology explanation tab."""
    st.markdown("""
## How Doppelgangers Works

### Embeddings: Turning Pull Requests into Numbers

Each pull request or issue is reduced to its title and the start of its
body (up to 4000 characters) and converted into a 1536-dimensional vector
with OpenAI's `text-embedding-3-small` model. Two items that describe the
same change end up with similar vectors even when they use different words.

### PCA, then UMAP

Vectors are first reduced with **PCA** (50 dimensions by default) to strip
noise and speed things up. **UMAP** then lays the items out twice, once in
2D and once in 3D, using cosine distance:

- Near-duplicates land **next to each other**
- Unrelated work stays in **separate clusters**
- The 3D layout can pull apart clusters that overlap in 2D

Coordinates are scaled into the unit square (2D) and unit cube (3D) per
axis, so the layout always fills the view.

### Semantic Search

A search embeds your query with the same model and ranks every item by
**cosine similarity**:

```
similarity = (q · e) / (|q| × |e|)
```

The top 20 items with a positive score become the selection.

### Reading the Map

- Tight groups are the best duplicate candidates; open them side by side
- Distance in the projection is approximate; always check the text
- Projections are cached next to the output, so reopening is instant
""")


def render_architecture_tab() -> None:
    """Render the Architecture documentation tab."""
    st.markdown("""
## System Architecture

### Data Flow

```
gh api ──▶ prs.json ──▶ embed_items ──▶ embeddings.jsonl
                                              │
                                              ▼
                         EmbeddingsJsonlLoader (validate lengths)
                                              │
                                              ▼
                   build_projection ◀──▶ <output>.projection.json
                   (PCA ▶ UMAP 2D + UMAP 3D)
                                              │
                                              ▼
                         assemble_points (normalize per axis)
                                              │
                      ┌───────────────────────┴───────────────────┐
                      ▼                                           ▼
              triage.html (canvas viewer)             ViewerController (this app)
```

### Viewer Engine

| Class / function | Responsibility |
|------------------|----------------|
| `ViewerState` | Camera, filters, selection and gesture |
| `project_to_screen` | Pure 2D/3D point-to-pixel mapping |
| `SelectionEngine` | Pan, rotate and rectangle gestures |
| `RenderScheduler` | At most one repaint per frame |
| `SearchClient` | Query embedding with a session-held key |
| `ViewerController` | Routes input events to the above |

### Adding a New Item Loader

```python
from doppelgangers.loaders.base import BaseDatasetLoader, register_loader

@register_loader("my_source")
class MySourceLoader(BaseDatasetLoader):
    @property
    def name(self) -> str:
        return "my_source"

    def load(self) -> list[EmbeddingRecord]:
        records = ...
        return self.validate(records)
```

### Command Line

```
doppelgangers triage --repo owner/name
doppelgangers embed --input prs.json --output embeddings.jsonl
doppelgangers build --input embeddings.jsonl --output triage.html --pca-dims 50
```
""")
