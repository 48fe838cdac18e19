"""
Doppelgangers Configuration
Central configuration for paths, defaults, and settings.
"""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"

# Default artifact paths
ITEMS_JSON_PATH = Path("prs.json")
EMBEDDINGS_PATH = Path("embeddings.jsonl")
HTML_PATH = Path("triage.html")
PROJECTION_SUFFIX = ".projection.json"

# Embedding settings
OPENAI_MODEL = "text-embedding-3-small"
OPENAI_EMBEDDING_DIM = 1536
OPENAI_BATCH_SIZE = 100
EMBED_MAX_CHARS = 4000  # Max chars of title+body sent to the embedding API
EMBED_BODY_CHARS = 2000  # Max chars of body kept as the display snippet
EMBED_MAX_RETRIES = 5
EMBED_BASE_DELAY = 1.0  # Seconds, doubled each retry

# PCA pre-reduction
PCA_COMPONENTS = 50

# UMAP settings
UMAP_N_NEIGHBORS = 15
UMAP_MIN_DIST = 0.1
UMAP_SPREAD = 1.0
UMAP_METRIC = "cosine"

# 2D view
VIEW_2D_MIN_SCALE = 0.2
VIEW_2D_MAX_SCALE = 12.0

# 3D view
VIEW_3D_ROTATE_X = 0.35
VIEW_3D_ROTATE_Y = -0.6
VIEW_3D_ZOOM = 1.2
VIEW_3D_MIN_ZOOM = 0.4
VIEW_3D_MAX_ZOOM = 3.5
VIEW_3D_MAX_PITCH = 1.5
VIEW_3D_PERSPECTIVE = 0.9
VIEW_3D_NEAR_PLANE = 0.05  # Minimum perspective denominator before a point is culled
VIEW_3D_FILL = 0.7  # Fraction of the canvas the unit cube spans
ROTATE_SPEED = 0.005  # Radians per pixel of drag
WHEEL_ZOOM_SPEED = 0.001

# Pointer interaction
CLICK_MAX_TRAVEL = 3.0  # Pixels; shorter drags count as clicks
HIT_RADIUS = 8.0  # Pixels around a point that count as a hit

# Point rendering
POINT_RADIUS = 2.0
SELECTED_POINT_RADIUS = 3.5
RING_WIDTH = 1.0
SELECTION_DASH = (4, 4)
MAX_SIDEBAR_ITEMS = 200

COLORS = {
    "background": "#0f172a",
    "panel": "#111827",
    "text": "#f8fafc",
    "muted": "#94a3b8",
    "accent": "#38bdf8",
    "point": "#e2e8f0",
    "selected": "#f59e0b",
}

# Search settings
SEARCH_TOP_K = 20

# Canvas used when rendering outside a browser
CANVAS_WIDTH = 900
CANVAS_HEIGHT = 700

# Item types and states
TYPE_PR = "pr"
TYPE_ISSUE = "issue"
STATE_OPEN = "open"
STATE_CLOSED = "closed"
