"""
GitHub source: lists pull requests and issues through the gh CLI.
"""

import json
import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterator, Optional

from doppelgangers.errors import GitHubFetchError
import config

logger = logging.getLogger(__name__)

_REPO_URL = re.compile(r"github\.com[/:]([^/]+)/([^/.]+)(?:\.git)?", re.IGNORECASE)

VALID_STATES = ("open", "closed", "all")

PULLS_JQ = (
    '.[] | {url: .html_url, title: .title, body: .body, number: .number, '
    'state: .state, type: "pr"}'
)
ISSUES_JQ = (
    '.[] | select(.pull_request == null) | {url: .html_url, title: .title, '
    'body: .body, number: .number, state: .state, type: "issue"}'
)


def parse_repo(repo: str) -> Optional[tuple[str, str]]:
    """
    Parse a repository reference.

    Accepts https://github.com/org/repo, git@github.com:org/repo.git or org/repo.

    Returns:
        (owner, name), or None if repo is not recognizable
    """
    trimmed = re.sub(r"\s+", "", repo)
    match = _REPO_URL.search(trimmed)
    if match:
        return match.group(1), match.group(2)
    if "/" in trimmed:
        owner, name = trimmed.split("/")[:2]
        if owner and name:
            return owner, name
    return None


def _run_gh(api_path: str, jq: str, runner: Callable[..., subprocess.Popen]) -> Iterator[dict]:
    """Yield one item per output line of a paginated gh api call."""
    command = ["gh", "api", "--paginate", api_path, "--jq", jq]
    try:
        process = runner(command, stdout=subprocess.PIPE, text=True, encoding="utf-8")
    except FileNotFoundError as e:
        raise GitHubFetchError("The GitHub CLI (gh) is not installed or not on PATH") from e

    with process:
        for line in process.stdout:
            line = line.strip()
            if line:
                yield json.loads(line)

    if process.returncode != 0:
        raise GitHubFetchError(f"gh api {api_path} exited with code {process.returncode}")


def fetch_items(
    owner: str,
    name: str,
    output_path: Path = config.ITEMS_JSON_PATH,
    state: str = config.STATE_OPEN,
    include_issues: bool = False,
    runner: Callable[..., subprocess.Popen] = subprocess.Popen,
    progress_callback: Optional[Callable[[str], None]] = None
) -> int:
    """
    Fetch pull requests (and optionally issues) into a JSON array file.

    Args:
        owner: Repository owner
        name: Repository name
        output_path: JSON file to write
        state: "open", "closed" or "all"
        include_issues: Also list issues (pull requests are excluded from that listing)
        runner: Process factory (replaceable in tests)
        progress_callback: Optional callable(message: str) for progress updates

    Returns:
        Number of items written

    Raises:
        GitHubFetchError: If gh is missing or exits with an error
    """
    def log(msg: str):
        if progress_callback:
            progress_callback(msg)
        logger.info(msg)

    if state not in VALID_STATES:
        raise ValueError(f"Unknown state '{state}'. Expected one of {VALID_STATES}")

    sources = [(f"/repos/{owner}/{name}/pulls?state={state}&per_page=100", PULLS_JQ)]
    if include_issues:
        sources.append((f"/repos/{owner}/{name}/issues?state={state}&per_page=100", ISSUES_JQ))

    items = []
    for api_path, jq in sources:
        for item in _run_gh(api_path, jq, runner):
            items.append(item)
            if len(items) % 200 == 0:
                log(f"Fetched {len(items)} items")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(items, f, indent=1, ensure_ascii=False)

    log(f"Wrote {output_path} ({len(items)} items)")
    return len(items)
