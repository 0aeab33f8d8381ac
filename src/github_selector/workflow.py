from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from github_selector.core.cache import RepoCache
from github_selector.core.config import Configuration
from github_selector.core.errors import ListingError
from github_selector.github.api import RepoInfo, RepoListing, fetch_org_repos
from github_selector.github.clone import CloneOptions, clone_repo
from github_selector.selector import DEFAULT_FILTER_COMMAND, select

logger = logging.getLogger(__name__)

EventType = str  # "fetch_start"|"fetch_done"|"cache_hit"|"partial_listing"|"clone_start"|"clone_done"
OnEvent = Callable[[EventType, str], None]  # (event, message)

Fetcher = Callable[[str, str], RepoListing]  # (org, token)
Selector = Callable[[Sequence[str], str], List[str]]  # (candidates, command)
Cloner = Callable[[RepoInfo, Path, CloneOptions], Path]


@dataclass(frozen=True)
class WorkflowOptions:
    refresh: bool = False
    strict: bool = False
    filter_command: str = DEFAULT_FILTER_COMMAND
    clone: CloneOptions = field(default_factory=CloneOptions)


def resolve_listing(
    cache: RepoCache,
    fetch: Callable[[], RepoListing],
    *,
    refresh: bool = False,
    on_event: Optional[OnEvent] = None,
) -> RepoListing:
    """
    Use the cached snapshot unless a refresh is requested or there is none.
    A fresh, complete listing replaces the cache.
    """
    if not refresh and cache.exists():
        repos = cache.read()
        if on_event:
            on_event("cache_hit", f"{len(repos)} repos from {cache.path}")
        return RepoListing(repos=repos)

    if on_event:
        on_event("fetch_start", "")
    listing = fetch()
    if on_event:
        on_event("fetch_done", f"{len(listing.repos)} repos")

    if listing.complete:
        cache.write(listing.repos)
    else:
        logger.warning(
            "Listing is incomplete (%d page error(s)); cache left unchanged.", len(listing.errors)
        )
    return listing


def find_selected(repos: Sequence[RepoInfo], selection: Sequence[str]) -> Optional[RepoInfo]:
    """
    Map the first selected line back to its repository.
    Returns None when nothing was selected or the line matches no repo.
    """
    if not selection:
        return None
    wanted = selection[0].strip()
    if not wanted:
        return None
    for repo in repos:
        if repo.full_name == wanted:
            return repo
    logger.warning("Selected %r does not match any repository.", wanted)
    return None


def run_workflow(
    config: Configuration,
    cache: RepoCache,
    opts: WorkflowOptions = WorkflowOptions(),
    *,
    fetcher: Fetcher = fetch_org_repos,
    selector: Selector = select,
    cloner: Cloner = clone_repo,
    on_event: Optional[OnEvent] = None,
) -> Optional[Path]:
    """
    Listing -> selection -> clone. Returns the checkout path, or None when
    the user selected nothing.
    """
    listing = resolve_listing(
        cache,
        lambda: fetcher(config.org_name, config.github_token),
        refresh=opts.refresh,
        on_event=on_event,
    )

    if not listing.complete:
        if opts.strict or not listing.repos:
            first = listing.errors[0]
            raise ListingError(
                f"Repository listing for {config.org_name} is incomplete.",
                detail=f"{first.url}: {first.message}",
            )
        if on_event:
            on_event("partial_listing", f"{len(listing.repos)} repos before the failed page")

    if not listing.repos:
        logger.warning("No repositories found for %s.", config.org_name)
        return None

    selection = selector([r.full_name for r in listing.repos], opts.filter_command)
    repo = find_selected(listing.repos, selection)
    if repo is None:
        logger.debug("Nothing selected; skipping clone.")
        return None

    if on_event:
        on_event("clone_start", repo.full_name)
    path = cloner(repo, Path(config.clone_dir), opts.clone)
    if on_event:
        on_event("clone_done", str(path))
    return path
