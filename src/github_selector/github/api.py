from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from github_selector.core.errors import ListingError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_PER_PAGE = 100
USER_AGENT = "github-selector"


@dataclass(frozen=True)
class RepoInfo:
    """
    One repository of the listing. `raw` is the full API payload, kept
    so the cache round-trips fields we do not model.
    """
    name: str
    full_name: str
    default_branch: str = "main"
    ssh_url: str = ""
    clone_url: str = ""
    html_url: str = ""
    private: bool = False
    fork: bool = False
    archived: bool = False
    owner_login: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RepoInfo":
        owner = d.get("owner") or {}
        name = str(d.get("name") or "")
        full_name = str(d.get("full_name") or "")
        if not name and "/" in full_name:
            name = full_name.rsplit("/", 1)[1]
        return cls(
            name=name,
            full_name=full_name,
            default_branch=str(d.get("default_branch") or "main"),
            ssh_url=str(d.get("ssh_url") or ""),
            clone_url=str(d.get("clone_url") or ""),
            html_url=str(d.get("html_url") or ""),
            private=bool(d.get("private") or False),
            fork=bool(d.get("fork") or False),
            archived=bool(d.get("archived") or False),
            owner_login=str(owner.get("login") or "") if isinstance(owner, dict) else "",
            raw=dict(d),
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.raw:
            return dict(self.raw)
        return {
            "name": self.name,
            "full_name": self.full_name,
            "default_branch": self.default_branch,
            "ssh_url": self.ssh_url,
            "clone_url": self.clone_url,
            "html_url": self.html_url,
            "private": self.private,
            "fork": self.fork,
            "archived": self.archived,
            "owner": {"login": self.owner_login},
        }


class GitHubAPIError(ListingError):
    def __init__(self, message: str, *, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        super().__init__(message, detail=detail)
        self.status = status


@dataclass
class PageError:
    url: str
    message: str
    status: Optional[int] = None


@dataclass
class RepoListing:
    """
    Result of a paginated listing. `errors` is non-empty when a page could
    not be fetched; `repos` then holds only the pages before it.
    """
    repos: List[RepoInfo] = field(default_factory=list)
    errors: List[PageError] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.errors


def _parse_link_header(link: str) -> Dict[str, str]:
    """
    Parse GitHub Link header into rel->url.
    """
    out: Dict[str, str] = {}
    if not link:
        return out
    parts = [p.strip() for p in link.split(",") if p.strip()]
    for p in parts:
        # <url>; rel="next"
        if ";" not in p:
            continue
        url_part, *params = [x.strip() for x in p.split(";")]
        if not (url_part.startswith("<") and url_part.endswith(">")):
            continue
        url = url_part[1:-1]
        rel = None
        for param in params:
            if param.startswith("rel="):
                rel = param.split("=", 1)[1].strip().strip('"')
        if rel:
            out[rel] = url
    return out


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        api_base: str = DEFAULT_API_BASE,
        per_page: int = DEFAULT_PER_PAGE,
        user_agent: str = USER_AGENT,
        timeout_s: int = 30,
        retries: int = 3,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.per_page = max(1, min(100, int(per_page)))
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.retries = max(1, int(retries))

    def _headers(self) -> Dict[str, str]:
        h = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.user_agent,
        }
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    def _request_json(self, url: str) -> Tuple[Any, Dict[str, str], int]:
        """
        Returns: (json_data, headers_lower, status_code)
        """
        last_err: Optional[Exception] = None
        for attempt in range(self.retries):
            try:
                req = urllib.request.Request(url, headers=self._headers(), method="GET")
                with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
                    status = int(getattr(resp, "status", 200))
                    raw = resp.read()
                    headers = {k.lower(): v for k, v in resp.headers.items()}
                    data = json.loads(raw.decode("utf-8", errors="replace")) if raw else None
                    return data, headers, status
            except urllib.error.HTTPError as e:
                status = int(getattr(e, "code", 0) or 0)
                try:
                    body = e.read().decode("utf-8", errors="replace")
                except OSError:
                    body = ""
                # rate limit / transient
                if status in (429, 500, 502, 503, 504):
                    time.sleep(0.5 * (attempt + 1))
                    last_err = e
                    continue
                if status == 403:
                    raise GitHubAPIError(
                        "GitHub API forbidden (possible rate limit or insufficient scopes).",
                        status=status,
                        detail=body,
                    ) from e
                if status == 404:
                    raise GitHubAPIError("Organization not found.", status=status, detail=body) from e
                raise GitHubAPIError("GitHub API request failed.", status=status, detail=body) from e
            except (urllib.error.URLError, OSError, ValueError) as e:
                last_err = e
                time.sleep(0.25 * (attempt + 1))
                continue
        raise GitHubAPIError("GitHub API request failed after retries.", detail=str(last_err))

    def _pages(self, first_url: str) -> Iterator[Tuple[str, List[Dict[str, Any]], Optional[str]]]:
        """
        Yield (url, items, next_url) per page. Raises GitHubAPIError on a failed page.
        """
        url: Optional[str] = first_url
        while url:
            data, headers, status = self._request_json(url)
            if status >= 400:
                raise GitHubAPIError("GitHub API error.", status=status, detail=str(data))
            if not isinstance(data, list):
                raise GitHubAPIError(
                    "Unexpected GitHub response (expected list).", status=status, detail=str(data)[:500]
                )
            nxt = _parse_link_header(headers.get("link", "")).get("next")
            yield url, [x for x in data if isinstance(x, dict)], nxt
            url = nxt

    def org_repos_url(self, org: str) -> str:
        q = {"per_page": str(self.per_page), "type": "all"}
        return f"{self.api_base}/orgs/{urllib.parse.quote(org)}/repos?{urllib.parse.urlencode(q)}"

    def list_org_repos(self, org: str) -> RepoListing:
        """
        Follow rel="next" links until the last page. A failing page is
        logged, recorded in the listing and ends pagination.
        """
        listing = RepoListing()
        url = self.org_repos_url(org)
        pages = self._pages(url)
        while True:
            try:
                url, items, nxt = next(pages)
            except StopIteration:
                break
            except GitHubAPIError as e:
                logger.warning("Failed to fetch %s: %s", url, e)
                listing.errors.append(PageError(url=url, message=str(e), status=e.status))
                break
            listing.repos.extend(RepoInfo.from_dict(x) for x in items)
            if nxt:
                url = nxt
        logger.debug("Listed %d repos for %s (complete=%s)", len(listing.repos), org, listing.complete)
        return listing


def fetch_org_repos(org: str, token: str, **kwargs: Any) -> RepoListing:
    return GitHubClient(token=token, **kwargs).list_org_repos(org)
