from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..core.context import Context

logger = logging.getLogger(__name__)

PROVIDER_NAME = "github"
API_URL = "https://api.github.com"
PAGE_SIZE = 100


@dataclass
class _GitHubTarget:
    owner: str
    repo: str
    environment: str


class GitHubEnvProvider:
    """GitHub environment variables provider (variables only; secrets are not readable).

    Source format: owner/repo#environment
    Token: from the ``token`` config key, else the GITHUB_TOKEN env var.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = API_URL,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 20.0,
    ):
        self.name = PROVIDER_NAME
        self.token = token or os.getenv("GITHUB_TOKEN")
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    def _parse_source(self, source: str) -> _GitHubTarget:
        if "#" not in source:
            raise ValueError(
                "GitHub source must include #environment suffix, e.g. github:owner/repo#production"
            )
        path, env = source.split("#", 1)
        if path.count("/") != 1 or not env:
            raise ValueError("GitHub source path must be owner/repo#environment")
        owner, repo = path.split("/", 1)
        if not owner or not repo:
            raise ValueError("GitHub source path must be owner/repo#environment")
        return _GitHubTarget(owner=owner, repo=repo, environment=env)

    def validate(self, source: str) -> None:
        self._parse_source(source)
        if not self.token:
            raise PermissionError("GITHUB_TOKEN not set and token not provided for github provider")

    def _client(self, ctx: Context) -> httpx.Client:
        remaining = ctx.remaining()
        timeout = self.timeout if remaining is None else min(self.timeout, remaining)
        return httpx.Client(
            base_url=self.base_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=self._transport,
        )

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        target = self._parse_source(source)
        url = f"/repos/{target.owner}/{target.repo}/environments/{target.environment}/variables"
        variables: Dict[str, str] = {}
        page = 1
        with self._client(ctx) as client:
            while True:
                ctx.raise_if_done()
                resp = client.get(url, params={"per_page": PAGE_SIZE, "page": page})
                resp.raise_for_status()
                batch = resp.json().get("variables", [])
                for v in batch:
                    variables[v["name"]] = v.get("value") or ""
                if len(batch) < PAGE_SIZE:
                    break
                page += 1
        logger.debug("read %d variables from %s", len(variables), source)
        return variables


def create_github_provider(config: Dict[str, Any]) -> GitHubEnvProvider:
    token = config.get("token")
    base_url = config.get("base_url") or API_URL
    return GitHubEnvProvider(token=token if isinstance(token, str) else None, base_url=str(base_url))
