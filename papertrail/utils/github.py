import base64
import os
from typing import Any, Dict, List, Optional

import httpx

from papertrail.config.models import HostingConfig
from papertrail.utils.errors import HostingAPIError, InputError
from papertrail.utils.logger import logger

ZERO_SHA = "0" * 40


class GitHubClient:
    """
    Minimal async client for the GitHub REST API, scoped to one repository.
    """

    def __init__(self, repository: str, config: HostingConfig):
        if not repository or "/" not in repository:
            raise InputError(f"Repository must be given as 'owner/repo', got '{repository}'.")
        self.owner, self.repo = repository.split("/", 1)
        self.config = config

        token = config.token or os.getenv(config.token_env_var)
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning(
                f"Environment variable '{config.token_env_var}' not set. "
                "Making unauthenticated requests to the GitHub API."
            )

        self._client = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            headers=headers,
            timeout=config.timeout_sec,
        )

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise HostingAPIError(f"Request to GitHub timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            try:
                error_message = e.response.json().get("message", e.response.text)
            except ValueError:
                error_message = e.response.text
            raise HostingAPIError(
                f"GitHub API error ({e.response.status_code}): {error_message}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise HostingAPIError(f"An unexpected network error occurred: {e}") from e
        return response.json()

    async def get_commit(self, sha: str) -> Dict[str, Any]:
        # TODO: follow the files pagination for commits touching more than 300 files
        return await self._request("GET", f"{self.repo_path}/commits/{sha}")

    async def compare(self, base: str, head: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.repo_path}/compare/{base}...{head}")

    async def get_file(self, path: str, ref: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Returns ``{"sha", "content"}`` with decoded content, or None when the file does not exist."""
        params = {"ref": ref} if ref else None
        try:
            data = await self._request("GET", f"{self.repo_path}/contents/{path}", params=params)
        except HostingAPIError as e:
            if e.status_code == 404:
                return None
            raise
        content = base64.b64decode(data.get("content", "")).decode("utf-8")
        return {"sha": data["sha"], "content": content}

    async def put_file(
        self,
        path: str,
        content: str,
        message: str,
        branch: Optional[str] = None,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            payload["branch"] = branch
        if sha:
            payload["sha"] = sha
        return await self._request("PUT", f"{self.repo_path}/contents/{path}", json=payload)

    async def get_git_commit(self, sha: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.repo_path}/git/commits/{sha}")

    async def create_git_commit(self, message: str, tree: str, parents: List[str]) -> Dict[str, Any]:
        payload = {"message": message, "tree": tree, "parents": parents}
        return await self._request("POST", f"{self.repo_path}/git/commits", json=payload)

    async def get_ref(self, branch: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.repo_path}/git/ref/heads/{branch}")

    async def update_ref(self, branch: str, sha: str, force: bool = False) -> Dict[str, Any]:
        payload = {"sha": sha, "force": force}
        return await self._request("PATCH", f"{self.repo_path}/git/refs/heads/{branch}", json=payload)

    async def aclose(self) -> None:
        await self._client.aclose()
