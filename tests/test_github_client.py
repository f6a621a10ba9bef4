import base64

import httpx
import pytest

from papertrail.config.models import HostingConfig
from papertrail.utils.errors import HostingAPIError, InputError
from papertrail.utils.github import GitHubClient


def make_response(status_code, json_body, method="GET", url="https://api.github.com/repos/o/r"):
    return httpx.Response(status_code, json=json_body, request=httpx.Request(method, url))


@pytest.fixture
def client():
    return GitHubClient("octo/repo", HostingConfig(token="gh-token"))


def test_invalid_repository():
    with pytest.raises(InputError, match="owner/repo"):
        GitHubClient("not-a-repo", HostingConfig())


def test_headers(client):
    assert client._client.headers["Authorization"] == "Bearer gh-token"
    assert client._client.headers["Accept"] == "application/vnd.github+json"
    assert client.repo_path == "/repos/octo/repo"


def test_token_from_environment(monkeypatch):
    monkeypatch.setenv("CUSTOM_TOKEN", "from-env")
    client = GitHubClient("o/r", HostingConfig(token_env_var="CUSTOM_TOKEN"))
    assert client._client.headers["Authorization"] == "Bearer from-env"


@pytest.mark.asyncio
async def test_get_commit(client, mocker):
    mock_request = mocker.patch(
        "httpx.AsyncClient.request", return_value=make_response(200, {"sha": "abc", "files": []})
    )

    data = await client.get_commit("abc")

    assert data == {"sha": "abc", "files": []}
    mock_request.assert_called_once_with("GET", "/repos/octo/repo/commits/abc")


@pytest.mark.asyncio
async def test_compare(client, mocker):
    mock_request = mocker.patch("httpx.AsyncClient.request", return_value=make_response(200, {"files": []}))
    await client.compare("base1", "head2")
    mock_request.assert_called_once_with("GET", "/repos/octo/repo/compare/base1...head2")


@pytest.mark.asyncio
async def test_get_file_decodes_content(client, mocker):
    encoded = base64.b64encode("# Papertrail\n\nExisting content\n".encode()).decode()
    mock_request = mocker.patch(
        "httpx.AsyncClient.request",
        return_value=make_response(200, {"sha": "xyz789", "content": encoded}),
    )

    data = await client.get_file("papertrail.md", ref="main")

    assert data == {"sha": "xyz789", "content": "# Papertrail\n\nExisting content\n"}
    mock_request.assert_called_once_with(
        "GET", "/repos/octo/repo/contents/papertrail.md", params={"ref": "main"}
    )


@pytest.mark.asyncio
async def test_get_file_not_found(client, mocker):
    mocker.patch("httpx.AsyncClient.request", return_value=make_response(404, {"message": "Not Found"}))
    assert await client.get_file("papertrail.md") is None


@pytest.mark.asyncio
async def test_put_file(client, mocker):
    mock_request = mocker.patch("httpx.AsyncClient.request", return_value=make_response(200, {"content": {}}))

    await client.put_file("papertrail.md", "hello", "docs: update", branch="main", sha="xyz789")

    method, url = mock_request.call_args[0]
    payload = mock_request.call_args[1]["json"]
    assert (method, url) == ("PUT", "/repos/octo/repo/contents/papertrail.md")
    assert payload == {
        "message": "docs: update",
        "content": base64.b64encode(b"hello").decode(),
        "branch": "main",
        "sha": "xyz789",
    }


@pytest.mark.asyncio
async def test_put_file_create_has_no_sha(client, mocker):
    mock_request = mocker.patch("httpx.AsyncClient.request", return_value=make_response(201, {}))
    await client.put_file("papertrail.md", "hello", "docs: create")
    assert "sha" not in mock_request.call_args[1]["json"]


@pytest.mark.asyncio
async def test_http_error_carries_status(client, mocker):
    mocker.patch(
        "httpx.AsyncClient.request",
        return_value=make_response(409, {"message": "papertrail.md does not match xyz789"}),
    )

    with pytest.raises(HostingAPIError, match=r"GitHub API error \(409\)") as exc_info:
        await client.put_file("papertrail.md", "x", "m", sha="xyz789")

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_timeout(client, mocker):
    mocker.patch("httpx.AsyncClient.request", side_effect=httpx.ReadTimeout("slow"))
    with pytest.raises(HostingAPIError, match="timed out"):
        await client.get_commit("abc")


@pytest.mark.asyncio
async def test_update_ref(client, mocker):
    mock_request = mocker.patch("httpx.AsyncClient.request", return_value=make_response(200, {}))
    await client.update_ref("main", "new-sha", force=True)
    assert mock_request.call_args[0] == ("PATCH", "/repos/octo/repo/git/refs/heads/main")
    assert mock_request.call_args[1]["json"] == {"sha": "new-sha", "force": True}


@pytest.mark.asyncio
async def test_get_ref(client, mocker):
    mock_request = mocker.patch(
        "httpx.AsyncClient.request",
        return_value=make_response(200, {"ref": "refs/heads/main", "object": {"sha": "tip-sha"}}),
    )
    ref = await client.get_ref("main")
    assert mock_request.call_args[0] == ("GET", "/repos/octo/repo/git/ref/heads/main")
    assert ref["object"]["sha"] == "tip-sha"
