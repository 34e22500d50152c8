import base64
import json
from collections.abc import AsyncGenerator, Callable, Sequence
from typing import Any, overload

import httpx
import pytest
from openai import AsyncOpenAI
from pydantic import BaseModel

from github_readme_generator.clients.generation import DocumentationClient
from github_readme_generator.clients.github import GitHubClient, get_githubkit_client

GITHUB_API_URL = "https://api.github.com"
GENERATION_BASE_URL = "https://generation.test/v1"

TIMESTAMP = "2024-01-01T00:00:00Z"

Handler = Callable[[httpx.Request], httpx.Response]


class GitHubApiStub:
    """Answers GitHub REST requests from a table of canned responses and records every request it receives.

    Routes are matched on the decoded path. Requests without a route get the 404 body GitHub returns.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status_code: int = 200) -> None:
        self.routes[(method, path)] = lambda _: httpx.Response(status_code=status_code, json=body)

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if route := self.routes.get((request.method, request.url.path)):
            return route(request)

        return httpx.Response(status_code=404, json={"message": "Not Found", "documentation_url": "https://docs.github.com/rest"})

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == method and request.url.path == path]

    def json_sent_to(self, method: str, path: str) -> Any:
        requests = self.requests_to(method=method, path=path)
        assert len(requests) == 1
        return json.loads(requests[0].content)


class GenerationApiStub:
    """Answers chat completion requests with a fixed completion, or with whatever `response_handler` returns."""

    def __init__(self, content: str | None = "## Overview\n\nGenerated documentation."):
        self.content: str | None = content
        self.response_handler: Handler | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.response_handler:
            return self.response_handler(request)

        return httpx.Response(status_code=200, json=chat_completion_json(content=self.content))

    @property
    def last_messages(self) -> list[dict[str, str]]:
        return json.loads(self.requests[-1].content)["messages"]


def chat_completion_json(content: str | None) -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "deepseek-chat",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


# GitHub response bodies, shaped like the examples in the GitHub REST API documentation


def user_json(login: str) -> dict[str, Any]:
    api_url = f"{GITHUB_API_URL}/users/{login}"
    return {
        "login": login,
        "id": 1,
        "node_id": "MDQ6VXNlcjE=",
        "avatar_url": "https://github.com/images/error/octocat_happy.gif",
        "gravatar_id": "",
        "url": api_url,
        "html_url": f"https://github.com/{login}",
        "followers_url": f"{api_url}/followers",
        "following_url": f"{api_url}/following{{/other_user}}",
        "gists_url": f"{api_url}/gists{{/gist_id}}",
        "starred_url": f"{api_url}/starred{{/owner}}{{/repo}}",
        "subscriptions_url": f"{api_url}/subscriptions",
        "organizations_url": f"{api_url}/orgs",
        "repos_url": f"{api_url}/repos",
        "events_url": f"{api_url}/events{{/privacy}}",
        "received_events_url": f"{api_url}/received_events",
        "type": "User",
        "site_admin": False,
    }


def repository_json(
    owner: str, name: str, description: str | None = None, default_branch: str = "main", fork: bool = False
) -> dict[str, Any]:
    api_url = f"{GITHUB_API_URL}/repos/{owner}/{name}"
    return {
        "id": 1296269,
        "node_id": "MDEwOlJlcG9zaXRvcnkxMjk2MjY5",
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": user_json(owner),
        "private": False,
        "html_url": f"https://github.com/{owner}/{name}",
        "description": description,
        "fork": fork,
        "url": api_url,
        "archive_url": f"{api_url}/{{archive_format}}{{/ref}}",
        "assignees_url": f"{api_url}/assignees{{/user}}",
        "blobs_url": f"{api_url}/git/blobs{{/sha}}",
        "branches_url": f"{api_url}/branches{{/branch}}",
        "collaborators_url": f"{api_url}/collaborators{{/collaborator}}",
        "comments_url": f"{api_url}/comments{{/number}}",
        "commits_url": f"{api_url}/commits{{/sha}}",
        "compare_url": f"{api_url}/compare/{{base}}...{{head}}",
        "contents_url": f"{api_url}/contents/{{+path}}",
        "contributors_url": f"{api_url}/contributors",
        "deployments_url": f"{api_url}/deployments",
        "downloads_url": f"{api_url}/downloads",
        "events_url": f"{api_url}/events",
        "forks_url": f"{api_url}/forks",
        "git_commits_url": f"{api_url}/git/commits{{/sha}}",
        "git_refs_url": f"{api_url}/git/refs{{/sha}}",
        "git_tags_url": f"{api_url}/git/tags{{/sha}}",
        "git_url": f"git:github.com/{owner}/{name}.git",
        "issue_comment_url": f"{api_url}/issues/comments{{/number}}",
        "issue_events_url": f"{api_url}/issues/events{{/number}}",
        "issues_url": f"{api_url}/issues{{/number}}",
        "keys_url": f"{api_url}/keys{{/key_id}}",
        "labels_url": f"{api_url}/labels{{/name}}",
        "languages_url": f"{api_url}/languages",
        "merges_url": f"{api_url}/merges",
        "milestones_url": f"{api_url}/milestones{{/number}}",
        "notifications_url": f"{api_url}/notifications{{?since,all,participating}}",
        "pulls_url": f"{api_url}/pulls{{/number}}",
        "releases_url": f"{api_url}/releases{{/id}}",
        "ssh_url": f"git@github.com:{owner}/{name}.git",
        "stargazers_url": f"{api_url}/stargazers",
        "statuses_url": f"{api_url}/statuses/{{sha}}",
        "subscribers_url": f"{api_url}/subscribers",
        "subscription_url": f"{api_url}/subscription",
        "tags_url": f"{api_url}/tags",
        "teams_url": f"{api_url}/teams",
        "trees_url": f"{api_url}/git/trees{{/sha}}",
        "clone_url": f"https://github.com/{owner}/{name}.git",
        "mirror_url": None,
        "hooks_url": f"{api_url}/hooks",
        "svn_url": f"https://svn.github.com/{owner}/{name}",
        "homepage": None,
        "language": "Python",
        "forks_count": 0,
        "forks": 0,
        "stargazers_count": 0,
        "watchers_count": 0,
        "watchers": 0,
        "size": 108,
        "default_branch": default_branch,
        "open_issues_count": 0,
        "open_issues": 0,
        "is_template": False,
        "topics": [],
        "has_issues": True,
        "has_projects": True,
        "has_wiki": True,
        "has_pages": False,
        "has_downloads": True,
        "has_discussions": False,
        "archived": False,
        "disabled": False,
        "visibility": "public",
        "pushed_at": TIMESTAMP,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
        "allow_forking": True,
        "web_commit_signoff_required": False,
        "license": None,
        "network_count": 0,
        "subscribers_count": 0,
    }


def tree_json(entries: Sequence[tuple[str, str, int | None]], truncated: bool = False) -> dict[str, Any]:
    tree: list[dict[str, Any]] = []

    for path, entry_type, size in entries:
        tree_item: dict[str, Any] = {
            "path": path,
            "mode": "040000" if entry_type == "tree" else "100644",
            "type": entry_type,
            "sha": f"{path}-sha",
            "url": f"{GITHUB_API_URL}/repos/octo/demo/git/{entry_type}s/{path}-sha",
        }
        if size is not None:
            tree_item["size"] = size
        tree.append(tree_item)

    return {"sha": "tree-sha", "url": f"{GITHUB_API_URL}/repos/octo/demo/git/trees/tree-sha", "tree": tree, "truncated": truncated}


def content_json(path: str, content: str | bytes) -> dict[str, Any]:
    raw_content: bytes = content.encode("utf-8") if isinstance(content, str) else content
    api_url = f"{GITHUB_API_URL}/repos/octo/demo/contents/{path}"
    return {
        "type": "file",
        "encoding": "base64",
        "size": len(raw_content),
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "content": base64.b64encode(raw_content).decode("ascii"),
        "sha": f"{path}-sha",
        "url": api_url,
        "git_url": f"{GITHUB_API_URL}/repos/octo/demo/git/blobs/{path}-sha",
        "html_url": f"https://github.com/octo/demo/blob/main/{path}",
        "download_url": f"https://raw.githubusercontent.com/octo/demo/main/{path}",
        "_links": {
            "git": f"{GITHUB_API_URL}/repos/octo/demo/git/blobs/{path}-sha",
            "self": api_url,
            "html": f"https://github.com/octo/demo/blob/main/{path}",
        },
    }


def git_ref_json(ref: str, sha: str) -> dict[str, Any]:
    return {
        "ref": ref,
        "node_id": "MDM6UmVmcmVmcy9oZWFkcy9mZWF0dXJlQQ==",
        "url": f"{GITHUB_API_URL}/repos/octo/demo/git/{ref}",
        "object": {"type": "commit", "sha": sha, "url": f"{GITHUB_API_URL}/repos/octo/demo/git/commits/{sha}"},
    }


def blob_json(sha: str) -> dict[str, Any]:
    return {"url": f"{GITHUB_API_URL}/repos/me/demo/git/blobs/{sha}", "sha": sha}


def commit_json(sha: str, tree_sha: str, parent_sha: str, message: str = "docs: update README") -> dict[str, Any]:
    author = {"date": TIMESTAMP, "name": "Mona Octocat", "email": "mona@github.com"}
    return {
        "sha": sha,
        "node_id": "MDY6Q29tbWl0N2E4YTM2NDg=",
        "url": f"{GITHUB_API_URL}/repos/me/demo/git/commits/{sha}",
        "html_url": f"https://github.com/me/demo/commit/{sha}",
        "author": author,
        "committer": author,
        "message": message,
        "tree": {"url": f"{GITHUB_API_URL}/repos/me/demo/git/trees/{tree_sha}", "sha": tree_sha},
        "parents": [
            {
                "url": f"{GITHUB_API_URL}/repos/me/demo/git/commits/{parent_sha}",
                "sha": parent_sha,
                "html_url": f"https://github.com/me/demo/commit/{parent_sha}",
            }
        ],
        "verification": {"verified": False, "reason": "unsigned", "signature": None, "payload": None, "verified_at": None},
    }


def pull_request_json(owner: str, name: str, number: int, head_owner: str, head_ref: str, base_ref: str = "main") -> dict[str, Any]:
    api_url = f"{GITHUB_API_URL}/repos/{owner}/{name}"
    html_url = f"https://github.com/{owner}/{name}/pull/{number}"
    links = {
        "self": f"{api_url}/pulls/{number}",
        "html": html_url,
        "issue": f"{api_url}/issues/{number}",
        "comments": f"{api_url}/issues/{number}/comments",
        "review_comments": f"{api_url}/pulls/{number}/comments",
        "review_comment": f"{api_url}/pulls/comments{{/number}}",
        "commits": f"{api_url}/pulls/{number}/commits",
        "statuses": f"{api_url}/statuses/head-sha",
    }
    return {
        "url": links["self"],
        "id": 1,
        "node_id": "MDExOlB1bGxSZXF1ZXN0MQ==",
        "html_url": html_url,
        "diff_url": f"{html_url}.diff",
        "patch_url": f"{html_url}.patch",
        "issue_url": links["issue"],
        "commits_url": links["commits"],
        "review_comments_url": links["review_comments"],
        "review_comment_url": links["review_comment"],
        "comments_url": links["comments"],
        "statuses_url": links["statuses"],
        "number": number,
        "state": "open",
        "locked": False,
        "title": "Update README",
        "user": user_json(head_owner),
        "body": "Generated README",
        "labels": [],
        "milestone": None,
        "active_lock_reason": None,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
        "closed_at": None,
        "merged_at": None,
        "merge_commit_sha": None,
        "assignee": None,
        "assignees": [],
        "requested_reviewers": [],
        "requested_teams": [],
        "head": {
            "label": f"{head_owner}:{head_ref}",
            "ref": head_ref,
            "sha": "head-sha",
            "user": user_json(head_owner),
            "repo": repository_json(owner=head_owner, name=name, fork=True),
        },
        "base": {
            "label": f"{owner}:{base_ref}",
            "ref": base_ref,
            "sha": "base-sha",
            "user": user_json(owner),
            "repo": repository_json(owner=owner, name=name),
        },
        "_links": {key: {"href": href} for key, href in links.items()},
        "author_association": "NONE",
        "auto_merge": None,
        "draft": False,
        "merged": False,
        "mergeable": None,
        "rebaseable": None,
        "mergeable_state": "unknown",
        "merged_by": None,
        "comments": 0,
        "review_comments": 0,
        "maintainer_can_modify": True,
        "commits": 1,
        "additions": 1,
        "deletions": 1,
        "changed_files": 1,
    }


def handle_exclude_keys(dictionary: dict[str, Any], exclude_keys: list[str] | None = None) -> dict[str, Any]:
    if exclude_keys is None:
        return dictionary
    return {key: value for key, value in dictionary.items() if key not in exclude_keys}


@overload
def dump_for_snapshot(
    basemodel: None,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> None: ...


@overload
def dump_for_snapshot(
    basemodel: BaseModel,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> dict[str, Any]: ...


def dump_for_snapshot(
    basemodel: None | BaseModel,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> dict[str, Any] | None:
    if basemodel is None:
        return None

    return handle_exclude_keys(basemodel.model_dump(exclude_none=exclude_none, **dump_kwargs), exclude_keys)


def dump_list_for_snapshot(
    basemodels: None | Sequence[BaseModel],
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> list[dict[str, Any]]:
    if basemodels is None:
        return []

    return [dump_for_snapshot(basemodel, exclude_keys, exclude_none, **dump_kwargs) for basemodel in basemodels]


@pytest.fixture
def github_api() -> GitHubApiStub:
    return GitHubApiStub()


@pytest.fixture
def github_client(github_api: GitHubApiStub) -> GitHubClient:
    githubkit_client = get_githubkit_client(
        token="test-token", base_url=GITHUB_API_URL, auto_retry=False, async_transport=httpx.MockTransport(github_api.handler)
    )

    return GitHubClient(githubkit_client=githubkit_client)


@pytest.fixture
def generation_api() -> GenerationApiStub:
    return GenerationApiStub()


@pytest.fixture
async def documentation_client(generation_api: GenerationApiStub) -> AsyncGenerator[DocumentationClient, Any]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(generation_api.handler))

    openai_client = AsyncOpenAI(api_key="test-key", base_url=GENERATION_BASE_URL, max_retries=0, http_client=http_client)

    documentation_client = DocumentationClient(openai_client=openai_client, base_url=GENERATION_BASE_URL)

    yield documentation_client

    await documentation_client.aclose()
