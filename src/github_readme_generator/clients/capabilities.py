"""The remote capabilities the pipeline consumes. `GitHubClient` implements all of them."""

from typing import Protocol

from github_readme_generator.clients.models.github import (
    FetchedFile,
    GitReference,
    PullRequestResult,
    Repository,
    RepositoryReference,
    TreeEntry,
)


class TreeLister(Protocol):
    async def list_tree(self, ref: RepositoryReference) -> list[TreeEntry]: ...


class FileFetcher(Protocol):
    async def fetch_file(self, ref: RepositoryReference, path: str) -> FetchedFile: ...


class RepositoryMutator(Protocol):
    async def create_fork(self, owner: str, repo: str) -> Repository: ...

    async def get_git_ref(self, owner: str, repo: str, ref: str) -> GitReference: ...

    async def create_git_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitReference: ...

    async def create_blob(self, owner: str, repo: str, content: str) -> str: ...

    async def create_tree(self, owner: str, repo: str, base_tree: str, path: str, blob_sha: str) -> str: ...

    async def create_commit(self, owner: str, repo: str, message: str, tree_sha: str, parent_sha: str) -> str: ...

    async def update_git_ref(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> GitReference: ...

    async def create_pull_request(self, owner: str, repo: str, title: str, body: str, head: str, base: str) -> PullRequestResult: ...
