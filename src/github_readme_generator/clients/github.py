import os
from collections.abc import Awaitable, Callable
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Any, Literal, overload
from urllib.parse import quote

import httpx
from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile
from pydantic import ValidationError

from github_readme_generator.clients.errors.github import (
    ListingError,
    ReferenceAlreadyExistsError,
    RequestError,
    ResourceNotFoundError,
    ResponseValidationError,
)
from github_readme_generator.clients.models.github import (
    FetchedFile,
    GitReference,
    PullRequestResult,
    Repository,
    RepositoryReference,
    TreeEntry,
)

if TYPE_CHECKING:
    from githubkit.versions.v2022_11_28.models import FullRepository as GitHubKitFullRepository
    from githubkit.versions.v2022_11_28.models import GitCommit as GitHubKitGitCommit
    from githubkit.versions.v2022_11_28.models import GitRef as GitHubKitGitRef
    from githubkit.versions.v2022_11_28.models import GitTree as GitHubKitGitTree
    from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
    from githubkit.versions.v2022_11_28.models import ShortBlob as GitHubKitShortBlob

NOT_FOUND_ERROR = 404
UNPROCESSABLE_ENTITY_ERROR = 422

REFERENCE_ALREADY_EXISTS_MESSAGE = "Reference already exists"

DEFAULT_GITHUB_API_URL = "https://api.github.com"


def get_github_token() -> str | None:
    for env_var in ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"):
        if token := os.getenv(env_var):
            return token
    return None


def get_githubkit_client(
    token: str | None = None,
    base_url: str = DEFAULT_GITHUB_API_URL,
    auto_retry: bool = True,
    async_transport: httpx.AsyncBaseTransport | None = None,
) -> GitHubKit[Any]:
    # Retry server errors once and rate limit errors up to 3 times
    retry_chain = RetryChainDecision(RetryServerError(), RetryRateLimit(max_retry=3)) if auto_retry else False

    # Anonymous when no token is available, which is enough to read public repositories
    auth = TokenAuthStrategy(token=token) if token else None

    return GitHubKit(auth=auth, base_url=base_url, auto_retry=retry_chain, http_cache=False, async_transport=async_transport)


def quote_path(path: str) -> str:
    """Percent-encode a repository path or branch name for use in a request URL, keeping its `/` separators."""

    return quote(path, safe="/")


def extract_error_message(response: httpx.Response) -> str:
    """Extract the `message` GitHub puts in error bodies, falling back to the raw text."""

    try:
        body = response.json()  # pyright: ignore[reportAny]
    except ValueError:
        return response.text

    if isinstance(body, dict) and isinstance(message := body.get("message"), str):  # pyright: ignore[reportUnknownMemberType]
        return message

    return response.text


class GitHubClient:
    """Reads repository content from, and stages pull requests against, the GitHub REST API."""

    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        self.githubkit_client = githubkit_client or get_githubkit_client(token=get_github_token())
        self.logger = logger or getLogger(__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.exception if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    @overload
    async def _perform_rest_request[T](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[True] = True,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T: ...

    @overload
    async def _perform_rest_request[T](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[False] = False,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None: ...

    async def _perform_rest_request[T](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: bool | None = True,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None:
        """Perform a request and extract the parsed response.

        Args:
            action: The action being performed.
            log_request: Whether to log the request.
            log_response: Whether to log the response.
            log_on_error: Whether to log on error.
            error_on_not_found: Whether to raise an error if the resource is not found.

        Raises:
            ResourceNotFoundError: If the resource is not found and error_on_not_found is True.
            ResponseValidationError: If the response body does not match the expected model.
            RequestError: If the request fails.
        """

        request_logger, response_logger, error_logger = self._get_loggers(
            log_request=log_request, log_response=log_response, log_on_error=log_on_error
        )

        request_logger(f"Performing {action} using {method.__name__} with kwargs {request_args}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code

            if status_code == NOT_FOUND_ERROR:
                if error_on_not_found:
                    raise ResourceNotFoundError(action=action, resource=e.request.url.path) from e

                return None

            message: str = extract_error_message(e.response.raw_response)

            error_logger(f"RequestFailed error performing {action} using {method.__name__} with kwargs {request_args}: {message}")

            raise RequestError(action=action, message=message, status_code=status_code) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action} using {method.__name__} with kwargs {request_args}: {e}")

            raise RequestError(action=action, message=str(e)) from e

        try:
            extracted_response: T = response.parsed_data
        except ValidationError as e:
            error_logger(f"Unexpected response body performing {action} using {method.__name__} with kwargs {request_args}: {e}")

            raise ResponseValidationError(action=action, message=str(e)) from e

        response_logger(f"Extracted response for {action} using {method.__name__} with kwargs {request_args}: {extracted_response}")

        return extracted_response

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[True] = True) -> Repository: ...

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[False] = False) -> Repository | None: ...

    async def get_repository(self, owner: str, repo: str, error_on_not_found: bool = True) -> Repository | None:
        """Get a repository's name, description and default branch."""

        if full_repository := await self._perform_rest_request(
            action="Get repository",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get,
            owner=owner,
            repo=repo,
        ):
            return Repository.from_full_repository(full_repository=full_repository)

        return None

    async def list_tree(self, ref: RepositoryReference) -> list[TreeEntry]:
        """List every entry of the repository tree at `ref`, recursively, in the order GitHub returns them.

        Raises:
            ListingError: If the repository or the ref does not exist.
        """

        try:
            git_tree: GitHubKitGitTree = await self._perform_rest_request(
                action="List repository tree",
                method=self.githubkit_client.rest.git.async_get_tree,
                owner=ref.owner,
                repo=ref.name,
                tree_sha=quote_path(ref.branch),
                recursive="1",
            )
        except ResourceNotFoundError as e:
            raise ListingError(owner=ref.owner, repo=ref.name, ref=ref.branch) from e

        if git_tree.truncated:
            self.logger.warning(f"The tree of {ref.full_name}@{ref.branch} was truncated by GitHub, some files will not be listed.")

        return [TreeEntry.from_git_tree_item(git_tree_item=git_tree_item) for git_tree_item in git_tree.tree]

    async def fetch_file(self, ref: RepositoryReference, path: str) -> FetchedFile:
        """Get the decoded text content of a file.

        Raises:
            ResourceNotFoundError: If the file does not exist at `ref`.
            ResponseValidationError: If the path is not a file or the content is not UTF-8 text.
        """

        content = await self._perform_rest_request(
            action="Get file",
            log_request=False,
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=ref.owner,
            repo=ref.name,
            path=quote_path(path),
            ref=ref.branch,
        )

        if not isinstance(content, GitHubKitContentFile):
            raise ResponseValidationError(action="Get file", message=f"{path} is a {type(content).__name__}, not a file")

        try:
            return FetchedFile.from_content_file(content_file=content)
        except (UnicodeDecodeError, ValueError) as e:
            raise ResponseValidationError(action="Get file", message=f"{path} is not a UTF-8 text file") from e

    async def create_fork(self, owner: str, repo: str) -> Repository:
        """Fork a repository into the account of the authenticated user."""

        full_repository: GitHubKitFullRepository = await self._perform_rest_request(
            action="Create fork",
            method=self.githubkit_client.rest.repos.async_create_fork,
            owner=owner,
            repo=repo,
        )

        return Repository.from_full_repository(full_repository=full_repository)

    async def get_git_ref(self, owner: str, repo: str, ref: str) -> GitReference:
        """Get a git ref, e.g. `heads/main`."""

        git_ref: GitHubKitGitRef = await self._perform_rest_request(
            action="Get git ref",
            method=self.githubkit_client.rest.git.async_get_ref,
            owner=owner,
            repo=repo,
            ref=quote_path(ref),
        )

        return GitReference.from_git_ref(git_ref=git_ref)

    async def create_git_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        """Create a fully-qualified git ref, e.g. `refs/heads/update-readme`.

        Raises:
            ReferenceAlreadyExistsError: If the ref already exists.
        """

        try:
            git_ref: GitHubKitGitRef = await self._perform_rest_request(
                action="Create git ref",
                method=self.githubkit_client.rest.git.async_create_ref,
                owner=owner,
                repo=repo,
                ref=ref,
                sha=sha,
            )
        except RequestError as e:
            if e.status_code == UNPROCESSABLE_ENTITY_ERROR and REFERENCE_ALREADY_EXISTS_MESSAGE in str(e):
                raise ReferenceAlreadyExistsError(action="Create git ref", ref=ref) from e

            raise

        return GitReference.from_git_ref(git_ref=git_ref)

    async def update_git_ref(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> GitReference:
        """Point an existing git ref, e.g. `heads/update-readme`, at a new commit."""

        git_ref: GitHubKitGitRef = await self._perform_rest_request(
            action="Update git ref",
            method=self.githubkit_client.rest.git.async_update_ref,
            owner=owner,
            repo=repo,
            ref=quote_path(ref),
            sha=sha,
            force=force,
        )

        return GitReference.from_git_ref(git_ref=git_ref)

    async def create_blob(self, owner: str, repo: str, content: str) -> str:
        """Create a UTF-8 blob and return its SHA."""

        blob: GitHubKitShortBlob = await self._perform_rest_request(
            action="Create blob",
            method=self.githubkit_client.rest.git.async_create_blob,
            owner=owner,
            repo=repo,
            content=content,
            encoding="utf-8",
        )

        return blob.sha

    async def create_tree(self, owner: str, repo: str, base_tree: str, path: str, blob_sha: str) -> str:
        """Create a tree on top of `base_tree` that replaces `path` with the blob and return its SHA."""

        tree: GitHubKitGitTree = await self._perform_rest_request(
            action="Create tree",
            method=self.githubkit_client.rest.git.async_create_tree,
            owner=owner,
            repo=repo,
            base_tree=base_tree,
            tree=[{"path": path, "mode": "100644", "type": "blob", "sha": blob_sha}],
        )

        return tree.sha

    async def create_commit(self, owner: str, repo: str, message: str, tree_sha: str, parent_sha: str) -> str:
        """Create a commit with a single parent and return its SHA."""

        commit: GitHubKitGitCommit = await self._perform_rest_request(
            action="Create commit",
            method=self.githubkit_client.rest.git.async_create_commit,
            owner=owner,
            repo=repo,
            message=message,
            tree=tree_sha,
            parents=[parent_sha],
        )

        return commit.sha

    async def create_pull_request(self, owner: str, repo: str, title: str, body: str, head: str, base: str) -> PullRequestResult:
        """Open a pull request from `head` (`owner:branch`) into `base`."""

        pull_request: GitHubKitPullRequest = await self._perform_rest_request(
            action="Create pull request",
            method=self.githubkit_client.rest.pulls.async_create,
            owner=owner,
            repo=repo,
            title=title,
            body=body,
            head=head,
            base=base,
        )

        return PullRequestResult.from_pull_request(pull_request=pull_request)
