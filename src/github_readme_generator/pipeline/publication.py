import asyncio
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from enum import StrEnum
from logging import Logger, getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from github_readme_generator.clients.errors.github import ClientError, ReferenceAlreadyExistsError
from github_readme_generator.errors import PublicationError

if TYPE_CHECKING:
    from github_readme_generator.clients.capabilities import RepositoryMutator
    from github_readme_generator.clients.models.github import GitReference, PullRequestResult, Repository, RepositoryReference

DEFAULT_BRANCH_NAME = "update-readme"
DEFAULT_README_PATH = "README.md"
DEFAULT_COMMIT_MESSAGE = "docs: update README.md with generated documentation"
DEFAULT_PULL_REQUEST_TITLE = "docs: update README.md"
DEFAULT_PULL_REQUEST_BODY = (
    "This pull request updates `README.md` with documentation generated from the content of the repository.\n\n"
    + "Please review the generated text for accuracy before merging."
)
DEFAULT_FORK_WAIT_SECONDS = 5.0


class PublicationStage(StrEnum):
    """The steps of the publication sequence, in the order they run."""

    FORKED = "Forked"
    BRANCH_ENSURED = "BranchEnsured"
    BLOB_CREATED = "BlobCreated"
    TREE_CREATED = "TreeCreated"
    COMMIT_CREATED = "CommitCreated"
    REF_UPDATED = "RefUpdated"
    PR_CREATED = "PRCreated"


class PublicationOptions(BaseModel):
    """The fixed content of the commit and pull request opened by the orchestrator."""

    model_config = ConfigDict(frozen=True)

    readme_path: str = Field(default=DEFAULT_README_PATH, description="The path the document is written to.")
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE, description="The message of the commit.")
    pull_request_title: str = Field(default=DEFAULT_PULL_REQUEST_TITLE, description="The title of the pull request.")
    pull_request_body: str = Field(default=DEFAULT_PULL_REQUEST_BODY, description="The body of the pull request.")
    fork_wait_seconds: float = Field(
        default=DEFAULT_FORK_WAIT_SECONDS,
        ge=0.0,
        description="How long to wait after requesting the fork for GitHub to finish provisioning it.",
    )


class PublicationOrchestrator:
    """Opens a pull request that replaces the README of a repository, by way of a fork.

    The sequence is strictly linear: fork, branch, blob, tree, commit, ref update, pull request. The first failing step
    aborts the sequence with a `PublicationError` naming the step. Nothing created in the fork before the failure is
    cleaned up.
    """

    def __init__(
        self,
        repository_mutator: "RepositoryMutator",
        options: PublicationOptions | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Logger | None = None,
    ):
        self.repository_mutator: "RepositoryMutator" = repository_mutator
        self.options: PublicationOptions = options or PublicationOptions()
        self.sleep: Callable[[float], Awaitable[None]] = sleep
        self.logger: Logger = logger or getLogger(__name__)

    @contextmanager
    def _stage(self, stage: PublicationStage) -> Iterator[None]:
        try:
            yield
        except ClientError as e:
            self.logger.exception(f"Publication failed at stage {stage}: {e}")
            raise PublicationError(stage=stage, message=str(e)) from e

        self.logger.info(f"Publication reached stage {stage}.")

    async def publish(self, ref: "RepositoryReference", document: str, branch_name: str = DEFAULT_BRANCH_NAME) -> "PullRequestResult":
        """Publish `document` as a pull request against `ref.branch` of the repository.

        Raises:
            PublicationError: If any step of the sequence fails.
        """

        mutator = self.repository_mutator

        with self._stage(PublicationStage.FORKED):
            fork: Repository = await mutator.create_fork(owner=ref.owner, repo=ref.name)

            self.logger.info(f"Waiting {self.options.fork_wait_seconds}s for the fork {fork.owner}/{fork.name} to be ready.")

            await self.sleep(self.options.fork_wait_seconds)

        with self._stage(PublicationStage.BRANCH_ENSURED):
            base_reference: GitReference = await mutator.get_git_ref(owner=ref.owner, repo=ref.name, ref=f"heads/{ref.branch}")

            try:
                _ = await mutator.create_git_ref(
                    owner=fork.owner, repo=fork.name, ref=f"refs/heads/{branch_name}", sha=base_reference.sha
                )
            except ReferenceAlreadyExistsError:
                self.logger.info(f"Branch {branch_name} already exists in {fork.owner}/{fork.name}, reusing it.")

        with self._stage(PublicationStage.BLOB_CREATED):
            blob_sha: str = await mutator.create_blob(owner=fork.owner, repo=fork.name, content=document)

        with self._stage(PublicationStage.TREE_CREATED):
            tree_sha: str = await mutator.create_tree(
                owner=fork.owner, repo=fork.name, base_tree=base_reference.sha, path=self.options.readme_path, blob_sha=blob_sha
            )

        with self._stage(PublicationStage.COMMIT_CREATED):
            commit_sha: str = await mutator.create_commit(
                owner=fork.owner,
                repo=fork.name,
                message=self.options.commit_message,
                tree_sha=tree_sha,
                parent_sha=base_reference.sha,
            )

        with self._stage(PublicationStage.REF_UPDATED):
            _ = await mutator.update_git_ref(owner=fork.owner, repo=fork.name, ref=f"heads/{branch_name}", sha=commit_sha, force=True)

        with self._stage(PublicationStage.PR_CREATED):
            pull_request: PullRequestResult = await mutator.create_pull_request(
                owner=ref.owner,
                repo=ref.name,
                title=self.options.pull_request_title,
                body=self.options.pull_request_body,
                head=f"{fork.owner}:{branch_name}",
                base=ref.branch,
            )

        self.logger.info(f"Opened pull request {pull_request.url} against {ref.full_name}@{ref.branch}.")

        return pull_request
