from typing import TYPE_CHECKING, Literal, Self

from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile
from githubkit.versions.v2022_11_28.models import FullRepository as GitHubKitFullRepository
from githubkit.versions.v2022_11_28.models import GitRef as GitHubKitGitRef
from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
from pydantic import BaseModel, ConfigDict, Field

from github_readme_generator.utilities.text import decode_content

if TYPE_CHECKING:
    from githubkit.versions.v2022_11_28.models import GitTreePropTreeItems as GitHubKitGitTreeItem

DEFAULT_BRANCH = "main"


class RepositoryReference(BaseModel):
    """A remote repository and the ref to read from."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(description="The owner of the repository.")
    name: str = Field(description="The name of the repository.")
    branch: str = Field(default=DEFAULT_BRANCH, description="The branch of the repository.")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class Repository(BaseModel):
    """High-level metadata about a repository."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(description="The login of the owner of the repository.")
    name: str = Field(description="The name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    default_branch: str = Field(default=DEFAULT_BRANCH, description="The default branch of the repository.")
    fork: bool = Field(default=False, description="Whether the repository is a fork.")
    url: str | None = Field(default=None, description="The URL of the repository.")

    @classmethod
    def from_full_repository(cls, full_repository: GitHubKitFullRepository) -> Self:
        return cls(
            owner=full_repository.owner.login,
            name=full_repository.name,
            description=full_repository.description,
            default_branch=full_repository.default_branch,
            fork=full_repository.fork,
            url=full_repository.html_url,
        )


class TreeEntry(BaseModel):
    """An entry from a recursive listing of a repository tree."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="The path of the entry relative to the repository root.")
    type: Literal["blob", "tree", "commit"] = Field(description="The type of the entry.")
    size: int | None = Field(default=None, description="The size of the entry in bytes. Only known for blobs.")

    @property
    def is_file(self) -> bool:
        return self.type == "blob"

    @classmethod
    def from_git_tree_item(cls, git_tree_item: "GitHubKitGitTreeItem") -> Self:
        # GitHub omits the size of anything that is not a blob
        size = git_tree_item.size if isinstance(git_tree_item.size, int) else None
        return cls(path=git_tree_item.path, type=git_tree_item.type, size=size)  # pyright: ignore[reportArgumentType]


class FetchedFile(BaseModel):
    """A file with its path and decoded text content."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="The path of the file.")
    content: str = Field(description="The text content of the file.")

    @classmethod
    def from_content_file(cls, content_file: GitHubKitContentFile) -> Self:
        return cls(path=content_file.path, content=decode_content(content_file.content))

    def render_text(self) -> str:
        return f"File: {self.path}\n\n{self.content}\n\n"


class GitReference(BaseModel):
    """A git reference."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The name of the reference.")
    sha: str = Field(description="The SHA of the reference.")
    ref_type: str = Field(description="The type of the object the reference points to.")

    @classmethod
    def from_git_ref(cls, git_ref: GitHubKitGitRef) -> Self:
        return cls(name=git_ref.ref, sha=git_ref.object_.sha, ref_type=git_ref.object_.type)


class PullRequestResult(BaseModel):
    """The pull request opened with the generated README."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="The URL of the pull request.")
    number: int | None = Field(default=None, description="The number of the pull request.")
    branch: str | None = Field(default=None, description="The branch the pull request was opened from.")

    @classmethod
    def from_pull_request(cls, pull_request: GitHubKitPullRequest) -> Self:
        return cls(
            url=pull_request.html_url,
            number=pull_request.number,
            branch=pull_request.head.ref if pull_request.head else None,
        )
