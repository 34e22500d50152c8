from urllib.parse import urlparse

from github_readme_generator.clients.models.github import DEFAULT_BRANCH, RepositoryReference
from github_readme_generator.errors import InvalidUrlError

OWNER_AND_REPO_SEGMENTS = 2
TREE_SEGMENT = "tree"


def parse_repository_url(url: str, default_branch: str = DEFAULT_BRANCH) -> RepositoryReference:
    """Parse `https://github.com/<owner>/<repo>[.git][/tree/<branch>]` into a repository reference.

    The scheme is optional. When the URL does not name a branch, `default_branch` is used.

    Raises:
        InvalidUrlError: If the URL does not contain an owner and a repository after the host.
    """

    stripped_url: str = url.strip()

    if "://" not in stripped_url:
        stripped_url = f"https://{stripped_url}"

    parsed_url = urlparse(stripped_url)

    if not parsed_url.netloc:
        raise InvalidUrlError(url=url)

    segments: list[str] = [segment for segment in parsed_url.path.split("/") if segment]

    if len(segments) < OWNER_AND_REPO_SEGMENTS:
        raise InvalidUrlError(url=url)

    owner, repo = segments[0], segments[1].removesuffix(".git")

    if not repo:
        raise InvalidUrlError(url=url)

    branch: str = default_branch

    if len(segments) > OWNER_AND_REPO_SEGMENTS + 1 and segments[OWNER_AND_REPO_SEGMENTS] == TREE_SEGMENT:
        branch = "/".join(segments[OWNER_AND_REPO_SEGMENTS + 1 :])

    return RepositoryReference(owner=owner, name=repo, branch=branch)
