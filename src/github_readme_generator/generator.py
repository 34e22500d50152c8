import asyncio
from collections.abc import Awaitable, Callable
from logging import Logger, getLogger
from typing import Self

from github_readme_generator.clients.generation import DocumentationClient
from github_readme_generator.clients.github import GitHubClient, get_githubkit_client
from github_readme_generator.clients.models.github import PullRequestResult, Repository, RepositoryReference
from github_readme_generator.config import ReadmeGeneratorSettings
from github_readme_generator.models.repository.file_filter import FileFilter
from github_readme_generator.pipeline.aggregation import RepositoryContentAggregator
from github_readme_generator.pipeline.assembly import ReadmeMetadata, assemble_readme
from github_readme_generator.pipeline.publication import DEFAULT_BRANCH_NAME, PublicationOrchestrator
from github_readme_generator.utilities.urls import parse_repository_url


class ReadmeGenerator:
    """Generates a README for a GitHub repository and, optionally, opens a pull request with it."""

    def __init__(
        self,
        settings: ReadmeGeneratorSettings,
        github_client: GitHubClient,
        documentation_client: DocumentationClient,
        file_filter: FileFilter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Logger | None = None,
    ):
        self.settings: ReadmeGeneratorSettings = settings
        self.logger: Logger = logger or getLogger(__name__)
        self.github_client: GitHubClient = github_client
        self.documentation_client: DocumentationClient = documentation_client
        self.aggregator: RepositoryContentAggregator = RepositoryContentAggregator(
            tree_lister=github_client, file_fetcher=github_client, file_filter=file_filter, logger=self.logger
        )
        self.orchestrator: PublicationOrchestrator = PublicationOrchestrator(
            repository_mutator=github_client, options=settings.publication_options, sleep=sleep, logger=self.logger
        )

    @classmethod
    def from_settings(cls, settings: ReadmeGeneratorSettings, logger: Logger | None = None) -> Self:
        github_client = GitHubClient(
            githubkit_client=get_githubkit_client(token=settings.github_token, base_url=settings.github_api_url), logger=logger
        )

        documentation_client = DocumentationClient(
            api_key=settings.generation_api_key,
            base_url=settings.generation_base_url,
            model=settings.generation_model,
            sampling_options=settings.sampling_options,
            logger=logger,
        )

        return cls(settings=settings, github_client=github_client, documentation_client=documentation_client, logger=logger)

    async def aclose(self) -> None:
        await self.documentation_client.aclose()

    async def resolve_repository(self, repository_url: str) -> tuple[RepositoryReference, Repository]:
        """Parse the URL and look up the repository. The branch is, in order of precedence, the one named in the URL,
        the configured default branch, or the repository's default branch.

        Raises:
            InvalidUrlError: If the URL is not a repository URL.
            ResourceNotFoundError: If the repository does not exist.
        """

        ref: RepositoryReference = parse_repository_url(repository_url)

        repository: Repository = await self.github_client.get_repository(owner=ref.owner, repo=ref.name, error_on_not_found=True)

        default_branch: str = self.settings.default_branch or repository.default_branch

        return parse_repository_url(repository_url, default_branch=default_branch), repository

    async def generate_readme(self, repository_url: str) -> str:
        """Generate a README for the repository at `repository_url`.

        Raises:
            InvalidUrlError: If the URL is not a repository URL.
            ResourceNotFoundError: If the repository does not exist.
            ListingError: If the branch does not exist.
            GenerationError: If the text-generation service fails.
        """

        ref, repository = await self.resolve_repository(repository_url)

        self.logger.info(f"Generating a README for {ref.full_name}@{ref.branch}.")

        context: str = await self.aggregator.aggregate(ref=ref, limits=self.settings.aggregation_limits)

        generated: str = await self.documentation_client.request_documentation(
            owner_repo=ref.full_name, context=context, template=self.settings.documentation_template
        )

        return assemble_readme(metadata=ReadmeMetadata.from_repository(repository=repository), generated=generated)

    async def publish(self, repository_url: str, document: str, branch_name: str = DEFAULT_BRANCH_NAME) -> PullRequestResult:
        """Open a pull request that replaces the README of the repository at `repository_url` with `document`.

        Raises:
            InvalidUrlError: If the URL is not a repository URL.
            ResourceNotFoundError: If the repository does not exist.
            PublicationError: If any step of the publication fails.
        """

        ref, _ = await self.resolve_repository(repository_url)

        self.logger.info(f"Publishing a README to {ref.full_name}@{ref.branch} from branch {branch_name}.")

        return await self.orchestrator.publish(ref=ref, document=document, branch_name=branch_name)
