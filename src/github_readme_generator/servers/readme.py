from logging import Logger
from typing import Any

from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from github_readme_generator.clients.models.github import PullRequestResult
from github_readme_generator.generator import ReadmeGenerator
from github_readme_generator.pipeline.publication import DEFAULT_BRANCH_NAME
from github_readme_generator.servers.shared.annotations import BRANCH_NAME, DOCUMENT, REPOSITORY_URL
from github_readme_generator.utilities.text import estimate_tokens


class GeneratedReadme(BaseModel):
    repository_url: str = Field(description="The URL of the repository the README was generated for.")
    readme: str = Field(description="The generated README, in Markdown.")


class ReadmeServer:
    """Exposes README generation and publication as MCP tools."""

    def __init__(self, readme_generator: ReadmeGenerator, logger: Logger | None = None):
        self.readme_generator: ReadmeGenerator = readme_generator
        self.logger: Logger = logger or get_logger(__name__)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.generate_readme))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.publish_readme))
        return fastmcp

    async def generate_readme(self, repository_url: REPOSITORY_URL) -> GeneratedReadme:
        """Generate a README for a GitHub repository from the contents of its source files."""

        readme: str = await self.readme_generator.generate_readme(repository_url=repository_url)

        self.logger.info(f"Generated a README of {estimate_tokens(readme)} tokens for {repository_url}.")

        return GeneratedReadme(repository_url=repository_url, readme=readme)

    async def publish_readme(
        self, repository_url: REPOSITORY_URL, document: DOCUMENT, branch_name: BRANCH_NAME = DEFAULT_BRANCH_NAME
    ) -> PullRequestResult:
        """Open a pull request that replaces the README of a GitHub repository, by way of a fork owned by the token's user."""

        return await self.readme_generator.publish(repository_url=repository_url, document=document, branch_name=branch_name)
