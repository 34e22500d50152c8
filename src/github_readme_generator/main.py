import asyncio
from logging import Logger
from pathlib import Path
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import configure_logging, get_logger

from github_readme_generator.clients.errors.github import ClientError
from github_readme_generator.clients.models.github import PullRequestResult
from github_readme_generator.config import ReadmeGeneratorSettings
from github_readme_generator.errors import ReadmeGeneratorError
from github_readme_generator.generator import ReadmeGenerator
from github_readme_generator.pipeline.publication import DEFAULT_BRANCH_NAME
from github_readme_generator.servers.readme import ReadmeServer

logger: Logger = get_logger(name=__name__)


def new_mcp_server(readme_generator: ReadmeGenerator) -> FastMCP[None]:
    mcp: FastMCP[None] = FastMCP[None](name="GitHub README Generator")

    mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

    readme_server: ReadmeServer = ReadmeServer(readme_generator=readme_generator, logger=logger)
    _ = readme_server.register_tools(fastmcp=mcp)

    return mcp


async def _generate(readme_generator: ReadmeGenerator, repository_url: str) -> str:
    try:
        return await readme_generator.generate_readme(repository_url=repository_url)
    finally:
        await readme_generator.aclose()


async def _publish(readme_generator: ReadmeGenerator, repository_url: str, readme: Path | None, branch_name: str) -> PullRequestResult:
    try:
        document: str = (
            readme.read_text(encoding="utf-8")
            if readme is not None
            else await readme_generator.generate_readme(repository_url=repository_url)
        )
        return await readme_generator.publish(repository_url=repository_url, document=document, branch_name=branch_name)
    finally:
        await readme_generator.aclose()


async def _serve(readme_generator: ReadmeGenerator, mcp_transport: Literal["stdio", "streamable-http"]) -> None:
    try:
        await new_mcp_server(readme_generator=readme_generator).run_async(transport=mcp_transport)
    finally:
        await readme_generator.aclose()


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="The level to log at",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]):
    configure_logging(level=log_level, logger=logger)

    if ctx.obj is None:
        try:
            settings: ReadmeGeneratorSettings = ReadmeGeneratorSettings.from_env()
        except ReadmeGeneratorError as e:
            raise click.ClickException(str(e)) from e

        ctx.obj = ReadmeGenerator.from_settings(settings=settings, logger=logger)


@cli.command()
@click.argument("repository_url")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the README to this file")
@click.pass_obj
def generate(readme_generator: ReadmeGenerator, repository_url: str, output: Path | None):
    """Generate a README for REPOSITORY_URL."""

    try:
        readme: str = asyncio.run(_generate(readme_generator=readme_generator, repository_url=repository_url))
    except (ReadmeGeneratorError, ClientError) as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(readme)
        return

    _ = output.write_text(readme, encoding="utf-8")
    click.echo(f"README written to {output}")


@cli.command()
@click.argument("repository_url")
@click.option(
    "--readme",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Publish this file instead of generating a new README",
)
@click.option("--branch", default=DEFAULT_BRANCH_NAME, show_default=True, help="The branch to create in the fork")
@click.pass_obj
def publish(readme_generator: ReadmeGenerator, repository_url: str, readme: Path | None, branch: str):
    """Open a pull request that replaces the README of REPOSITORY_URL."""

    try:
        pull_request: PullRequestResult = asyncio.run(
            _publish(readme_generator=readme_generator, repository_url=repository_url, readme=readme, branch_name=branch)
        )
    except (ReadmeGeneratorError, ClientError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Pull request opened: {pull_request.url}")


@cli.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
@click.pass_obj
def mcp(readme_generator: ReadmeGenerator, mcp_transport: Literal["stdio", "streamable-http"]):
    """Run the README Generator as an MCP server."""

    asyncio.run(_serve(readme_generator=readme_generator, mcp_transport=mcp_transport))


if __name__ == "__main__":
    cli()
