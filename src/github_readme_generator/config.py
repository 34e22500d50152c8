import os
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from github_readme_generator.clients.generation import (
    DEFAULT_GENERATION_BASE_URL,
    DEFAULT_GENERATION_MODEL,
    SamplingOptions,
)
from github_readme_generator.clients.github import DEFAULT_GITHUB_API_URL, get_github_token
from github_readme_generator.errors import ConfigurationError
from github_readme_generator.pipeline.aggregation import AggregationLimits
from github_readme_generator.pipeline.publication import PublicationOptions
from github_readme_generator.sampling.prompts import DOCUMENTATION_PROMPT


def get_generation_api_key() -> str | None:
    for env_var in ("GENERATION_API_KEY", "DEEPSEEK_API_KEY", "OPENAI_API_KEY"):
        if api_key := os.getenv(env_var):
            return api_key
    return None


def get_number_env[T: (int, float)](env_var: str, number_type: type[T], default: T) -> T:
    if not (value := os.getenv(env_var)):
        return default

    try:
        return number_type(value)
    except ValueError as e:
        raise ConfigurationError(message=f"{value!r} is not a valid {number_type.__name__}", env_var=env_var) from e


def get_documentation_template() -> str:
    if not (template_file := os.getenv("DOCUMENTATION_TEMPLATE_FILE")):
        return DOCUMENTATION_PROMPT

    try:
        return Path(template_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(message=f"Could not read {template_file}: {e}", env_var="DOCUMENTATION_TEMPLATE_FILE") from e


class ReadmeGeneratorSettings(BaseModel):
    """Everything the README Generator needs from its environment, passed explicitly to each component."""

    model_config = ConfigDict(frozen=True)

    github_token: str | None = Field(default=None, description="The token used for the GitHub API.")
    github_api_url: str = Field(default=DEFAULT_GITHUB_API_URL, description="The base URL of the GitHub API.")

    generation_base_url: str = Field(default=DEFAULT_GENERATION_BASE_URL, description="The base URL of the text-generation service.")
    generation_api_key: str | None = Field(default=None, description="The API key of the text-generation service.")
    generation_model: str = Field(default=DEFAULT_GENERATION_MODEL, description="The model used to generate documentation.")
    sampling_options: SamplingOptions = Field(default_factory=SamplingOptions)
    documentation_template: str = Field(default=DOCUMENTATION_PROMPT, description="The instructions sent with every request.")

    default_branch: str | None = Field(
        default=None,
        description="The branch to document and target pull requests at. The repository's default branch if not set.",
    )
    aggregation_limits: AggregationLimits = Field(default_factory=AggregationLimits)
    publication_options: PublicationOptions = Field(default_factory=PublicationOptions)

    @classmethod
    def from_env(cls) -> Self:
        """Build the settings from environment variables, falling back to the defaults for anything unset."""

        defaults = cls()

        try:
            return cls(
                github_token=get_github_token(),
                github_api_url=os.getenv("GITHUB_API_URL") or defaults.github_api_url,
                generation_base_url=os.getenv("GENERATION_BASE_URL") or defaults.generation_base_url,
                generation_api_key=get_generation_api_key(),
                generation_model=os.getenv("GENERATION_MODEL") or defaults.generation_model,
                sampling_options=SamplingOptions(
                    temperature=get_number_env("GENERATION_TEMPERATURE", float, defaults.sampling_options.temperature),
                    max_output_tokens=get_number_env("GENERATION_MAX_OUTPUT_TOKENS", int, defaults.sampling_options.max_output_tokens),
                ),
                documentation_template=get_documentation_template(),
                default_branch=os.getenv("DEFAULT_BRANCH") or None,
                aggregation_limits=AggregationLimits(
                    max_files=get_number_env("MAX_FILES", int, defaults.aggregation_limits.max_files),
                    max_file_size_bytes=get_number_env("MAX_FILE_SIZE_BYTES", int, defaults.aggregation_limits.max_file_size_bytes),
                ),
                publication_options=defaults.publication_options.model_copy(
                    update={"fork_wait_seconds": get_number_env("FORK_WAIT_SECONDS", float, defaults.publication_options.fork_wait_seconds)}
                ),
            )
        except ValidationError as e:
            raise ConfigurationError(message=str(e)) from e
