from logging import Logger, getLogger
from typing import TYPE_CHECKING

from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field

from github_readme_generator.clients.errors.generation import GenerationError
from github_readme_generator.sampling.prompts import SYSTEM_PROMPT, render_user_prompt
from github_readme_generator.utilities.text import estimate_tokens

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion, ChatCompletionMessageParam

DEFAULT_GENERATION_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_GENERATION_MODEL = "deepseek-chat"

DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_OUTPUT_TOKENS = 1000


class SamplingOptions(BaseModel):
    """Sampling parameters sent with every documentation request."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0, description="The sampling temperature.")
    max_output_tokens: int = Field(default=DEFAULT_MAX_OUTPUT_TOKENS, gt=0, description="The maximum number of tokens to generate.")


def get_openai_client(api_key: str | None, base_url: str = DEFAULT_GENERATION_BASE_URL) -> AsyncOpenAI:
    # Failed requests are surfaced to the caller, never retried.
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)


class DocumentationClient:
    """Requests README documentation from an OpenAI-compatible chat completions service."""

    def __init__(
        self,
        openai_client: AsyncOpenAI | None = None,
        api_key: str | None = None,
        base_url: str = DEFAULT_GENERATION_BASE_URL,
        model: str = DEFAULT_GENERATION_MODEL,
        sampling_options: SamplingOptions | None = None,
        system_prompt: str = SYSTEM_PROMPT,
        logger: Logger | None = None,
    ):
        self._openai_client: AsyncOpenAI | None = openai_client
        self.api_key: str | None = api_key
        self.base_url: str = base_url
        self.model: str = model
        self.sampling_options: SamplingOptions = sampling_options or SamplingOptions()
        self.system_prompt: str = system_prompt
        self.logger: Logger = logger or getLogger(__name__)

    @property
    def openai_client(self) -> AsyncOpenAI:
        """The OpenAI client, created on first use so that a missing API key only fails generation requests."""

        if self._openai_client is None:
            try:
                self._openai_client = get_openai_client(api_key=self.api_key, base_url=self.base_url)
            except OpenAIError as e:
                raise GenerationError(status=None, message=str(e)) from e

        return self._openai_client

    async def aclose(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()

    async def request_documentation(self, owner_repo: str, context: str, template: str) -> str:
        """Generate the body of a README for a repository.

        Args:
            owner_repo: The repository being documented, as `owner/repo`.
            context: The aggregated content of the repository.
            template: The documentation instructions, used as-is.

        Raises:
            GenerationError: If the service rejects the request, cannot be reached or returns no text.
        """

        user_prompt: str = render_user_prompt(template=template, owner_repo=owner_repo, context=context)

        messages: list[ChatCompletionMessageParam] = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        self.logger.info(
            f"Requesting documentation for {owner_repo} from {self.model} with a prompt that is "
            + f"{estimate_tokens(self.system_prompt) + estimate_tokens(user_prompt)} tokens."
        )

        try:
            completion: ChatCompletion = await self.openai_client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.sampling_options.temperature,
                max_tokens=self.sampling_options.max_output_tokens,
            )
        except APIStatusError as e:
            self.logger.exception(f"Documentation request for {owner_repo} failed with status {e.status_code}: {e.message}")
            raise GenerationError(status=e.status_code, message=e.message) from e
        except APIConnectionError as e:
            self.logger.exception(f"Documentation request for {owner_repo} could not reach {self.base_url}: {e.message}")
            raise GenerationError(status=None, message=e.message) from e
        except APIError as e:
            self.logger.exception(f"Documentation request for {owner_repo} failed: {e.message}")
            raise GenerationError(status=None, message=e.message) from e

        content: str | None = completion.choices[0].message.content if completion.choices else None

        documentation: str = (content or "").strip()

        if not documentation:
            raise GenerationError(status=None, message="The text-generation service returned no documentation.")

        self.logger.info(f"Received documentation for {owner_repo} that is {estimate_tokens(documentation)} tokens.")

        return documentation
