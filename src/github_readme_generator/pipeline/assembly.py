from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from github_readme_generator.clients.models.github import Repository


class ReadmeMetadata(BaseModel):
    """The repository details that head the README."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The name of the repository, used as the title.")
    description: str | None = Field(default=None, description="The description of the repository, placed under the title.")

    @classmethod
    def from_repository(cls, repository: Repository) -> Self:
        return cls(name=repository.name, description=repository.description)


def assemble_readme(metadata: ReadmeMetadata, generated: str) -> str:
    """Prefix the generated documentation with the repository title and description."""

    parts: list[str] = [f"# {metadata.name}\n"]

    parts.append(f"{metadata.description}\n\n" if metadata.description else "\n")

    parts.append(generated)

    return "".join(parts)
