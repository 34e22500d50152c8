import asyncio
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from github_readme_generator.clients.errors.github import ClientError, ListingError, ResourceNotFoundError
from github_readme_generator.clients.models.github import FetchedFile, RepositoryReference, TreeEntry
from github_readme_generator.models.repository.file_filter import FileFilter

if TYPE_CHECKING:
    from types import CoroutineType

    from github_readme_generator.clients.capabilities import FileFetcher, TreeLister

DEFAULT_MAX_FILES = 50
DEFAULT_MAX_FILE_SIZE_BYTES = 100_000


class AggregationLimits(BaseModel):
    """Caps on how much of a repository is sent to the text-generation service."""

    model_config = ConfigDict(frozen=True)

    max_files: int = Field(default=DEFAULT_MAX_FILES, ge=0, description="The maximum number of files to fetch.")
    max_file_size_bytes: int = Field(default=DEFAULT_MAX_FILE_SIZE_BYTES, ge=0, description="Larger files are skipped.")


class RepositoryContentAggregator:
    """Builds a bounded text context out of the files in a repository."""

    def __init__(
        self,
        tree_lister: "TreeLister",
        file_fetcher: "FileFetcher",
        file_filter: FileFilter | None = None,
        logger: Logger | None = None,
    ):
        self.tree_lister: "TreeLister" = tree_lister
        self.file_fetcher: "FileFetcher" = file_fetcher
        self.file_filter: FileFilter = file_filter or FileFilter()
        self.logger: Logger = logger or getLogger(__name__)

    def select_entries(self, entries: list[TreeEntry], limits: AggregationLimits) -> list[TreeEntry]:
        """Pick the first `max_files` eligible files, in listing order."""

        eligible_entries: list[TreeEntry] = [
            entry
            for entry in entries
            if entry.is_file
            and self.file_filter.should_include(path=entry.path, size_bytes=entry.size)
            and (entry.size is None or entry.size <= limits.max_file_size_bytes)
        ]

        if len(eligible_entries) > limits.max_files:
            self.logger.info(f"Truncating {len(eligible_entries)} eligible files to the first {limits.max_files}.")

        return eligible_entries[: limits.max_files]

    async def fetch_files(self, ref: RepositoryReference, entries: list[TreeEntry]) -> list[FetchedFile]:
        """Fetch every entry concurrently. Files that fail to fetch are logged and left out."""

        if not entries:
            return []

        tasks: list[CoroutineType[Any, Any, FetchedFile]] = [
            self.file_fetcher.fetch_file(ref=ref, path=entry.path)
            for entry in entries
        ]

        results: list[FetchedFile | BaseException] = await asyncio.gather(*tasks, return_exceptions=True)

        fetched_files: list[FetchedFile] = []

        for entry, result in zip(entries, results, strict=True):
            if isinstance(result, BaseException):
                self.logger.warning(f"Skipping {entry.path} from {ref.full_name}@{ref.branch}, it could not be fetched: {result}")
                continue

            fetched_files.append(result)

        return fetched_files

    async def aggregate(self, ref: RepositoryReference, limits: AggregationLimits | None = None) -> str:
        """Aggregate the content of the summarizable files of a repository into a single string.

        Raises:
            ListingError: If the repository or the ref does not exist.
        """

        limits = limits or AggregationLimits()

        try:
            entries: list[TreeEntry] = await self.tree_lister.list_tree(ref=ref)
        except ListingError:
            raise
        except ResourceNotFoundError as e:
            raise ListingError(owner=ref.owner, repo=ref.name, ref=ref.branch) from e
        except ClientError as e:
            self.logger.warning(f"Could not list the tree of {ref.full_name}@{ref.branch}, continuing without content: {e}")
            return ""

        selected_entries: list[TreeEntry] = self.select_entries(entries=entries, limits=limits)

        fetched_files: list[FetchedFile] = await self.fetch_files(ref=ref, entries=selected_entries)

        self.logger.info(
            f"Aggregated {len(fetched_files)} of {len(selected_entries)} selected files "
            + f"({len(entries)} tree entries) from {ref.full_name}@{ref.branch}."
        )

        return "\n".join(fetched_file.render_text() for fetched_file in fetched_files)
