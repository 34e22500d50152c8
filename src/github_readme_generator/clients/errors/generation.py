from github_readme_generator.clients.errors.github import ClientError


class GenerationError(ClientError):
    """The text-generation service failed to produce documentation.

    The upstream status and message are preserved as-is so the caller can report them.
    """

    status: int | None
    upstream_message: str | None

    def __init__(self, status: int | None, message: str | None):
        self.status = status
        self.upstream_message = message
        super().__init__(
            message="Failed to generate documentation.",
            extra_info={"status": str(status) if status is not None else None, "message": message},
        )
