ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """A request error from the README Generator clients."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RequestError(ClientError):
    """A request error from the GitHub client."""

    status_code: int | None

    def __init__(
        self, action: str, message: str | None = None, status_code: int | None = None, extra_info: ExtraInfoType | None = None
    ):
        self.status_code = status_code
        if not extra_info:
            extra_info = {}
        super().__init__(
            message="A request error occured.",
            extra_info={
                "action": action,
                "message": message,
                "status": str(status_code) if status_code is not None else None,
                **extra_info,
            },
        )


class ResourceNotFoundError(RequestError):
    """A not found error from the GitHub client."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource could not be found.",
            status_code=404,
            extra_info={"resource": resource, **extra_info},
        )


class ListingError(ResourceNotFoundError):
    """The repository or ref could not be listed because it does not exist."""

    def __init__(self, owner: str, repo: str, ref: str):
        super().__init__(action="List repository tree", resource=f"{owner}/{repo}@{ref}")


class ReferenceAlreadyExistsError(RequestError):
    """A git reference could not be created because it already exists."""

    def __init__(self, action: str, ref: str):
        super().__init__(action=action, message="Reference already exists", status_code=422, extra_info={"ref": ref})


class ResponseValidationError(RequestError):
    """A response from the GitHub API did not contain the expected fields."""

    def __init__(self, action: str, message: str | None = None):
        super().__init__(action=action, message=message, extra_info={"reason": "Unexpected response body"})
