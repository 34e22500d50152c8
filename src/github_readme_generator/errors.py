from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from github_readme_generator.pipeline.publication import PublicationStage

ExtraInfoType = dict[str, str | None]


class ReadmeGeneratorError(Exception):
    """An error from the README Generator pipeline."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class InvalidUrlError(ReadmeGeneratorError):
    """The provided repository URL does not have the shape `.../<owner>/<repo>[.git]`."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(message="Invalid GitHub URL format", extra_info={"url": url})


class PublicationError(ReadmeGeneratorError):
    """A step of the pull request publication sequence failed."""

    stage: "PublicationStage"

    def __init__(self, stage: "PublicationStage", message: str | None = None):
        self.stage = stage
        super().__init__(message="Failed to publish the README.", extra_info={"stage": stage.value, "message": message})


class ConfigurationError(ReadmeGeneratorError):
    """An environment variable holds a value the README Generator cannot use."""

    def __init__(self, message: str, env_var: str | None = None):
        self.env_var = env_var
        super().__init__(message="Invalid configuration", extra_info={"env_var": env_var, "message": message})
