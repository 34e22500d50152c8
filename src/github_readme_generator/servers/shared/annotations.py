from typing import Annotated

from pydantic import Field

REPOSITORY_URL_DESCRIPTION = (
    "The URL of the GitHub repository, for example `https://github.com/owner/repo`. "
    + "A branch can be selected with `https://github.com/owner/repo/tree/branch`."
)
REPOSITORY_URL = Annotated[str, Field(description=REPOSITORY_URL_DESCRIPTION)]

DOCUMENT_DESCRIPTION = "The Markdown document to publish as the README of the repository."
DOCUMENT = Annotated[str, Field(description=DOCUMENT_DESCRIPTION)]

BRANCH_NAME_DESCRIPTION = "The name of the branch created in the fork to hold the new README."
BRANCH_NAME = Annotated[str, Field(description=BRANCH_NAME_DESCRIPTION)]
