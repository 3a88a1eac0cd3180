"""Build version information, set at release time."""

VERSION = ""
GIT_COMMIT = ""


def get_version() -> str:
    """Return the release version."""
    return VERSION


def get_git_commit() -> str:
    """Return the commit the release was built from."""
    return GIT_COMMIT