from __future__ import annotations

from typing import Iterable, List


class InstallerError(RuntimeError):
    """A fatal condition that ends the run.

    `remediation` holds the lines shown to the user under the error message.
    """

    def __init__(self, message: str, *, remediation: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.remediation: List[str] = list(remediation)


class EnvironmentCheckError(InstallerError):
    pass


class PreconditionError(InstallerError):
    pass


class RemoteAccessError(InstallerError):
    pass


class VersionNotFoundError(RemoteAccessError):
    pass


class StructureError(InstallerError):
    pass


class InstallCancelled(Exception):
    """The user declined to continue. Not a failure."""
