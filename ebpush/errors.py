# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Exceptions raised while preparing or running a deployment.

All of them derive from :class:`DeployError` so the command line entry
point can report any failure with a single handler, while callers that
need to branch on the cause can catch the specific kind.
"""


class DeployError(Exception):
    """Base exception for deployment errors."""


class InvalidCredential(DeployError):
    """Access key or secret key is empty or not a string."""


class UnknownRegion(DeployError):
    """Region has no known Elastic Beanstalk git endpoint."""

    def __init__(self, region: object) -> None:
        super().__init__(f"Unknown region {region}.")
        self.region = region


class InvalidCommit(DeployError):
    """Reference cannot be resolved or does not name a commit."""


class PushFailure(DeployError):
    """``git push`` exited with a non-zero status.

    Attributes:
        returncode: Exit status reported by git.
        output_lines: Combined stdout/stderr lines of the push, as text.
    """

    def __init__(
        self,
        message: str,
        returncode: int,
        output_lines: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output_lines = output_lines or []


class ConfigError(DeployError):
    """Configuration file is unreadable or malformed."""
