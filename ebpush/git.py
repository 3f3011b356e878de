# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Thin wrapper around the local ``git`` executable.

Only three operations are needed for a deployment: resolving a reference
to a full SHA, checking the type of the object it names, and force-pushing
to the signed remote URL.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from ebpush.errors import InvalidCommit, PushFailure


logger = logging.getLogger(__name__)

#: Reference used when no commit is given.
DEFAULT_REF = "HEAD"


@dataclass
class PushResult:
    """Outcome of a successful ``git push``.

    Attributes:
        returncode: Exit status (always 0 for a returned result).
        output_lines: Combined stdout/stderr lines, echoed to the user as-is.
    """

    returncode: int
    output_lines: list[str] = field(default_factory=list)


class GitClient:
    """Runs git subcommands in a working tree.

    Attributes:
        binary: git executable name or path.
        cwd: Working tree to run in; None means the current directory.
        timeout: Per-command timeout in seconds; None waits forever.
    """

    def __init__(
        self,
        binary: str = "git",
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        self.binary = binary
        self.cwd = cwd
        self.timeout = timeout

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [self.binary, *args],
            cwd=self.cwd,
            check=True,
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )

    def resolve(self, ref: str) -> str:
        """Resolve a reference to a full object name.

        Raises:
            InvalidCommit: If git cannot resolve the reference.
        """
        try:
            result = self._run("rev-parse", "--verify", ref)
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise InvalidCommit(
                f"Invalid commit: cannot resolve {ref}: {error_msg}"
            ) from e
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise InvalidCommit(f"Invalid commit: {ref}: {e}") from e
        return result.stdout.strip()

    def type_of(self, ref: str) -> str:
        """Return the object type (``commit``, ``tree``, ``blob``, ``tag``).

        Raises:
            InvalidCommit: If git cannot inspect the object.
        """
        try:
            result = self._run("cat-file", "-t", ref)
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise InvalidCommit(
                f"Invalid commit: cannot inspect {ref}: {error_msg}"
            ) from e
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise InvalidCommit(f"Invalid commit: {ref}: {e}") from e
        return result.stdout.strip()

    def get_commit_id(self, ref: str | None = None) -> str:
        """Resolve a reference that must name a commit.

        Args:
            ref: Commit SHA, branch or other reference. Defaults to HEAD.

        Returns:
            Full commit SHA.

        Raises:
            InvalidCommit: If the reference starts with ``-``, is
                unresolvable, or names a tree, blob or any other non-commit
                object.
        """
        ref = ref or DEFAULT_REF
        if ref.startswith("-"):
            raise InvalidCommit(f"Invalid commit: {ref} is not a reference.")
        commit_id = self.resolve(ref)
        object_type = self.type_of(ref)
        if object_type != "commit":
            raise InvalidCommit(
                f"Invalid commit: {ref} is of type {object_type}."
            )
        logger.debug("Resolved %s to commit %s", ref, commit_id)
        return commit_id

    def push(self, remote_url: str, refspec: str) -> PushResult:
        """Force-push a refspec to a remote URL.

        Output is not interpreted; only the exit status decides success.

        Raises:
            PushFailure: If git exits with a non-zero status or cannot be
                run at all.
        """
        try:
            result = subprocess.run(
                [self.binary, "push", "-f", remote_url, refspec],
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise PushFailure(
                f"git push timed out after {self.timeout} seconds",
                returncode=1,
            ) from e
        except FileNotFoundError as e:
            raise PushFailure(
                f"Cannot run {self.binary}: {e}", returncode=1
            ) from e

        output_lines = result.stdout.splitlines() if result.stdout else []
        if result.returncode != 0:
            raise PushFailure(
                "Error in pushing to Amazon Elastic Beanstalk",
                returncode=result.returncode,
                output_lines=output_lines,
            )
        return PushResult(
            returncode=result.returncode, output_lines=output_lines
        )
