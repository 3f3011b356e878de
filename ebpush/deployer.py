# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Deployment workflow: resolve the commit, sign the URL, push."""

import logging
import time
from dataclasses import dataclass, field

from ebpush.git import GitClient
from ebpush.logging import SecretFilter
from ebpush.signing import Credentials, DeploymentTarget, sign_repository_url


logger = logging.getLogger(__name__)

DEFAULT_REMOTE_REF = "refs/heads/master"


@dataclass
class DeployResult:
    """Result of a successful deployment.

    Attributes:
        remote_url: Signed URL that was pushed to.  Contains the one-time
            password; do not log it.
        commit_id: Commit that was deployed.
        output_lines: Output of ``git push``.
    """

    remote_url: str = field(repr=False)
    commit_id: str
    output_lines: list[str] = field(default_factory=list)


def build_remote_url(
    credentials: Credentials,
    target: DeploymentTarget,
    commit_id: str,
    timestamp: int,
) -> str:
    """Sign the remote URL and register it for log redaction."""
    url = sign_repository_url(credentials, target, commit_id, timestamp)
    SecretFilter.register_secret(url)
    return url


class Deployer:
    """Pushes commits to Elastic Beanstalk environments.

    Attributes:
        credentials: AWS access key pair used to sign every push.
        git: Client used for commit resolution and the push itself.
        remote_ref: Branch on the endpoint that receives the push.
    """

    def __init__(
        self,
        credentials: Credentials,
        git: GitClient | None = None,
        remote_ref: str = DEFAULT_REMOTE_REF,
    ) -> None:
        self.credentials = credentials
        self.git = git or GitClient()
        self.remote_ref = remote_ref
        SecretFilter.register_secret(credentials.secret_key)

    def remote_url(
        self,
        target: DeploymentTarget,
        commit: str | None = None,
        now: int | None = None,
    ) -> tuple[str, str]:
        """Resolve the commit and sign its remote URL without pushing.

        Args:
            target: Application environment to deploy to.
            commit: Reference to deploy; defaults to HEAD.
            now: Signing timestamp; defaults to the current time.

        Returns:
            Tuple of (remote_url, commit_id).

        Raises:
            InvalidCommit: If the reference does not name a commit.
        """
        timestamp = int(time.time()) if now is None else now
        commit_id = self.git.get_commit_id(commit)
        url = build_remote_url(self.credentials, target, commit_id, timestamp)
        return url, commit_id

    def deploy(
        self,
        target: DeploymentTarget,
        commit: str | None = None,
        now: int | None = None,
    ) -> DeployResult:
        """Force-push a commit to the target environment.

        The push output is echoed to stdout verbatim; only git's exit
        status decides success.

        Args:
            target: Application environment to deploy to.
            commit: Reference to deploy; defaults to HEAD.
            now: Signing timestamp; defaults to the current time.

        Returns:
            DeployResult for the pushed commit.

        Raises:
            InvalidCommit: If the reference does not name a commit.
            PushFailure: If git push fails.
        """
        url, commit_id = self.remote_url(target, commit, now)

        print(
            f"Pushing application '{target.application}' "
            f"to environment '{target.environment}'"
        )
        logger.info(
            "Pushing %s to %s (%s)", commit_id, target.endpoint, self.remote_ref
        )

        result = self.git.push(url, f"{commit_id}:{self.remote_ref}")

        if result.output_lines:
            print("\n".join(result.output_lines))

        return DeployResult(
            remote_url=url,
            commit_id=commit_id,
            output_lines=result.output_lines,
        )
