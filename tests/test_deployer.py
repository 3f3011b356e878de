# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for ebpush/deployer.py."""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ebpush.deployer import Deployer, DeployResult, build_remote_url
from ebpush.errors import InvalidCommit, PushFailure
from ebpush.git import GitClient, PushResult
from ebpush.logging import SecretFilter
from ebpush.signing import Credentials, DeploymentTarget


COMMIT = "abcdef1234567890abcdef1234567890abcdef12"
TS_2020 = 1577836800
EXPECTED_URL = (
    "https://AKID:20200101T000000Z"
    "c58076f22101622ffe107786bbd3eba66f3945a127d26b5794fced47cc5ab743"
    "@git.elasticbeanstalk.eu-west-1.amazonaws.com"
    "/v1/repos/6d79617070"
    "/commitid/61626364656631323334353637383930616263646566313233343536373"
    "839306162636465663132"
    "/environment/70726f64"
)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials("AKID", "secret")


@pytest.fixture
def target() -> DeploymentTarget:
    return DeploymentTarget("myapp", "prod", "eu-west-1")


@pytest.fixture
def git() -> MagicMock:
    """GitClient stub resolving to COMMIT and pushing successfully."""
    mock = MagicMock(spec=GitClient)
    mock.get_commit_id.return_value = COMMIT
    mock.push.return_value = PushResult(
        returncode=0, output_lines=["To git.elasticbeanstalk", "ok"]
    )
    return mock


class TestBuildRemoteUrl:
    """Tests for build_remote_url."""

    def test_pinned_url(self, credentials, target) -> None:
        """Scenario inputs give the pinned URL."""
        url = build_remote_url(credentials, target, COMMIT, TS_2020)
        assert url == EXPECTED_URL

    def test_registered_for_redaction(self, credentials, target) -> None:
        """The URL is redacted from log records."""
        url = build_remote_url(credentials, target, COMMIT, TS_2020)
        record = logging.LogRecord(
            "test", logging.INFO, "", 0, "url=%s", (url,), None
        )
        SecretFilter().filter(record)
        assert record.args == ("[REDACTED]",)


class TestDeployer:
    """Tests for Deployer."""

    def test_deploy(self, credentials, target, git, capsys) -> None:
        """Resolves, signs, announces, pushes and echoes output."""
        deployer = Deployer(credentials, git=git)
        result = deployer.deploy(target, "main", now=TS_2020)

        assert result == DeployResult(
            remote_url=EXPECTED_URL,
            commit_id=COMMIT,
            output_lines=["To git.elasticbeanstalk", "ok"],
        )
        git.get_commit_id.assert_called_once_with("main")
        git.push.assert_called_once_with(
            EXPECTED_URL, f"{COMMIT}:refs/heads/master"
        )
        out = capsys.readouterr().out
        assert "Pushing application 'myapp' to environment 'prod'" in out
        assert "To git.elasticbeanstalk\nok" in out

    def test_deploy_defaults_to_head(self, credentials, target, git) -> None:
        """No commit argument is passed through as None."""
        Deployer(credentials, git=git).deploy(target, now=TS_2020)
        git.get_commit_id.assert_called_once_with(None)

    def test_custom_remote_ref(self, credentials, target, git) -> None:
        """The receiving branch is configurable."""
        deployer = Deployer(credentials, git=git, remote_ref="refs/heads/x")
        deployer.deploy(target, now=TS_2020)
        assert git.push.call_args.args[1] == f"{COMMIT}:refs/heads/x"

    def test_reads_clock_once(self, credentials, target, git) -> None:
        """Without an explicit timestamp, time.time() is read once."""
        with patch("ebpush.deployer.time") as mock_time:
            mock_time.time.return_value = TS_2020
            result = Deployer(credentials, git=git).deploy(target)
        mock_time.time.assert_called_once()
        assert result.remote_url == EXPECTED_URL

    def test_invalid_commit_stops_before_signing(
        self, credentials, target, git
    ) -> None:
        """A non-commit reference aborts before a path is generated."""
        git.get_commit_id.side_effect = InvalidCommit("Invalid commit")
        with patch("ebpush.deployer.sign_repository_url") as sign:
            with pytest.raises(InvalidCommit):
                Deployer(credentials, git=git).deploy(target, now=TS_2020)
        sign.assert_not_called()
        git.push.assert_not_called()

    def test_tree_reference_end_to_end(
        self, credentials, target, git_repo: Path, tree_sha: str
    ) -> None:
        """A real tree SHA is rejected and nothing is pushed."""
        client = GitClient(cwd=git_repo)
        with (
            patch("ebpush.deployer.sign_repository_url") as sign,
            patch.object(client, "push") as push,
        ):
            with pytest.raises(InvalidCommit, match="is of type tree"):
                Deployer(credentials, git=client).deploy(target, tree_sha)
        sign.assert_not_called()
        push.assert_not_called()

    def test_push_failure_propagates(self, credentials, target, git) -> None:
        """PushFailure from git is not retried."""
        git.push.side_effect = PushFailure("failed", returncode=128)
        with pytest.raises(PushFailure):
            Deployer(credentials, git=git).deploy(target, now=TS_2020)
        git.push.assert_called_once()

    def test_secret_registered(self, credentials, git) -> None:
        """Constructing a deployer registers the secret key."""
        Deployer(credentials, git=git)
        record = logging.LogRecord(
            "test", logging.INFO, "", 0, "key secret here", (), None
        )
        SecretFilter().filter(record)
        assert record.msg == "key [REDACTED] here"

    def test_remote_url(self, credentials, target, git) -> None:
        """remote_url signs without pushing."""
        url, commit_id = Deployer(credentials, git=git).remote_url(
            target, now=TS_2020
        )
        assert url == EXPECTED_URL
        assert commit_id == COMMIT
        git.push.assert_not_called()
