# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Command line entry point.

Usage:
    ebpush -i ACCESS_KEY -s SECRET_KEY -a APPLICATION -e ENVIRONMENT \\
        -r REGION [-c COMMIT]

Exit codes:
    0 - Pushed successfully, or usage printed
    1 - Missing argument, invalid credentials, region, commit or config
    N - git push failed with exit status N
"""

import argparse
import logging
import sys
from pathlib import Path

from ebpush.config import DeployerConfig
from ebpush.deployer import Deployer
from ebpush.errors import DeployError, PushFailure
from ebpush.git import GitClient
from ebpush.logging import configure_logging
from ebpush.regions import REGION_ENDPOINTS
from ebpush.signing import Credentials, DeploymentTarget


logger = logging.getLogger(__name__)

#: Required flags, checked in this order.
_REQUIRED = (
    ("i", "access_key"),
    ("s", "secret_key"),
    ("a", "application"),
    ("e", "environment"),
    ("r", "region"),
)

USAGE = """\
Amazon Elastic Beanstalk Deployer
---------------------------------
Usage:
ebpush -i access_key -s secret_key -a application_name -e environment_name \
-r region [-c commit_id]

Arguments:
-i [required] Amazon AWS Access Key
-s [required] Amazon AWS Secret Key
-a [required] Amazon Elastic Beanstalk application name
-e [required] Amazon Elastic Beanstalk application environment name
-r [required] Amazon AWS region, one of: {regions}
-c [optional] Git commit id in current branch, if omitted HEAD is used
Required values must not be empty.

Options:
--config PATH  Configuration file (default: ~/.config/ebpush/ebpush.yaml)
--print-url    Print the signed remote URL instead of pushing
-v, --verbose  Enable debug logging
"""


def format_usage() -> str:
    """Return the usage text."""
    return USAGE.format(regions=", ".join(REGION_ENDPOINTS))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Required flags are validated by :func:`run` rather than argparse so
    that a missing or empty flag produces the ``Missing argument -x.``
    message.
    """
    parser = argparse.ArgumentParser(prog="ebpush", add_help=False)
    parser.add_argument("-i", dest="access_key")
    parser.add_argument("-s", dest="secret_key")
    parser.add_argument("-a", dest="application")
    parser.add_argument("-e", dest="environment")
    parser.add_argument("-r", dest="region")
    parser.add_argument("-c", dest="commit")
    parser.add_argument("-h", "--help", dest="help", action="store_true")
    parser.add_argument("--config", type=Path)
    parser.add_argument("--print-url", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line.

    Returns:
        Exit code.

    Raises:
        DeployError: On any signing, precondition or push failure.
    """
    for flag, dest in _REQUIRED:
        if not getattr(args, dest):
            print(f"Missing argument -{flag}.", file=sys.stderr)
            return 1

    config = DeployerConfig.from_yaml(args.config)
    configure_logging(
        level=logging.DEBUG
        if args.verbose
        else logging.getLevelName(config.log_level)
    )

    credentials = Credentials(args.access_key, args.secret_key)
    target = DeploymentTarget(args.application, args.environment, args.region)
    deployer = Deployer(
        credentials,
        git=GitClient(binary=config.git_binary, timeout=config.git_timeout),
        remote_ref=config.remote_ref,
    )

    if args.print_url:
        url, _ = deployer.remote_url(target, args.commit)
        print(url)
        return 0

    deployer.deploy(target, args.commit)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = build_parser().parse_args(argv)

    if not argv or args.help:
        print(format_usage())
        return 0

    try:
        return run(args)
    except PushFailure as e:
        if e.output_lines:
            print("\n".join(e.output_lines), file=sys.stderr)
        print(e, file=sys.stderr)
        return e.returncode or 1
    except DeployError as e:
        print(e, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
