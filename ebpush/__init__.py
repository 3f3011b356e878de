# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Git-based deployment to AWS Elastic Beanstalk.

The public surface is re-exported here; see :mod:`ebpush.signing` for the
password derivation and :mod:`ebpush.deployer` for the push workflow.
"""

from ebpush.deployer import DeployResult, Deployer, build_remote_url
from ebpush.errors import (
    ConfigError,
    DeployError,
    InvalidCommit,
    InvalidCredential,
    PushFailure,
    UnknownRegion,
)
from ebpush.regions import REGION_ENDPOINTS, endpoint_for_region
from ebpush.signing import (
    Credentials,
    DeploymentTarget,
    SigningContext,
    sign_repository_url,
)


__version__ = "0.1.0"

__all__ = [
    "REGION_ENDPOINTS",
    "ConfigError",
    "Credentials",
    "DeployError",
    "DeployResult",
    "Deployer",
    "DeploymentTarget",
    "InvalidCommit",
    "InvalidCredential",
    "PushFailure",
    "SigningContext",
    "UnknownRegion",
    "build_remote_url",
    "endpoint_for_region",
    "sign_repository_url",
]
