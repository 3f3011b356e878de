# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Region to Elastic Beanstalk git endpoint mapping."""

from types import MappingProxyType

from ebpush.errors import UnknownRegion


def _git_host(region: str) -> str:
    return f"git.elasticbeanstalk.{region}.amazonaws.com"


#: Read-only mapping of region name to git endpoint hostname.
REGION_ENDPOINTS = MappingProxyType(
    {
        region: _git_host(region)
        for region in (
            "eu-west-1",
            "us-east-1",
            "us-west-1",
            "us-west-2",
            "ap-northeast-1",
            "ap-southeast-1",
            "ap-southeast-2",
            "sa-east-1",
        )
    }
)


def endpoint_for_region(region: str) -> str:
    """Look up the git endpoint hostname for a region.

    Args:
        region: AWS region name, e.g. ``eu-west-1``.

    Returns:
        Endpoint hostname.

    Raises:
        UnknownRegion: If the region is not in :data:`REGION_ENDPOINTS`.
    """
    if not isinstance(region, str) or region not in REGION_ENDPOINTS:
        raise UnknownRegion(region)
    return REGION_ENDPOINTS[region]
