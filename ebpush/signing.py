# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Password derivation for Elastic Beanstalk git pushes.

The git endpoint authenticates HTTPS pushes with a SigV4-style one-time
password instead of the secret key itself:

1. The repository path encodes application, commit and environment as hex.
2. A canonical request for that path and host is hashed.
3. The hash is wrapped in a string to sign together with the timestamp
   and the credential scope ``date/region/devtools/aws4_request``.
4. A signing key is derived from the secret key by chaining HMAC-SHA256
   over the scope.
5. The string to sign is signed with the derived key and the signature is
   prefixed with the timestamp to form the password.

Every stage is a pure function of its arguments. The timestamp is passed
in explicitly; nothing in this module reads the clock.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from ebpush.errors import InvalidCredential
from ebpush.regions import endpoint_for_region


ALGORITHM = "AWS4-HMAC-SHA256"

#: Fixed service name of the git endpoint's credential scope.
SERVICE = "devtools"

#: Terminator of every SigV4 credential scope.
SCOPE_TERMINATOR = "aws4_request"

_DATE_FORMAT = "%Y%m%d"
_DATETIME_FORMAT = "%Y%m%dT%H%M%S"


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    """AWS access key pair.

    Attributes:
        access_key: Access key ID, sent in clear as the URL user name.
        secret_key: Secret access key, only ever used as HMAC input.
    """

    access_key: str
    secret_key: str = field(repr=False)

    def __post_init__(self) -> None:
        for value in (self.access_key, self.secret_key):
            if not isinstance(value, str):
                raise InvalidCredential("Keys has to be strings.")
            if not value:
                raise InvalidCredential("Keys has to be set.")


@dataclass(frozen=True)
class DeploymentTarget:
    """Elastic Beanstalk application environment to deploy to.

    Raises:
        UnknownRegion: On construction, if the region has no endpoint.
    """

    application: str
    environment: str
    region: str

    def __post_init__(self) -> None:
        endpoint_for_region(self.region)

    @property
    def endpoint(self) -> str:
        """Git endpoint hostname for the target region."""
        return endpoint_for_region(self.region)


@dataclass(frozen=True)
class SigningContext:
    """Timestamp and credential scope of a single signing operation.

    Attributes:
        timestamp: Seconds since the epoch (UTC).
        scope: ``(YYYYMMDD, region, "devtools", "aws4_request")``.
    """

    timestamp: int
    scope: tuple[str, str, str, str]

    @classmethod
    def create(cls, timestamp: int, region: str) -> SigningContext:
        """Build the context for a timestamp and region."""
        date_stamp = _utc(timestamp).strftime(_DATE_FORMAT)
        return cls(
            timestamp=timestamp,
            scope=(date_stamp, region, SERVICE, SCOPE_TERMINATOR),
        )

    @property
    def date_stamp(self) -> str:
        """Scope date (YYYYMMDD)."""
        return self.scope[0]


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, UTC)


def format_datetime(timestamp: int) -> str:
    """Format a timestamp as ``YYYYMMDDTHHMMSS`` (UTC, no zone suffix)."""
    return _utc(timestamp).strftime(_DATETIME_FORMAT)


def format_datetime_z(timestamp: int) -> str:
    """Format a timestamp as ``YYYYMMDDTHHMMSSZ`` (UTC)."""
    return format_datetime(timestamp) + "Z"


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def _hex(value: str) -> str:
    return value.encode("utf-8").hex()


def repository_path(
    application: str, commit_id: str, environment: str | None = None
) -> str:
    """Build the repository path on the git endpoint.

    Segments are the lowercase hex of the UTF-8 bytes of each value, so
    slashes, spaces and non-ASCII characters never need URL escaping.

    Args:
        application: Elastic Beanstalk application name.
        commit_id: Full commit SHA to deploy.
        environment: Environment name; omitted from the path when empty.

    Returns:
        Path starting with ``/v1/repos/``.
    """
    path = f"/v1/repos/{_hex(application)}/commitid/{_hex(commit_id)}"
    if environment:
        path += f"/environment/{_hex(environment)}"
    return path


def request_signature(endpoint: str, path: str) -> str:
    """Hash the canonical request of a git push.

    The canonical request has method ``GIT``, an empty query string, the
    ``host`` header as its only signed header and an empty payload hash.

    Args:
        endpoint: Git endpoint hostname.
        path: Repository path from :func:`repository_path`.

    Returns:
        Hex-encoded SHA-256 of the canonical request.
    """
    canonical = f"GIT\n{path}\n\nhost:{endpoint}\n\nhost\n"
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def string_to_sign(
    timestamp: int, scope: Sequence[str], request_sig: str
) -> str:
    """Build the SigV4 string to sign.

    Args:
        timestamp: Seconds since the epoch.
        scope: Credential scope elements, joined with ``/``.
        request_sig: Output of :func:`request_signature`.

    Returns:
        String to sign.
    """
    return "\n".join(
        [
            ALGORITHM,
            format_datetime(timestamp),
            "/".join(scope),
            request_sig,
        ]
    )


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, scope: Sequence[str]) -> bytes:
    """Derive the signing key from the secret key and credential scope.

    Starting from ``"AWS4" + secret_key``, each scope element in order is
    HMAC-ed with the previous raw digest as key. The order must be date,
    region, service, terminator.

    Args:
        secret_key: AWS secret access key.
        scope: Credential scope elements.

    Returns:
        32-byte derived signing key.
    """
    key = ("AWS4" + secret_key).encode("utf-8")
    for element in scope:
        key = _hmac_sha256(key, element)
    return key


def generate_password(
    timestamp: int, signing_key: bytes, to_sign: str
) -> str:
    """Sign the string to sign and prefix the timestamp.

    Args:
        timestamp: Seconds since the epoch.
        signing_key: Output of :func:`derive_signing_key`.
        to_sign: Output of :func:`string_to_sign`.

    Returns:
        ``YYYYMMDDTHHMMSSZ`` followed by the hex signature.
    """
    signature = hmac.new(
        signing_key, to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return format_datetime_z(timestamp) + signature


def repository_url(
    access_key: str, password: str, endpoint: str, path: str
) -> str:
    """Assemble the authenticated HTTPS remote URL."""
    return f"https://{access_key}:{password}@{endpoint}{path}"


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def sign_password(
    secret_key: str, endpoint: str, path: str, context: SigningContext
) -> str:
    """Run stages two to five for a repository path."""
    to_sign = string_to_sign(
        context.timestamp,
        context.scope,
        request_signature(endpoint, path),
    )
    signing_key = derive_signing_key(secret_key, context.scope)
    return generate_password(context.timestamp, signing_key, to_sign)


def sign_repository_url(
    credentials: Credentials,
    target: DeploymentTarget,
    commit_id: str,
    timestamp: int,
) -> str:
    """Produce the signed remote URL for pushing a commit to a target.

    Args:
        credentials: AWS access key pair.
        target: Application, environment and region to deploy to.
        commit_id: Resolved commit SHA.
        timestamp: Seconds since the epoch, read once by the caller.

    Returns:
        ``https://<access_key>:<password>@<endpoint><path>``.
    """
    endpoint = target.endpoint
    context = SigningContext.create(timestamp, target.region)
    path = repository_path(target.application, commit_id, target.environment)
    password = sign_password(credentials.secret_key, endpoint, path, context)
    return repository_url(credentials.access_key, password, endpoint, path)
