# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging configuration with credential redaction.

A push URL has the form ``https://<access_key>:<password>@<host><path>``,
where the password is the timestamped one-time signature.  Neither that
password nor the secret key it was derived from may reach log output:

- :class:`Deployer` registers the secret key, and :func:`build_remote_url`
  registers every signed URL, with :meth:`SecretFilter.register_secret`.
- Independently of registration, the password part of any HTTPS URL with
  embedded credentials is masked, so URLs echoed back by git or built
  outside the deployer are covered too.

Usage:
    # In entry points
    from ebpush.logging import configure_logging
    configure_logging(level=logging.INFO)

    # In library modules
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Resolved commit %s", commit_id)
"""

import logging
import re
from typing import ClassVar


_REDACTED = "[REDACTED]"

# https://<user>:<password>@ -- keeps the access key, masks the password
_URL_PASSWORD_RE = re.compile(r"(https?://[^:/@\s]+:)[^@\s]+@")


class SecretFilter(logging.Filter):
    """Logging filter that masks credentials in log records.

    Registered secrets (secret key, signed URLs) are replaced with
    ``[REDACTED]``, longest first, so a registered URL disappears whole
    rather than leaving its host and path around a redacted password.
    Any remaining ``https://key:password@`` userinfo has its password
    replaced as well.
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact credentials in the message and string arguments.

        Returns:
            Always True (record is never suppressed, only modified).
        """
        record.msg = self.redact(str(record.msg))
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self.redact(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        """Return *text* with registered secrets and URL passwords masked."""
        if cls._pattern is not None:
            text = cls._pattern.sub(_REDACTED, text)
        return _URL_PASSWORD_RE.sub(rf"\g<1>{_REDACTED}@", text)

    @classmethod
    def register_secret(cls, secret: str) -> None:
        """Register a secret to be redacted. Empty strings are ignored."""
        if secret:
            cls._secrets.add(secret)
            cls._rebuild_pattern()

    @classmethod
    def clear_secrets(cls) -> None:
        """Clear all registered secrets. Primarily for testing."""
        cls._secrets.clear()
        cls._pattern = None

    @classmethod
    def _rebuild_pattern(cls) -> None:
        if cls._secrets:
            ordered = sorted(cls._secrets, key=len, reverse=True)
            cls._pattern = re.compile("|".join(re.escape(s) for s in ordered))
        else:
            cls._pattern = None


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    add_secret_filter: bool = True,
) -> None:
    """Configure the root logger with a single stderr handler.

    Args:
        level: The logging level (e.g., logging.INFO, logging.DEBUG).
        format_string: Custom format string. If None, uses default format.
        add_secret_filter: Whether to add the SecretFilter to redact secrets.
    """
    if format_string is None:
        format_string = "%(levelname)s: %(message)s"

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    if add_secret_filter:
        handler.addFilter(SecretFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    root_logger.addHandler(handler)
