"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~modcache.exceptions.ModcacheError` subclass.
Shell wrappers can inspect the exit code to tell a spent quota apart from
a network outage without parsing stderr.

Example::

    $ modcache --refresh tracked
    $ echo $?
    8   # EXIT_QUOTA_EXHAUSTED -- wait for the hourly window to reset
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The Nexus rejected the API key."""

EXIT_NOT_FOUND = 4
"""The requested game or mod does not exist on the Nexus (HTTP 404)."""

EXIT_REMOTE_ERROR = 5
"""The Nexus answered with an unexpected HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_BAD_PAYLOAD = 7
"""A response body or rate-limit header did not match the expected shape."""

EXIT_QUOTA_EXHAUSTED = 8
"""The local quota bookkeeping says no requests remain in the current window."""

EXIT_RATE_LIMITED = 9
"""The Nexus itself refused the request with HTTP 429."""

EXIT_STORAGE_ERROR = 10
"""The local cache could not be opened, read, or written."""
