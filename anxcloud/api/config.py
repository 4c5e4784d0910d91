"""Shared client constants.

This module centralizes the defaults used by the transport and the generic
dispatcher so the runtime modules can stay small and focused.
"""

from __future__ import annotations

# Default base URL of the engine REST API
DEFAULT_BASE_URL = "https://engine.anexia-it.com"

# Environment variable holding the API token, read by HTTPClient.from_env()
TOKEN_ENV_NAME = "ANEXIA_TOKEN"  # noqa: S105 - name of the variable, not a secret

# Environment variable overriding the base URL, read by HTTPClient.from_env()
BASE_URL_ENV_NAME = "ANEXIA_BASE_URL"

# Suggested total timeout for a single API call (seconds)
DEFAULT_REQUEST_TIMEOUT = 10.0

DEFAULT_USER_AGENT = "anxcloud-api-python"

# Page size used when listing via ObjectChannel without explicit paging
LIST_CHANNEL_DEFAULT_PAGE_SIZE = 10

# Failed fetches of a single page after which PageInfo.reset_error() refuses
# to clear the error
MAX_PAGE_FETCH_RETRY = 10

# Media types the response decoder understands
JSON_MEDIA_TYPE = "application/json"
KNOWN_MEDIA_TYPES = (JSON_MEDIA_TYPE,)

REQUEST_CONTENT_TYPE = "application/json; charset=utf-8"
