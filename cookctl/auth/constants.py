"""Constants for cookctl authentication and credential storage."""

from __future__ import annotations

# Environment variable carrying a PAT; always outranks the credential file.
TOKEN_ENV_VAR = "COOKING_PAT"

# Credential storage (directory resolved by cookctl.config.get_config_dir)
CREDENTIALS_FILE = "credentials.json"

# Session bootstrap
CSRF_COOKIE_SUFFIX = "_csrf"
DEFAULT_TOKEN_NAME = "cookctl"

LOGIN_ENDPOINT = "/api/v1/auth/login"
LOGOUT_ENDPOINT = "/api/v1/auth/logout"
TOKENS_ENDPOINT = "/api/v1/tokens"

# Masking
MASK_PLACEHOLDER = "****"
MASK_VISIBLE_SUFFIX = 4

# Error messages
ERROR_NOT_AUTHENTICATED = f"not authenticated; run 'cookctl auth login' or set {TOKEN_ENV_VAR}"
ERROR_NOTHING_TO_REVOKE = "no stored token found to revoke"
ERROR_MISSING_TOKEN_ID = "stored token id is missing; cannot revoke"
ERROR_CSRF_NOT_FOUND = "csrf token not found"
ERROR_EXPIRES_AT_FORMAT = "expires-at must be RFC3339"
WARNING_NO_EXPIRATION = "token will not expire unless revoked"
