"""Constants for the cookctl CLI."""

LOGIN_HINT = "Run 'cookctl auth login' to authenticate."
CONFIRM_HINT = "confirmation required; re-run with --yes"
