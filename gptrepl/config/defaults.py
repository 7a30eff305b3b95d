"""Built-in configuration defaults."""

DEFAULT_MODEL = "gpt-4"
DEFAULT_MAX_RETRIES = 5
DEFAULT_TEXT_EDITOR = "nano"
KEY_FILE_NAME = ".gptrepl-key"

__all__ = ["DEFAULT_MODEL", "DEFAULT_MAX_RETRIES", "DEFAULT_TEXT_EDITOR", "KEY_FILE_NAME"]
