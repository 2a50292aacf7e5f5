"""
Logging configuration — secret masking and workflow-command formatting.

Module loggers are plain `logging.getLogger(__name__)`; this module only
wires handlers on the root logger once per process.
Version: 1.0.0
"""
import logging
import sys
from typing import Iterable, Optional, Set

from applivery_deploy.core.actions import add_mask, escape_data, is_github_actions

MASK = "***"
LOCAL_FORMAT = "%(levelname)s:%(name)s:%(message)s"

_secrets: Set[str] = set()


def register_secret(value: Optional[str]) -> None:
    """Mask a value in every log record, and on the runner itself."""
    if not value:
        return
    _secrets.add(value)
    add_mask(value)


def mask_secrets(text: str) -> str:
    # Longest first so a secret containing another is fully masked
    for secret in sorted(_secrets, key=len, reverse=True):
        text = text.replace(secret, MASK)
    return text


class SecretMaskingFilter(logging.Filter):
    """Replace registered secrets in the rendered record message."""

    def filter(self, record: logging.LogRecord) -> bool:
        if _secrets:
            record.msg = mask_secrets(record.getMessage())
            record.args = None
        return True


class ActionsFormatter(logging.Formatter):
    """
    Render records as GitHub Actions workflow commands.

    DEBUG -> ::debug::, WARNING -> ::warning::, ERROR and above -> ::error::,
    INFO records logged with extra={"notice": True} -> ::notice::,
    other INFO records are printed as-is.
    """

    def __init__(self) -> None:
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"::debug::{escape_data(message)}"
        if getattr(record, "notice", False):
            return f"::notice::{escape_data(message)}"
        return message


def configure_logging(verbose: bool = False, secrets: Iterable[str] = ()) -> None:
    """
    Install the step's log handler on the root logger.

    On a runner everything down to DEBUG is emitted (the runner hides
    ::debug:: lines unless step debugging is enabled). Locally DEBUG is
    shown only with verbose.
    """
    for secret in secrets:
        register_secret(secret)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecretMaskingFilter())
    if is_github_actions():
        handler.setFormatter(ActionsFormatter())
        level = logging.DEBUG
    else:
        handler.setFormatter(logging.Formatter(LOCAL_FORMAT))
        level = logging.DEBUG if verbose else logging.INFO

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    # httpx logs every request at INFO, including full URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
