"""
GitHub Actions runner integration — workflow commands, outputs, CI context.

Everything here degrades to plain logging when not running on a runner,
so the step can be exercised locally.
Version: 1.0.0
"""
import json
import logging
import os
import sys
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


def is_github_actions() -> bool:
    return os.getenv("GITHUB_ACTIONS") == "true"


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(command: str, message: str = "", **properties: Any) -> str:
    """Render a workflow command line (::command key=value::message)."""
    props = ",".join(
        f"{key}={escape_property(str(value))}"
        for key, value in properties.items()
        if value is not None
    )
    head = f"{command} {props}" if props else command
    return f"::{head}::{escape_data(message)}"


def issue_command(command: str, message: str = "", **properties: Any) -> None:
    sys.stdout.write(format_command(command, message, **properties) + "\n")
    sys.stdout.flush()


def add_mask(value: str) -> None:
    """Ask the runner to mask a value in all further log output."""
    if value and is_github_actions():
        issue_command("add-mask", value)


@contextmanager
def log_group(title: str) -> Iterator[None]:
    """Collapsible log group on a runner, a plain log line elsewhere."""
    if is_github_actions():
        issue_command("group", title)
        try:
            yield
        finally:
            issue_command("endgroup")
    else:
        logger.debug("-- %s", title)
        yield


class ActionOutputs:
    """
    Step outputs sink.

    Appends name/value pairs to the file named by GITHUB_OUTPUT using the
    multiline delimiter syntax. Values are also kept in memory so callers
    (and tests) can inspect what was reported.
    """

    def __init__(self, output_path: Optional[str] = None) -> None:
        self._output_path = output_path if output_path is not None else os.getenv("GITHUB_OUTPUT")
        self.values: Dict[str, str] = {}

    def set_output(self, name: str, value: Any) -> None:
        text = "" if value is None else str(value)
        self.values[name] = text
        if not self._output_path:
            logger.info("output %s=%s", name, text)
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with open(self._output_path, "a", encoding="utf-8") as fh:
            fh.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")


@dataclass
class GitHubContext:
    """Subset of the workflow run context used for deployer provenance."""
    server_url: str = "https://github.com"
    repository: str = ""
    run_id: str = ""
    sha: str = ""
    ref: str = ""
    event_name: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "GitHubContext":
        payload: Dict[str, Any] = {}
        event_path = os.getenv("GITHUB_EVENT_PATH")
        if event_path and os.path.isfile(event_path):
            try:
                with open(event_path, encoding="utf-8") as fh:
                    payload = json.load(fh)
            except (OSError, ValueError) as exc:
                logger.warning("could not read event payload path=%s error=%s", event_path, exc)
        return cls(
            server_url=os.getenv("GITHUB_SERVER_URL", "https://github.com"),
            repository=os.getenv("GITHUB_REPOSITORY", ""),
            run_id=os.getenv("GITHUB_RUN_ID", ""),
            sha=os.getenv("GITHUB_SHA", ""),
            ref=os.getenv("GITHUB_REF", ""),
            event_name=os.getenv("GITHUB_EVENT_NAME", ""),
            payload=payload,
        )

    @property
    def branch(self) -> str:
        return self.ref.replace("refs/heads/", "")
