"""
Entry point — run the Applivery deploy step.

Usage:
    # On a GitHub runner (inputs come from INPUT_* variables)
    python -m applivery_deploy

    # Locally, with APPLIVERY_* variables in a .env file
    applivery-deploy --env-file .env --verbose

Exit status is 0 on success and 1 on any failure; a single classified
error line is logged on failure.
Version: 1.0.0
"""
import argparse
import asyncio
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from applivery_deploy import container
from applivery_deploy.core.actions import GitHubContext
from applivery_deploy.core.config import get_settings
from applivery_deploy.core.exceptions import AppliveryAPIError, AppliveryError
from applivery_deploy.core.log_config import configure_logging
from applivery_deploy.schemas.deploy import DeployRequest
from applivery_deploy.utils.deployer import build_deployer_info

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="applivery-deploy",
        description="Upload a mobile build to an Applivery publication for the current branch.",
    )
    parser.add_argument(
        "--env-file",
        help="Load APPLIVERY_* inputs from this dotenv file (overrides the environment)",
    )
    parser.add_argument("--verbose", action="store_true", help="Show debug logs locally")
    return parser.parse_args(argv)


def describe_failure(exc: BaseException) -> str:
    """One diagnostic line naming the failure kind."""
    if isinstance(exc, AppliveryAPIError):
        return f"Applivery API Error: {exc.status_code} - {exc}"
    if isinstance(exc, AppliveryError):
        return f"Applivery {exc.label} Error: {exc}"
    return f"Unexpected error: {exc}"


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file, override=True)
        container.reset()

    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging(args.verbose)
        logger.error("Applivery Validation Error: invalid inputs: %s", exc)
        return 1

    configure_logging(args.verbose, settings.secrets)

    missing = settings.missing_required()
    if missing:
        logger.error("Applivery Validation Error: missing required inputs: %s", ", ".join(missing))
        return 1

    request = DeployRequest.from_settings(
        settings, deployer=build_deployer_info(GitHubContext.from_env())
    )
    orchestrator = container.get_deploy_orchestrator()

    try:
        asyncio.run(orchestrator.deploy(request))
    except Exception as exc:
        logger.error(describe_failure(exc))
        logger.debug("failure details", exc_info=True)
        return 1
    return 0
