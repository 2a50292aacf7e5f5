"""
Deployer info — provenance record for uploads and its multi-part form encoding.
Version: 1.0.0
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from applivery_deploy.core.actions import GitHubContext
from applivery_deploy.core.constants.deploy import DEPLOYER_NAME
from applivery_deploy.schemas.builds import DeployerDetails, DeployerInfo


def _commit_message(context: GitHubContext) -> Optional[str]:
    """Head commit message for pushes, PR title for pull requests."""
    if context.event_name == "push":
        return (context.payload.get("head_commit") or {}).get("message") or None
    if context.event_name == "pull_request":
        return (context.payload.get("pull_request") or {}).get("title") or None
    return None


def build_deployer_info(
    context: GitHubContext, now: Optional[datetime] = None
) -> DeployerInfo:
    """
    Build the deployer block sent with an upload from the workflow context.

    Args:
        context: Current workflow run context
        now: Trigger time override (defaults to current UTC time)

    Returns:
        DeployerInfo: Immutable provenance record
    """
    repository_url = f"{context.server_url}/{context.repository}"
    triggered_at = now or datetime.now(timezone.utc)
    return DeployerInfo(
        name=DEPLOYER_NAME,
        info=DeployerDetails(
            commit=context.sha or None,
            commitMessage=_commit_message(context),
            branch=context.branch or None,
            triggerTimestamp=triggered_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            ciUrl=context.server_url,
            repositoryUrl=repository_url,
            buildUrl=f"{repository_url}/actions/runs/{context.run_id}",
            buildNumber=context.run_id or None,
        ),
    )


def flatten_deployer_info(deployer: Optional[DeployerInfo]) -> Dict[str, str]:
    """
    Flatten deployer info to dotted form fields, present values only.

    DeployerInfo(name="CI", info=DeployerDetails(commit="abc"))
        -> {"deployer.name": "CI", "deployer.info.commit": "abc"}
    """
    fields: Dict[str, str] = {}
    if deployer is None:
        return fields
    if deployer.name:
        fields["deployer.name"] = deployer.name
    if deployer.info is not None:
        for key, value in deployer.info.model_dump(exclude_none=True).items():
            if value:
                fields[f"deployer.info.{key}"] = str(value)
    return fields
