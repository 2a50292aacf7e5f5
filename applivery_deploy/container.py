"""
Lazy container — singleton access to settings, clients and the orchestrator.

Import individual getters; call `reset()` between runs in tests.
Version: 1.0.0
"""

from functools import lru_cache

from applivery_deploy.clients.builds_client import BuildsClient
from applivery_deploy.clients.publications_client import PublicationsClient
from applivery_deploy.core.actions import ActionOutputs
from applivery_deploy.core.config import get_settings
from applivery_deploy.services.deploy_orchestrator import DeployOrchestrator


# -- Clients ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_publications_client():
    return PublicationsClient(get_settings())


@lru_cache(maxsize=1)
def get_builds_client():
    return BuildsClient(get_settings())


# -- Outputs ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_action_outputs():
    return ActionOutputs()


# -- Services --------------------------------------------------------------

@lru_cache(maxsize=1)
def get_deploy_orchestrator():
    return DeployOrchestrator(
        get_publications_client(),
        get_builds_client(),
        get_action_outputs(),
    )


def reset() -> None:
    """Drop every cached instance (settings included)."""
    for getter in (
        get_settings,
        get_publications_client,
        get_builds_client,
        get_action_outputs,
        get_deploy_orchestrator,
    ):
        getter.cache_clear()
