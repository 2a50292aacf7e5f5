"""
Constants package — re-exports from domain-specific modules.

Usage:
    from applivery_deploy.core.constants.deploy import SLUG_MAX_LENGTH
    # or import everything:
    from applivery_deploy.core.constants import deploy
Version: 1.0.0
"""

from applivery_deploy.core.constants import deploy
from applivery_deploy.core.constants.deploy import (
    DISTRIBUTIONS_PATH,
    BUILDS_PATH,
    SUCCESS_STATUS_CODES,
    PAGINATION_PARAMS,
    BUILD_FILE_FIELD,
    SLUG_MIN_LENGTH,
    SLUG_MAX_LENGTH,
    DEPLOYER_NAME,
)

__all__ = [
    "deploy",
    "DISTRIBUTIONS_PATH",
    "BUILDS_PATH",
    "SUCCESS_STATUS_CODES",
    "PAGINATION_PARAMS",
    "BUILD_FILE_FIELD",
    "SLUG_MIN_LENGTH",
    "SLUG_MAX_LENGTH",
    "DEPLOYER_NAME",
]
