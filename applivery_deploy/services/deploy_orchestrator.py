"""
Deploy orchestrator — publication reconciliation, build upload and processing poll.

One run:
  1. validate slug and build path (nothing is sent when either is invalid)
  2. search publications by branch filter (earliest created first)
  3. search publications by slug
  4. pick the branch match, else the slug match, else create one
  5. report the publication outputs
  6. upload the build
  7. poll the build until processed (unless skipped)

No step is retried; the first failure ends the run. Two concurrent runs
for the same branch can both create a publication.
Version: 1.0.0
"""
import asyncio
import json
import logging
import os
from typing import Awaitable, Callable, List, Optional, Protocol

from applivery_deploy.clients.builds_client import BuildsClient
from applivery_deploy.clients.publications_client import PublicationsClient
from applivery_deploy.core.constants.deploy import (
    BRANCH_SEARCH_SORT_FIELD,
    BRANCH_SEARCH_SORT_ORDER,
    OUTPUT_BUILD_ID,
    OUTPUT_BUILD_STATUS,
    OUTPUT_PUBLICATION_ID,
    OUTPUT_PUBLICATION_SLUG,
    OUTPUT_PUBLICATION_URL,
)
from applivery_deploy.core.exceptions import AppliveryValidationError, ProcessingTimeoutError
from applivery_deploy.schemas.builds import Build, NotifyLanguage, UploadBuildRequest
from applivery_deploy.schemas.deploy import DeployRequest, DeployResult
from applivery_deploy.schemas.publications import (
    CreatePublicationRequest,
    Publication,
    PublicationFilter,
    PublicationFilterType,
    PublicationQuery,
    PublicationSecurity,
    PublicationVisibility,
)
from applivery_deploy.utils.slug import is_valid_slug

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    def set_output(self, name: str, value: object) -> None: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def validate_request(request: DeployRequest) -> None:
    """Fail before any network call when the slug or build path is unusable."""
    if not is_valid_slug(request.slug_name):
        raise AppliveryValidationError(
            f"Invalid slug-name: {request.slug_name!r}. Must start and end with an "
            "alphanumeric character and contain only alphanumeric characters or "
            "hyphens in between. Must be between 3 and 128 characters."
        )
    if not os.path.isfile(request.build_path):
        raise AppliveryValidationError(f"Build file does not exist: {request.build_path}")


def reconcile_publications(
    branch_matches: List[Publication],
    slug_matches: List[Publication],
    branch_name: str = "",
) -> Optional[Publication]:
    """
    Choose the publication to deploy to.

    The earliest branch match always wins; the slug match is only used
    when no publication filters on the branch. Conflicts are warnings.
    """
    if branch_matches and slug_matches and branch_matches[0].id != slug_matches[0].id:
        logger.warning(
            "Slug publication found doesn't match up with existing Branch publication "
            "found, will default to use the first branch publication created..."
        )
        logger.debug("slug publication: %s", json.dumps(slug_matches[0].summary(), indent=2))
        logger.debug("branch publication: %s", json.dumps(branch_matches[0].summary(), indent=2))

    if len(branch_matches) > 1:
        logger.warning(
            "Multiple publications found for branch: %s, will default to use the first one created...",
            branch_name,
        )
        logger.debug(
            "branch publications: %s",
            json.dumps([p.summary() for p in branch_matches], indent=2),
        )

    if branch_matches:
        return branch_matches[0]
    if slug_matches:
        return slug_matches[0]
    return None


def default_publication_payload(request: DeployRequest) -> CreatePublicationRequest:
    """Unlisted publication filtered on the branch, password protected when a password is set."""
    security = (
        PublicationSecurity.PASSWORD
        if request.publication_password
        else PublicationSecurity.PUBLIC
    )
    return CreatePublicationRequest(
        slug=request.slug_name,
        visibility=PublicationVisibility.UNLISTED,
        security=security,
        password=request.publication_password or "",
        filter=PublicationFilter(
            type=PublicationFilterType.GIT_BRANCH.value,
            value=request.branch_name,
        ),
        showDevInfo=True,
        showHistory=True,
    )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class DeployOrchestrator:
    """Runs one deploy: reconcile publication, upload, wait for processing."""

    def __init__(
        self,
        publications: PublicationsClient,
        builds: BuildsClient,
        outputs: OutputSink,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._publications = publications
        self._builds = builds
        self._outputs = outputs
        self._sleep = sleep

    async def find_publication(self, branch_name: str, slug_name: str) -> Optional[Publication]:
        branch_matches = await self._publications.fetch_publications(
            PublicationQuery(
                filterType=PublicationFilterType.GIT_BRANCH,
                filterValue=branch_name,
            ),
            sort_by=BRANCH_SEARCH_SORT_FIELD,
            sort_order=BRANCH_SEARCH_SORT_ORDER,
        )
        slug_matches = await self._publications.fetch_publications(
            PublicationQuery(slug=slug_name)
        )
        return reconcile_publications(branch_matches, slug_matches, branch_name)

    async def ensure_publication(self, request: DeployRequest) -> tuple[Publication, bool]:
        """Existing publication for the branch/slug, or a newly created one."""
        publication = await self.find_publication(request.branch_name, request.slug_name)
        if publication is not None:
            logger.info(
                "Found existing publication:\n%s", json.dumps(publication.summary(), indent=2)
            )
            return publication, False

        logger.info(
            "No publication found for branch: '%s' or slug: '%s', will create a new publication...",
            request.branch_name,
            request.slug_name,
        )
        publication = await self._publications.create_publication(
            default_publication_payload(request)
        )
        return publication, True

    def report_publication(self, publication: Publication) -> None:
        self._outputs.set_output(OUTPUT_PUBLICATION_ID, publication.id)
        self._outputs.set_output(OUTPUT_PUBLICATION_SLUG, publication.slug)
        self._outputs.set_output(OUTPUT_PUBLICATION_URL, publication.distributionUrl)

    async def upload(self, request: DeployRequest, publication: Publication) -> Build:
        """The build reaches the publication through its branch filter, not by id."""
        payload = UploadBuildRequest(
            versionName=request.branch_name,
            buildPlatform=request.build_platform,
            tags=request.tags or None,
            changelog=request.changelog,
            notifyMessage=(
                f"A new build has been uploaded to Applivery for {request.branch_name} "
                f"at {publication.distributionUrl}"
            ),
            notifyLanguage=NotifyLanguage.ENGLISH,
            deployer=request.deployer,
        )
        build = await self._builds.upload_build(request.build_path, payload)
        self._outputs.set_output(OUTPUT_BUILD_ID, build.id)
        return build

    async def wait_for_processing(self, build: Build, max_attempts: int, wait_time: int) -> Build:
        """
        Re-fetch the build every wait_time seconds until it is processed.

        Raises:
            ProcessingTimeoutError: still not processed after max_attempts
                lookups (immediately when max_attempts is 0)
        """
        attempts = 0
        while not build.is_processed and attempts < max_attempts:
            logger.debug(
                "Waiting %s seconds for build to complete processing... Attempt: %s of %s "
                "(latest status: %s, expected: processed)",
                wait_time,
                attempts,
                max_attempts,
                build.status,
            )
            await self._sleep(wait_time)
            build = await self._builds.get_build(build.id)
            attempts += 1

        if not build.is_processed:
            raise ProcessingTimeoutError(build.id, max_attempts, build.status)
        return build

    async def deploy(self, request: DeployRequest) -> DeployResult:
        validate_request(request)

        publication, created = await self.ensure_publication(request)
        self.report_publication(publication)

        build = await self.upload(request, publication)
        if not request.skip_processing:
            build = await self.wait_for_processing(
                build, request.max_attempts, request.wait_time
            )
        self._outputs.set_output(OUTPUT_BUILD_STATUS, build.status)

        logger.info(
            "Build uploaded to %s", publication.distributionUrl, extra={"notice": True}
        )
        return DeployResult(publication=publication, build=build, created_publication=created)
