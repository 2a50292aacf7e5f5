"""
Publications client — search and create Applivery distributions.
Version: 1.0.0
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Union

from applivery_deploy.clients.base_client import BaseAppliveryClient
from applivery_deploy.core.config import Settings
from applivery_deploy.core.constants.deploy import DISTRIBUTIONS_PATH, PAGINATION_PARAMS
from applivery_deploy.core.exceptions import AppliveryParseError
from applivery_deploy.schemas.publications import (
    CreatePublicationRequest,
    Publication,
    PublicationQuery,
)
from applivery_deploy.utils.date_transform import (
    TIMESTAMP_FIELDS,
    publication_transformer,
    transform_dates_list,
)

logger = logging.getLogger("publications_client")

QueryLike = Union[PublicationQuery, Mapping[str, Any], None]


def _filters(query: QueryLike) -> Dict[str, str]:
    if isinstance(query, PublicationQuery):
        return query.to_params()
    return {key: str(value) for key, value in (query or {}).items() if value is not None}


def build_query_params(
    query: QueryLike,
    page: int,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
) -> Dict[str, str]:
    """
    Query string parameters for one search page.

    `page` and `limit` from the filters are dropped; the pagination loop
    owns them. Sorting is sent as a single `sort=<field>:<order>` value.
    """
    filters = _filters(query)
    params = {key: value for key, value in filters.items() if key not in PAGINATION_PARAMS}
    if sort_by:
        params["sort"] = f"{sort_by}:{sort_order}"
    params["page"] = str(page)
    return params


def _exact_filter(query: QueryLike) -> Optional[tuple[str, str]]:
    filters = _filters(query)
    filter_type = filters.get("filterType")
    filter_value = filters.get("filterValue")
    if filter_type and filter_value:
        return filter_type, filter_value
    return None


class PublicationsClient(BaseAppliveryClient):
    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._url = self._join_url(settings.base_url, DISTRIBUTIONS_PATH)

    async def iter_publications(
        self,
        query: QueryLike = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> AsyncIterator[Publication]:
        """
        Yield every publication matching the query, one page at a time.

        Pages are requested strictly in order, starting at 1, until the page
        counter passes the `totalPages` reported by the server. Items keep
        the server's order. When both filterType and filterValue are given,
        only items whose filter matches them exactly are yielded (the
        server-side filter is not guaranteed to be exact).

        Raises:
            AppliveryAPIError, AppliveryNetworkError, AppliveryParseError
        """
        exact = _exact_filter(query)
        page = 1
        total_pages = 1
        while page <= total_pages:
            body = await self._call_applivery(
                "GET",
                self._url,
                f"fetch publications (page {page})",
                params=build_query_params(query, page, sort_by, sort_order),
            )
            data = body.get("data")
            items = data.get("items") if isinstance(data, dict) else None
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise AppliveryParseError(
                    "Invalid response structure: missing data.items array",
                    json.dumps(body, default=str),
                )

            publications = [
                self._to_model(Publication, record)
                for record in transform_dates_list(items, TIMESTAMP_FIELDS)
            ]
            if exact is not None:
                publications = [p for p in publications if p.matches_filter(*exact)]

            total_pages = data.get("totalPages") or 1
            if not isinstance(total_pages, int):
                raise AppliveryParseError(
                    "Invalid response structure: totalPages is not an integer",
                    json.dumps(body, default=str),
                )
            logger.debug(
                "fetched %s publications from page %s/%s", len(publications), page, total_pages
            )
            for publication in publications:
                yield publication
            page += 1

    async def fetch_publications(
        self,
        query: QueryLike = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Publication]:
        """Collect all pages of iter_publications. Any failure aborts with no partial result."""
        publications = [p async for p in self.iter_publications(query, sort_by, sort_order)]
        logger.debug("total publications fetched: %s", len(publications))
        return publications

    async def create_publication(self, payload: CreatePublicationRequest) -> Publication:
        """
        Create a publication. Not idempotent: search first.

        Raises:
            AppliveryAPIError, AppliveryNetworkError, AppliveryParseError
        """
        body = await self._call_applivery(
            "POST",
            self._url,
            f"create publication '{payload.slug}'",
            json_body=payload.model_dump(exclude_none=True, mode="json"),
        )
        data = self._extract_data(body)
        return self._to_model(Publication, publication_transformer(data))
