"""
Deploy constants — API paths, slug limits, output names, defaults.

Deploy step constants (Applivery integration API).
Version: 1.0.0
"""

# Integration API paths, relative to the configured base URLs
DISTRIBUTIONS_PATH: str = "integrations/distributions"
BUILDS_PATH: str = "integrations/builds"

# Statuses the client treats as success; everything else is an API error
SUCCESS_STATUS_CODES: tuple[int, ...] = (200, 201)

# Query parameters owned by the pagination loop, never forwarded from filters
PAGINATION_PARAMS: tuple[str, ...] = ("page", "limit")

# Multi-part field holding the build file
BUILD_FILE_FIELD: str = "build"

# Slug rules: alphanumeric ends, hyphens allowed in between
SLUG_MIN_LENGTH: int = 3
SLUG_MAX_LENGTH: int = 128

# Sort used when looking up publications for a branch (earliest first)
BRANCH_SEARCH_SORT_FIELD: str = "createdAt"
BRANCH_SEARCH_SORT_ORDER: str = "asc"

# Name reported in deployer info for uploads made from GitHub Actions
DEPLOYER_NAME: str = "GitHub Actions"

# Step outputs
OUTPUT_PUBLICATION_ID: str = "publication-id"
OUTPUT_PUBLICATION_SLUG: str = "publication-slug"
OUTPUT_PUBLICATION_URL: str = "publication-distribution-url"
OUTPUT_BUILD_ID: str = "build-id"
OUTPUT_BUILD_STATUS: str = "build-status"
