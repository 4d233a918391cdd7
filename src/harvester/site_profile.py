"""
Site profiles for catalog harvesting.

A profile bundles everything that is specific to one target site: which URLs
count as item pages and which selectors locate the item links on the listing
and the fields on a detail page. The crawl engine itself is site-agnostic.
"""
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator


# First path segments that never lead to an item page on tokopedia.com
TOKOPEDIA_BLOCKED_SEGMENTS = frozenset({
    "search", "cart", "help", "events", "promo", "discover",
    "p", "mobile-apps", "blog", "mitra", "seller", "edu",
    "care", "about", "terms", "privacy",
})


class SiteProfile(BaseModel):
    """
    Scope rules and extraction selectors for one catalog site.

    All fields are validated by Pydantic; profiles are immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Short identifier used in logs")

    host: str = Field(
        description="Item host without a leading 'www.' (e.g. 'tokopedia.com')"
    )

    blocked_first_segments: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="First path segments that mark non-item pages"
    )

    min_path_depth: int = Field(
        default=2,
        ge=1,
        description="Minimum number of non-empty path segments of an item URL"
    )

    item_link_selector: str = Field(
        description="Selector of the item link anchors on the listing"
    )

    title_selector: str = Field(description="Selector of the item title on the detail page")
    price_selector: str = Field(description="Selector of the item price on the detail page")
    description_selector: str = Field(
        description="Selector of the item description on the detail page"
    )

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, value: str) -> str:
        value = value.strip().lower()
        if value.startswith("www."):
            value = value[4:]
        if not value:
            raise ValueError("host must not be empty")
        return value

    @field_validator("blocked_first_segments")
    @classmethod
    def _lowercase_segments(cls, value: FrozenSet[str]) -> FrozenSet[str]:
        return frozenset(segment.lower() for segment in value)


# --- Pre-configured Profiles ---

TOKOPEDIA_PROFILE = SiteProfile(
    name="tokopedia",
    host="tokopedia.com",
    blocked_first_segments=TOKOPEDIA_BLOCKED_SEGMENTS,
    min_path_depth=2,  # /<shop>/<product-slug>
    item_link_selector='a[data-testid="lnkProductContainer"]',
    title_selector='[data-testid="lblPDPDetailProductName"]',
    price_selector='[data-testid="lblPDPDetailProductPrice"]',
    description_selector='[data-testid="lblPDPDescriptionProduk"]',
)
"""
Tokopedia category listings (e.g. /p/komputer-laptop/laptop).

Item pages live at /<shop>/<product-slug>; category, search and help pages
are excluded by their first path segment.
"""

DEFAULT_START_URL = "https://www.tokopedia.com/p/komputer-laptop/laptop"

PROFILES = {
    TOKOPEDIA_PROFILE.name: TOKOPEDIA_PROFILE,
}


def get_profile(name: str) -> SiteProfile:
    """Look up a preset profile by name.

    Raises:
        KeyError: If no profile with that name exists
    """
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown site profile '{name}'. Available: {', '.join(sorted(PROFILES))}"
        ) from None
