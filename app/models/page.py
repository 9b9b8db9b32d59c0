from typing import Dict, List, Sequence

from pydantic import BaseModel, computed_field

NOT_AVAILABLE = "N/A"
NO_SPEAKABLE = "No Speakable Data"


class SpeakableItem(BaseModel):
    """One evaluated ``speakable.xpath`` entry."""

    type: str
    xpath: str
    value: str  # text content of all matched nodes joined with ", "

    def display(self) -> str:
        return f"Type: {self.type}, XPath: {self.xpath}, Value: {self.value}"


def format_speakable(items: Sequence[SpeakableItem]) -> str:
    """Single display string for *items*, as used in exported rows."""
    if not items:
        return NO_SPEAKABLE
    return " | ".join(item.display() for item in items)


class PageRecord(BaseModel):
    """Metadata extracted from one successfully processed URL."""

    url: str
    page_type: str
    geo_place_name: str = NOT_AVAILABLE
    geo_region: str = NOT_AVAILABLE
    speakable: List[SpeakableItem] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def speakable_summary(self) -> str:
        return format_speakable(self.speakable)

    def to_row(self) -> Dict[str, str]:
        """Flat row for tabular export."""
        return {
            "PageType": self.page_type,
            "URL": self.url,
            "GeoPlaceName": self.geo_place_name,
            "GeoRegion": self.geo_region,
            "Speakable": self.speakable_summary,
        }


class PageError(BaseModel):
    """A URL that failed at some stage of the pipeline."""

    url: str
    error: str
