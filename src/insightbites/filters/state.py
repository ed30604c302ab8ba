"""Viewer filter selection — one active filter dimension at a time."""

from dataclasses import dataclass

from insightbites.core.types import County, FilterMode

ZIP_CODE_LENGTH = 5


@dataclass
class FilterState:
    """Current sort/filter selection.

    Switching mode clears every parameter, so a lingering zip code can
    never leak into a county filter. Setters only store input; whether a
    value is complete enough to filter on is decided by the query builder.
    """

    mode: FilterMode = FilterMode.NONE
    selected_county: County | None = None
    selected_city: str = ""
    selected_zip_code: str = ""
    search_text: str = ""
    debounced_search_text: str = ""

    def set_mode(self, mode: FilterMode) -> None:
        self.mode = FilterMode(mode)
        self.selected_county = None
        self.selected_city = ""
        self.selected_zip_code = ""
        self.search_text = ""
        self.debounced_search_text = ""

    def select_county(self, county: County | None) -> None:
        self.selected_county = County(county) if county is not None else None

    def select_city(self, city: str) -> None:
        self.selected_city = city

    def set_zip_code(self, zip_code: str) -> None:
        # Input box allows at most five characters
        self.selected_zip_code = zip_code[:ZIP_CODE_LENGTH]

    def set_search_text(self, text: str) -> None:
        self.search_text = text

    def settle_search_text(self, text: str) -> None:
        """Record the search text once the debouncer has let it through."""
        self.debounced_search_text = text
