"""
View-state controllers for the explorer sections.

Every section owns its query parameters, the results loaded so far, a page
cursor for "load more", and an error message. Each request is stamped with a
sequence number; a response is applied only while its number is still the
latest, so an abandoned query can never overwrite a newer one.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
import random
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from nasa_explorer.api import ExplorerAPI
from nasa_explorer.dates import date_days_ago, format_date
from nasa_explorer.errors import ExplorerError
from nasa_explorer.neo import NeoAggregator, NeoStats

_LOG = logging.getLogger(__name__)

Listener = Callable[["SectionController"], None]


class SectionState(str, Enum):
    """Lifecycle of a section."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class SectionController:
    """Base state machine shared by every section."""

    name = "section"
    default_error = "Failed to load data"
    # items per remote page; None means the endpoint is not paginated
    page_size: Optional[int] = None

    def __init__(self, api: ExplorerAPI, today: Optional[date] = None, **params: Any):
        self._api = api
        self._today = today
        self.query: Dict[str, Any] = {**self.default_query(), **params}
        self.state = SectionState.IDLE
        self.items: List[Any] = []
        self.page = 1
        self.has_more = True
        self.error: Optional[str] = None
        self._request_seq = 0
        self._listeners: List[Listener] = []

    def today(self) -> date:
        return self._today or date.today()

    def default_query(self) -> Dict[str, Any]:
        return {}

    async def _fetch(self, query: Dict[str, Any], page: int) -> Any:
        raise NotImplementedError

    def _extract_items(self, payload: Any) -> List[Any]:
        raise NotImplementedError

    def add_listener(self, listener: Listener) -> None:
        """Register a callback run after every applied transition."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    @property
    def is_loading(self) -> bool:
        return self.state is SectionState.LOADING

    @property
    def can_load_more(self) -> bool:
        return self.page_size is not None and self.state is SectionState.LOADED and self.has_more

    async def set_params(self, **changes: Any) -> bool:
        """
        Merge parameter changes and start a new search when anything changed.

        :return: True when a fetch was issued
        """
        query = {**self.query, **changes}
        if query == self.query and self.state is not SectionState.IDLE:
            return False
        self.query = query
        await self.load()
        return True

    async def load(self) -> None:
        """Fetch the first page for the current query, replacing results."""
        await self._run(reset=True)

    async def retry(self) -> None:
        """Start over with the same query after an error."""
        await self.load()

    async def load_more(self) -> bool:
        """Append the next page; does nothing unless more results are available."""
        if not self.can_load_more:
            _LOG.debug("%s: load more ignored in state %s", self.name, self.state.value)
            return False
        await self._run(reset=False)
        return True

    async def _run(self, reset: bool) -> None:
        self._request_seq += 1
        seq = self._request_seq
        page = 1 if reset else self.page

        self.state = SectionState.LOADING
        self.error = None
        self._notify()

        try:
            payload = await self._fetch(dict(self.query), page)
            if seq != self._request_seq:
                _LOG.debug("%s: dropping stale response of request %d", self.name, seq)
                return
            self._apply(payload, reset)
        except ExplorerError as ex:
            _LOG.warning("%s: request failed: %s", self.name, ex.message)
            self._fail(seq, reset, ex.message)
            return
        except Exception:
            _LOG.exception("%s: unexpected failure of request %d", self.name, seq)
            self._fail(seq, reset, self.default_error)
            return

        self.state = SectionState.LOADED
        self._notify()

    def _fail(self, seq: int, reset: bool, message: Optional[str]) -> None:
        if seq != self._request_seq:
            _LOG.debug("%s: dropping stale failure of request %d", self.name, seq)
            return
        self.state = SectionState.ERROR
        self.error = message or self.default_error
        if reset:
            self._clear()
        self._notify()

    def _apply(self, payload: Any, reset: bool) -> None:
        new_items = self._extract_items(payload)
        if reset:
            self.items = list(new_items)
            self.page = 2
        else:
            self.items = self.items + list(new_items)
            self.page += 1
        self.has_more = self.page_size is not None and len(new_items) == self.page_size

    def _clear(self) -> None:
        self.items = []
        self.page = 1


class ApodSection(SectionController):
    """Astronomy Picture of the Day, with session-only favorites."""

    name = "apod"
    default_error = "Failed to load Astronomy Picture of the Day"
    # how far back "random date" may reach
    RANDOM_RANGE_DAYS = 365 * 10

    def __init__(self, api: ExplorerAPI, today: Optional[date] = None, **params: Any):
        super().__init__(api, today=today, **params)
        self.favorites: Set[str] = set()

    def default_query(self) -> Dict[str, Any]:
        return {"date": format_date(self.today())}

    async def _fetch(self, query: Dict[str, Any], page: int) -> Any:
        return await self._api.fetch_apod(**query)

    def _extract_items(self, payload: Any) -> List[Any]:
        # a single date answers with one object, ranges and counts with a list
        if isinstance(payload, list):
            return payload
        return [payload] if payload else []

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        return self.items[0] if self.items else None

    def toggle_favorite(self, date_str: Optional[str] = None) -> bool:
        """
        Flip a date in or out of the favorites; defaults to the shown picture.

        :return: True when the date is now a favorite
        """
        if date_str is None:
            if not self.current:
                raise ValueError("No picture loaded to mark as favorite")
            date_str = self.current.get("date")
            if not date_str:
                raise ValueError("The shown picture has no date")
        if date_str in self.favorites:
            self.favorites.discard(date_str)
            return False
        self.favorites.add(date_str)
        return True

    def is_favorite(self, date_str: str) -> bool:
        return date_str in self.favorites

    async def show_today(self) -> None:
        await self.set_params(date=format_date(self.today()))

    async def show_random_date(self, rng: Optional[random.Random] = None) -> None:
        days = (rng or random).randrange(self.RANDOM_RANGE_DAYS)
        await self.set_params(date=format_date(date_days_ago(days, self.today())))


class MarsPhotosSection(SectionController):
    """Rover photos for one sol, optionally filtered by camera."""

    name = "mars-photos"
    default_error = "Failed to load Mars rover photos"
    page_size = 25

    ROVERS = {
        "curiosity": "Curiosity",
        "opportunity": "Opportunity",
        "spirit": "Spirit",
    }

    CAMERAS = {
        "": "All Cameras",
        "FHAZ": "Front Hazard Avoidance Camera",
        "RHAZ": "Rear Hazard Avoidance Camera",
        "MAST": "Mast Camera",
        "CHEMCAM": "Chemistry and Camera Complex",
        "MAHLI": "Mars Hand Lens Imager",
        "MARDI": "Mars Descent Imager",
        "NAVCAM": "Navigation Camera",
    }

    MAX_RANDOM_SOL = 2000

    def default_query(self) -> Dict[str, Any]:
        return {"rover": "curiosity", "sol": "1000", "camera": ""}

    async def _fetch(self, query: Dict[str, Any], page: int) -> Any:
        return await self._api.fetch_mars_photos(**query, page=page)

    def _extract_items(self, payload: Any) -> List[Any]:
        return list((payload or {}).get("photos") or [])

    @property
    def can_load_more(self) -> bool:
        # The photos endpoint reports no total, so a full first page is the only hint.
        return self.state is SectionState.LOADED and len(self.items) >= self.page_size

    @property
    def item_keys(self) -> List[Tuple[Any, int]]:
        return [(photo.get("id"), index) for index, photo in enumerate(self.items)]

    async def random_sol(self, rng: Optional[random.Random] = None) -> None:
        sol = (rng or random).randint(1, self.MAX_RANDOM_SOL)
        await self.set_params(sol=str(sol))


class NeoSection(SectionController):
    """Near Earth Objects approaching within a date range."""

    name = "neo"
    default_error = "Failed to load Near Earth Objects data"

    def __init__(self, api: ExplorerAPI, today: Optional[date] = None, **params: Any):
        super().__init__(api, today=today, **params)
        self.payload: Optional[Dict[str, Any]] = None
        self.selected: Optional[Dict[str, Any]] = None

    def default_query(self) -> Dict[str, Any]:
        return {
            "start_date": format_date(self.today()),
            "end_date": format_date(date_days_ago(-7, self.today())),
        }

    async def _fetch(self, query: Dict[str, Any], page: int) -> Any:
        return await self._api.fetch_neo(**query)

    def _extract_items(self, payload: Any) -> List[Any]:
        return NeoAggregator.from_feed(payload).flatten()

    def _apply(self, payload: Any, reset: bool) -> None:
        self.payload = payload
        self.selected = None
        super()._apply(payload, reset)

    def _clear(self) -> None:
        super()._clear()
        self.payload = None
        self.selected = None

    @property
    def aggregator(self) -> NeoAggregator:
        return NeoAggregator.from_feed(self.payload)

    @property
    def objects(self) -> List[Dict[str, Any]]:
        return self.aggregator.flatten()

    @property
    def stats(self) -> NeoStats:
        return self.aggregator.stats()

    def select(self, neo: Dict[str, Any]) -> None:
        self.selected = neo

    def clear_selection(self) -> None:
        self.selected = None

    async def show_last_week(self) -> None:
        await self.set_params(
            start_date=format_date(date_days_ago(7, self.today())),
            end_date=format_date(self.today()),
        )

    async def show_next_week(self) -> None:
        await self.set_params(
            start_date=format_date(self.today()),
            end_date=format_date(date_days_ago(-7, self.today())),
        )


class ImageLibrarySection(SectionController):
    """Search over the NASA Image and Video Library."""

    name = "images"
    default_error = "Failed to search NASA images"
    # images-api.nasa.gov pages hold 100 items
    page_size = 100

    POPULAR_SEARCHES = [
        "Mars", "Jupiter", "Saturn", "Nebula", "Galaxy", "Space Station",
        "Astronaut", "Earth", "Moon", "Solar System", "Hubble", "Telescope",
    ]

    def __init__(self, api: ExplorerAPI, today: Optional[date] = None, **params: Any):
        super().__init__(api, today=today, **params)
        self.selected: Optional[Dict[str, Any]] = None

    def default_query(self) -> Dict[str, Any]:
        return {"q": "mars", "media_type": "image"}

    async def _fetch(self, query: Dict[str, Any], page: int) -> Any:
        return await self._api.fetch_images(**query, page=page)

    def _extract_items(self, payload: Any) -> List[Any]:
        collection = (payload or {}).get("collection") or {}
        return list(collection.get("items") or [])

    def _apply(self, payload: Any, reset: bool) -> None:
        if reset:
            self.selected = None
        super()._apply(payload, reset)

    def _clear(self) -> None:
        super()._clear()
        self.selected = None

    async def search(self, q: Optional[str] = None, media_type: Optional[str] = None) -> None:
        """Run a search; submitting the same query again starts it over."""
        changes = {key: value for key, value in (("q", q), ("media_type", media_type)) if value is not None}
        if not await self.set_params(**changes):
            await self.load()

    async def search_popular(self, term: str) -> None:
        await self.search(q=term.lower())

    @staticmethod
    def nasa_id(item: Dict[str, Any]) -> Optional[str]:
        data = item.get("data") or [{}]
        return data[0].get("nasa_id")

    @staticmethod
    def preview_url(item: Dict[str, Any]) -> Optional[str]:
        links = item.get("links") or [{}]
        return links[0].get("href")

    @property
    def item_keys(self) -> List[Tuple[Optional[str], int]]:
        """Identity per item; ids repeat across pages, so the position is part of it."""
        return [(self.nasa_id(item), index) for index, item in enumerate(self.items)]

    def select(self, item: Dict[str, Any]) -> None:
        self.selected = item

    def clear_selection(self) -> None:
        self.selected = None
