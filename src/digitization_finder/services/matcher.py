"""Fuzzy client-name matching.

Turns a free-text client name into zero, one or many catalog entries,
tolerating typos, punctuation and generic corporate words. Everything here
is a pure function of its inputs.
"""

import logging
import re

from rapidfuzz import fuzz, process, utils

from digitization_finder.entities import ClientRecord, MatchCandidate, SearchDecision
from digitization_finder.protocols import CatalogSource

logger = logging.getLogger(__name__)

# Words too generic to tell clients apart
IGNORE_TOKENS = (
    "capital",
    "fund",
    "group",
    "venture",
    "partners",
    "holdings",
    "management",
    "investments",
    "llc",
    "inc",
    "ltd",
    "limited",
    "corporation",
    "corp",
)

_IGNORE_PATTERN = re.compile(r"\b(?:" + "|".join(IGNORE_TOKENS) + r")\b", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")

MIN_QUERY_LENGTH = 2
# rapidfuzz ratio (0-100) a name needs to be considered at all: >= 70% closeness
SIMILARITY_CUTOFF = 70
# Kept for parity with the matcher's configuration; location is ignored so it has no effect
MAX_DISTANCE = 100
MIN_CONFIDENCE = 0.6
DECISIVE_CONFIDENCE = 0.9
MAX_CANDIDATES = 5


def normalize_query(query: str) -> str:
    """Lower-case, strip ignore tokens and punctuation, collapse whitespace."""
    cleaned = _IGNORE_PATTERN.sub(" ", query.lower().strip())
    cleaned = _PUNCTUATION.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def _scorer(query: str, choice: str, **kwargs) -> float:
    # Names with fewer than two usable characters never match
    if len(choice) < MIN_QUERY_LENGTH:
        return 0.0
    # The query is the pattern: it may sit anywhere inside a longer name,
    # but a name shorter than the query is compared whole
    if len(choice) >= len(query):
        return fuzz.partial_ratio(query, choice, **kwargs)
    return fuzz.ratio(query, choice, **kwargs)


def fuzzy_search_clients(query: str, catalog: list[ClientRecord]) -> list[MatchCandidate]:
    """Find catalog entries whose folder name resembles the query.

    Args:
        query: Raw user input
        catalog: Client records to search

    Returns:
        Candidates with confidence >= 0.6, best first. Empty when the
        normalized query is shorter than two characters.
    """
    cleaned = normalize_query(query)
    if len(cleaned) < MIN_QUERY_LENGTH:
        return []

    results = process.extract(
        cleaned,
        [record.folder_name for record in catalog],
        scorer=_scorer,
        processor=utils.default_process,
        score_cutoff=SIMILARITY_CUTOFF,
        limit=None,
    )

    candidates = []
    for _, ratio, index in results:
        distance = 1 - ratio / 100
        score = 1 - distance
        if score >= MIN_CONFIDENCE:
            candidates.append(MatchCandidate(record=catalog[index], score=score))

    logger.debug("Query %r (cleaned %r) matched %d clients", query, cleaned, len(candidates))
    return candidates


def categorize(candidates: list[MatchCandidate]) -> SearchDecision:
    """Decide between a single client, a shortlist, or no match.

    A top candidate at or above 0.9 confidence is decisive and the rest are
    discarded.
    """
    if not candidates:
        return SearchDecision.none()

    if len(candidates) == 1 or candidates[0].score >= DECISIVE_CONFIDENCE:
        return SearchDecision.single(candidates[0])

    return SearchDecision.multiple(candidates[:MAX_CANDIDATES])


def search(query: str, catalog: list[ClientRecord]) -> SearchDecision:
    """Match a query against the catalog and categorize the result."""
    return categorize(fuzzy_search_clients(query, catalog))


class ClientSearchService:
    """Searches the live client catalog.

    Example:
        ```python
        service = ClientSearchService(catalog=GoogleSheetsCatalogRepository.create())
        decision = await service.search("Apogem Capital")
        ```
    """

    def __init__(self, catalog: CatalogSource) -> None:
        """Initialize the search service.

        Args:
            catalog: Source of client records (required).
        """
        self._catalog = catalog

    async def fetch_catalog(self) -> list[ClientRecord]:
        return await self._catalog.fetch_clients()

    async def search(self, query: str, catalog: list[ClientRecord] | None = None) -> SearchDecision:
        """Search for a client, fetching the catalog unless one is given."""
        if catalog is None:
            catalog = await self.fetch_catalog()
        return search(query, catalog)

    async def get_client(self, folder_id: str) -> ClientRecord | None:
        """Look up a client by its folder id."""
        for record in await self.fetch_catalog():
            if record.folder_id == folder_id:
                return record
        return None
