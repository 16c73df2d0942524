"""Runner: applies saved searches to a client, executes them, exports results.

Data flow:
  1. Build a client from the configured partner identity
  2. Apply the saved search through the fluent setters
  3. Query Careerjet → decoded JSON
  4. Summarize into SearchRunResult
"""

import json
import logging
from datetime import datetime

import httpx

from careerjet.client import CareerjetClient
from careerjet.core.config import SearchConfig, Settings
from careerjet.core.errors import TransportError
from careerjet.core.schemas import SearchRunResult

logger = logging.getLogger(__name__)


def apply_search(client: CareerjetClient, search: SearchConfig) -> CareerjetClient:
    """Apply every set field of ``search`` to ``client``; unset fields are left alone."""
    if search.keywords is not None:
        client.keywords(search.keywords)
    if search.location is not None:
        client.location(search.location)
    if search.sort is not None:
        client.sort_by(search.sort)
    if search.start is not None:
        client.start(search.start)
    if search.pagesize is not None:
        client.pagesize(search.pagesize)
    if search.page is not None:
        client.page(search.page)
    if search.radius is not None:
        client.radius(search.radius)
    if search.contract_type is not None:
        client.contract_type(search.contract_type)
    if search.contract_period is not None:
        client.contract_period(search.contract_period)
    return client


async def run_search(
    settings: Settings,
    search: SearchConfig,
    http_client: httpx.AsyncClient | None = None,
) -> SearchRunResult | None:
    """Execute a single saved search.

    Returns SearchRunResult on success, None if the transport failed.
    """
    client = apply_search(CareerjetClient(settings.client, http_client=http_client), search)
    keywords = search.keywords or ""
    location = search.location or ""

    started_at = datetime.now()
    logger.info("Searching '%s' in '%s'", keywords, location)
    try:
        data = await client.query()
    except TransportError:
        logger.warning("Skipping search '%s' after transport failure", keywords)
        return None
    finished_at = datetime.now()

    if not isinstance(data, dict):
        logger.warning("Unexpected response for '%s': %r", keywords, type(data).__name__)
        data = {}
    elif data.get("type") == "ERROR":
        logger.warning("Careerjet error for '%s': %s", keywords, data.get("error"))

    result = SearchRunResult.from_response(
        data,
        keywords=keywords,
        location=location,
        started_at=started_at,
        finished_at=finished_at,
    )
    logger.info(
        "Search '%s': %d hits, %d jobs on this page",
        keywords, result.hits, len(result.jobs),
    )
    return result


async def run_all_searches(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> list[SearchRunResult]:
    """Run all configured searches in order.

    Returns list of SearchRunResult (one per search that completed).
    """
    results: list[SearchRunResult] = []
    for search in settings.searches:
        result = await run_search(settings, search, http_client)
        if result is not None:
            results.append(result)
    return results


def export_results_json(results: list[SearchRunResult]) -> str:
    """Export search results as a JSON string, one entry per job."""
    data = []
    for r in results:
        for job in r.jobs:
            data.append({
                "keywords": r.keywords,
                "location": r.location,
                **job.model_dump(),
            })
    return json.dumps(data, indent=2)
