"""Careerjet search client: fluent query builder plus a single async GET.

Usage::

    client = CareerjetClient({
        "locale": "en_GB", "affid": "...", "user_agent": "...", "user_ip": "...",
    })
    data = await client.keywords("java manager").location("London").query()

The query state is one mutable dict per client. Setters are expected to be
called sequentially by a single caller; every ``query`` call sends a snapshot
taken when it starts, so later setter calls do not leak into a request that
is already in flight.
"""

import logging
import math
import re
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from careerjet.core.config import ClientConfig
from careerjet.core.errors import ConfigurationError, TransportError, ValidationError

logger = logging.getLogger(__name__)

CAREERJET_URL = "http://public.api.careerjet.net/search?locale_code="

SORT_VALUES: tuple[str, ...] = ("date", "relevance", "salary")

CONTRACT_TYPES: dict[str, str] = {
    "p": "permanent",
    "c": "contract",
    "t": "temporary",
    "i": "training",
    "v": "voluntary",
}

CONTRACT_PERIODS: dict[str, str] = {
    "f": "full time",
    "p": "part time",
}

# Order matters: the first missing field is the one reported.
_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("locale", "locale is mandatory"),
    ("affid", "Affiliate ID (affid) is mandatory"),
    ("user_agent", "user_agent is mandatory"),
    ("user_ip", "user_ip is mandatory"),
)

# Characters that change the meaning of the endpoint URL when appended raw.
_URL_RESERVED = re.compile(r"[&#?=/\s%+]")

# Longest numeric prefix, the way a lenient float parser reads it.
_FLOAT_PREFIX = re.compile(
    r"[+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)",
)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[TransportError], None]


def parses_as_float(value: Any) -> bool:
    """Return True if the leading part of ``str(value)`` reads as a number.

    Trailing garbage is ignored, so ``"12abc"`` parses. ``None``, booleans
    and the empty string do not.
    """
    if value is None or isinstance(value, bool):
        return False
    return _FLOAT_PREFIX.match(str(value).lstrip()) is not None


def is_finite_number(value: Any) -> bool:
    """Return True only for a real ``int``/``float`` that is finite.

    Strings are never finite numbers, whatever they contain.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def is_numeric(value: Any) -> bool:
    """Numeric means both: the text parses as a float AND the value is finite."""
    return parses_as_float(value) and is_finite_number(value)


def _stringify(value: Any) -> str:
    """Render a query value for the wire.

    Integral floats below 1e21 lose their ``.0``; larger ones keep exponent
    notation (``1e+300``).
    """
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


class CareerjetClient:
    """Fluent builder and executor for one Careerjet search session.

    Args:
        config: Mapping or ``ClientConfig`` with ``locale``, ``affid``,
            ``user_agent`` and ``user_ip``.
        http_client: Optional shared ``httpx.AsyncClient``. When omitted a
            short-lived client is opened for every query.
        timeout: Request timeout in seconds. ``None`` waits indefinitely.

    Raises:
        ConfigurationError: If any identity field is not a string.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        if isinstance(config, ClientConfig):
            if timeout is None:
                timeout = config.timeout
            config = config.identity()

        for field, message in _REQUIRED_FIELDS:
            if not isinstance(config.get(field), str):
                raise ConfigurationError(field, message)

        locale: str = config["locale"]
        if _URL_RESERVED.search(locale):
            logger.warning("Locale '%s' contains URL-reserved characters; sent unescaped", locale)

        self._url = CAREERJET_URL + locale
        self._http_client = http_client
        self._timeout = timeout
        self._query: dict[str, Any] = {
            "affid": config["affid"],
            "user_agent": config["user_agent"],
            "user_ip": config["user_ip"],
            "sort": "relevance",
            "start_num": 1,
            "pagesize": 20,
        }

    @property
    def url(self) -> str:
        """Endpoint URL, locale included verbatim."""
        return self._url

    @property
    def params(self) -> dict[str, Any]:
        """Copy of the current query state."""
        return dict(self._query)

    # --- Fluent setters ---

    def keywords(self, keywords: str) -> "CareerjetClient":
        """Keywords to search in job offers, e.g. ``'java manager'``."""
        if not isinstance(keywords, str):
            raise ValidationError("keywords", "keywords must be a string!")
        return self._set("keywords", keywords)

    def location(self, location: str) -> "CareerjetClient":
        """Location to search job offers in, e.g. ``'London'``."""
        if not isinstance(location, str):
            raise ValidationError("location", "location must be a string!")
        return self._set("location", location)

    def sort_by(self, value: str) -> "CareerjetClient":
        """Sort order: ``relevance`` (default), ``date`` or ``salary``."""
        if value not in SORT_VALUES:
            msg = f"{value} is not a valid value. Allowed values are [{','.join(SORT_VALUES)}]"
            raise ValidationError("sort", msg)
        return self._set("sort", value)

    def pagesize(self, pagesize: int | float) -> "CareerjetClient":
        """Number of offers returned in one call (default 20, max 99)."""
        if not is_numeric(pagesize):
            raise ValidationError("pagesize", "Pagesize must be a numeric value!")
        return self._set("pagesize", pagesize)

    def radius(self, radius: int | float) -> "CareerjetClient":
        if not is_numeric(radius):
            raise ValidationError("radius", "Radius must be a numeric value!")
        return self._set("radius", radius)

    def start(self, index: int | float) -> "CareerjetClient":
        """Index of the first offer in the whole result space (>= 1)."""
        if not is_numeric(index):
            raise ValidationError("start_num", "start index must be a numeric value!")
        return self._set("start_num", index)

    def page(self, index: int | float) -> "CareerjetClient":
        """Page number (>= 1). Overrides ``start`` on the server side."""
        if not is_numeric(index):
            raise ValidationError("page", "page index must be a numeric value!")
        return self._set("page", index)

    def contract_type(self, code: str) -> "CareerjetClient":
        """Contract type code; see ``CONTRACT_TYPES``."""
        if not isinstance(code, str) or code not in CONTRACT_TYPES:
            msg = f"{code} is not a valid value. Allowed values are [{','.join(CONTRACT_TYPES)}]"
            raise ValidationError("contracttype", msg)
        return self._set("contracttype", code)

    def contract_period(self, code: str) -> "CareerjetClient":
        """Contract period code; see ``CONTRACT_PERIODS``."""
        if not isinstance(code, str) or code not in CONTRACT_PERIODS:
            msg = f"{code} is not a valid value. Allowed values are [{','.join(CONTRACT_PERIODS)}]"
            raise ValidationError("contractperiod", msg)
        return self._set("contractperiod", code)

    def _set(self, key: str, value: Any) -> "CareerjetClient":
        self._query[key] = value
        logger.debug("Query %s set to %r", key, value)
        return self

    # --- Terminal operation ---

    def _validate_required_fields(self) -> None:
        if not self._query.get("affid"):
            raise ValidationError("affid", "affid is mandatory.")

    def build_params(self) -> dict[str, str]:
        """Serialize the current query state into string query parameters."""
        return {key: _stringify(value) for key, value in self._query.items()}

    def request_url(self, params: dict[str, str] | None = None) -> httpx.URL:
        """Endpoint URL with the query parameters appended after ``locale_code``."""
        if params is None:
            params = self.build_params()
        return httpx.URL(self._url).copy_merge_params(params)

    async def query(
        self,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Any:
        """Execute the search: one GET, body decoded as JSON.

        On success the decoded document is passed to ``on_success`` (if
        given) and returned. On a network or decode failure a
        ``TransportError`` is passed to ``on_failure`` and ``None`` is
        returned; without ``on_failure`` the error is raised instead.

        Raises:
            ValidationError: If ``affid`` is empty. No request is sent.
            TransportError: On failure when no ``on_failure`` is given.

        The ``affid`` check runs when the coroutine is awaited, not when
        ``query(...)`` is called.
        """
        self._validate_required_fields()
        params = self.build_params()

        try:
            data = await self._get_json(params)
        except TransportError as e:
            logger.error("Careerjet query failed: %s", e)
            if on_failure is None:
                raise
            on_failure(e)
            return None

        if on_success is not None:
            on_success(data)
        return data

    async def _get_json(self, params: dict[str, str]) -> Any:
        url = self.request_url(params)
        logger.info("GET %s (keywords=%r)", self._url, params.get("keywords"))
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            msg = f"Request to Careerjet failed: {e}"
            raise TransportError(msg, cause=e) from e

        try:
            data = response.json()
        except ValueError as e:
            msg = f"Failed to parse Careerjet response as JSON: {e}"
            raise TransportError(msg, cause=e, status_code=response.status_code) from e

        logger.info("Careerjet responded %d", response.status_code)
        return data
