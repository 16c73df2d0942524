"""Data models for Careerjet search responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JobListing(BaseModel):
    """A single offer from the ``jobs`` array of a search response.

    Frozen; unknown response keys are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    url: str
    company: str = ""
    locations: str = ""
    date: str = ""
    description: str = ""
    salary: str = ""
    site: str = ""


class SearchRunResult(BaseModel):
    """Summary of one executed search."""

    keywords: str
    location: str
    hits: int = 0
    pages: int = 0
    jobs: list[JobListing] = Field(default_factory=list)
    started_at: datetime
    finished_at: datetime

    @classmethod
    def from_response(
        cls,
        data: dict[str, Any],
        *,
        keywords: str,
        location: str,
        started_at: datetime,
        finished_at: datetime,
    ) -> "SearchRunResult":
        """Build a summary from a decoded ``JOBS`` response.

        Other response types (``ERROR``, ``LOCATIONS``) yield no jobs.
        """
        jobs = data.get("jobs") if data.get("type", "JOBS") == "JOBS" else None
        return cls(
            keywords=keywords,
            location=location,
            hits=int(data.get("hits") or 0),
            pages=int(data.get("pages") or 0),
            jobs=[JobListing.model_validate(j) for j in jobs or []],
            started_at=started_at,
            finished_at=finished_at,
        )
