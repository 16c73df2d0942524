"""Configuration models and YAML loader for the Careerjet client."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)

SortOrder = Literal["relevance", "date", "salary"]
ContractType = Literal["p", "c", "t", "i", "v"]
ContractPeriod = Literal["f", "p"]


class ClientConfig(BaseModel):
    """Partner identity sent with every request.

    Only the type of each field is enforced here. An empty ``affid`` is
    accepted and rejected later, when the query is executed.
    """

    model_config = ConfigDict(frozen=True)

    locale: StrictStr
    affid: StrictStr
    user_agent: StrictStr
    user_ip: StrictStr
    timeout: float | None = Field(default=None, gt=0)

    def identity(self) -> dict[str, str]:
        """Return the four identity fields as a plain mapping."""
        return self.model_dump(include={"locale", "affid", "user_agent", "user_ip"})


class SearchConfig(BaseModel):
    """A saved search; every unset field keeps the client default."""

    keywords: str | None = None
    location: str | None = None
    sort: SortOrder | None = None
    start: StrictInt | StrictFloat | None = None
    pagesize: StrictInt | StrictFloat | None = None
    page: StrictInt | StrictFloat | None = None
    radius: StrictInt | StrictFloat | None = None
    contract_type: ContractType | None = None
    contract_period: ContractPeriod | None = None

    @field_validator("keywords", "location")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    client: ClientConfig
    searches: list[SearchConfig] = Field(default_factory=list)

    @field_validator("searches")
    @classmethod
    def at_least_one_search(cls, v: list[SearchConfig]) -> list[SearchConfig]:
        if not v:
            msg = "at least one search must be configured"
            raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
