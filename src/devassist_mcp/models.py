"""Structured records for tool parameters and upstream write payloads.

Field names follow the upstream wire formats (camelCase where the upstream
API or the tool contract uses it) so a validated model dumps straight into a
request body.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, RootModel, StrictBool, StrictStr, conint, constr, field_validator, model_validator


class StrictParams(BaseModel):
    """Base for tool parameter models: unknown fields are errors."""
    model_config = ConfigDict(extra="forbid")


# scalars never coerce: "3" is not an int, 1 is not a str
PositiveStrictInt = conint(strict=True, gt=0)
NonEmptyStr = constr(strict=True, min_length=1)


# ---- Google Calendar API v3 ------------------------------------------------

class EventDateTime(StrictParams):
    dateTime: Optional[StrictStr] = None  # RFC3339, e.g. 2025-01-01T10:00:00+01:00
    date: Optional[StrictStr] = None  # all-day events, YYYY-MM-DD
    timeZone: Optional[StrictStr] = None

    @model_validator(mode="after")
    def _one_of_date_or_datetime(self) -> "EventDateTime":
        if (self.dateTime is None) == (self.date is None):
            raise ValueError("exactly one of 'dateTime' or 'date' must be set")
        return self


class EventAttendee(StrictParams):
    email: StrictStr
    optional: Optional[StrictBool] = None


class CalendarEventInput(StrictParams):
    summary: StrictStr
    start: EventDateTime
    end: EventDateTime
    description: Optional[StrictStr] = None
    location: Optional[StrictStr] = None
    attendees: Optional[List[EventAttendee]] = None

    def to_request_body(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---- Notion API (2022-06-28) -----------------------------------------------

_COMPOUND_KEYS = ("and", "or")


class NotionFilter(BaseModel):
    """
    Database query filter.

    Property filter: {"property": "Status", "select": {"equals": "Done"}}
    Compound filter: {"and": [<filter>, ...]} or {"or": [<filter>, ...]}
    The condition object under the property-type key is passed through as-is.
    """
    model_config = ConfigDict(extra="allow")

    property: Optional[StrictStr] = None

    @model_validator(mode="after")
    def _property_or_compound(self) -> "NotionFilter":
        extra = dict(self.model_extra or {})
        compound = [k for k in _COMPOUND_KEYS if k in extra]

        if self.property is not None:
            if compound:
                raise ValueError("a property filter cannot also be compound")
            if len(extra) != 1:
                raise ValueError("a property filter needs exactly one condition, e.g. {'select': {...}}")
            (cond,) = extra.values()
            if not isinstance(cond, dict):
                raise ValueError("a property filter condition must be an object")
            return self

        if len(compound) != 1 or len(extra) != 1:
            raise ValueError("filter must have 'property' or exactly one of 'and' / 'or'")
        items = extra[compound[0]]
        if not isinstance(items, list):
            raise ValueError(f"'{compound[0]}' must be a list of filters")
        # validate nested filters
        for item in items:
            NotionFilter.model_validate(item)
        return self

    def to_request_body(self) -> dict:
        return self.model_dump(exclude_none=True)


class NotionPageProperties(RootModel[Dict[str, Dict[str, Any]]]):
    """Property name -> Notion property value object (e.g. {"title": [...]})."""


# ---- tool parameters -------------------------------------------------------

class GetCalendarEventsParams(StrictParams):
    maxResults: PositiveStrictInt = 10


class CreateCalendarEventParams(StrictParams):
    event: CalendarEventInput


class QueryNotionPagesParams(StrictParams):
    databaseId: NonEmptyStr
    filter: Optional[NotionFilter] = None


class CreateNotionPageParams(StrictParams):
    databaseId: NonEmptyStr
    properties: NotionPageProperties


class ReadNotionPageParams(StrictParams):
    pageId: NonEmptyStr


class RepoParams(StrictParams):
    owner: NonEmptyStr
    repo: NonEmptyStr


class GetGithubFileContentParams(RepoParams):
    path: StrictStr

    @field_validator("path")
    @classmethod
    def _no_dot_segments(cls, v: str) -> str:
        if any(seg in (".", "..") for seg in v.split("/")):
            raise ValueError("path must not contain '.' or '..' segments")
        return v


class NoParams(StrictParams):
    pass


class TelemetryRecentParams(StrictParams):
    n: PositiveStrictInt = 50
