"""
Calendar events (NIP-52)

Date-based events (kind 31922) span whole days where time and time zone
carry no meaning: anniversaries, public holidays, vacations. Time-based
events (kind 31923) span a start and end instant.

Geohash encoding is left to the caller: pass the precomputed geohash in
CalendarLocation.
"""

from datetime import date, datetime
from typing import List, Optional, Union
import uuid

from pydantic import BaseModel, Field

from ..core.events import EventKinds, EventPayload
from ..core.exceptions import PayloadError


class CalendarLocation(BaseModel):
    location: Optional[str] = Field(None, description="Address, GPS coordinates, room name or call link")
    geohash: Optional[str] = Field(None, description="Geohash of the event's coordinates")


class CalendarAudience(BaseModel):
    """Participants, hashtags and references shared by both calendar kinds"""

    participants: List[str] = Field(default_factory=list, description="Participant hex pubkeys")
    hashtags: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list, description="Links to pages, documents, calls, recordings")


class DateCalendarOptions(BaseModel):
    start: Union[date, str] = Field(..., description="Inclusive start date (YYYY-MM-DD)")
    end: Optional[Union[date, str]] = Field(None, description="Exclusive end date (YYYY-MM-DD)")


class TimeCalendarOptions(BaseModel):
    """
    start and end are datetimes or unix seconds. end_tzid falls back to
    start_tzid when an end is given without its own zone.
    """

    start: Union[datetime, int] = Field(..., description="Inclusive start")
    end: Optional[Union[datetime, int]] = Field(None, description="Exclusive end")
    start_tzid: Optional[str] = Field(None, description="IANA time zone of start")
    end_tzid: Optional[str] = Field(None, description="IANA time zone of end")


def _unix(value: Union[datetime, int]) -> str:
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    return str(int(value))


def _iso_date(value: Union[date, str]) -> str:
    return value.isoformat() if isinstance(value, date) else value


def _core_tags(name: str) -> List[List[str]]:
    if not name or not name.strip():
        raise PayloadError("Invalid name")
    return [["d", str(uuid.uuid4())], ["name", name]]


def _trailing_tags(location: CalendarLocation, audience: CalendarAudience) -> List[List[str]]:
    tags = []
    if location.location:
        tags.append(["location", location.location])
    if location.geohash:
        tags.append(["g", location.geohash])
    tags.extend(["p", p] for p in audience.participants)
    tags.extend(["t", t] for t in audience.hashtags)
    tags.extend(["r", r] for r in audience.references)
    return tags


def date_calendar_payload(
    name: str,
    content: str,
    dates: DateCalendarOptions,
    location: Optional[CalendarLocation] = None,
    audience: Optional[CalendarAudience] = None,
) -> EventPayload:
    tags = _core_tags(name)
    start = _iso_date(dates.start)
    if not start:
        raise PayloadError("Invalid start date")
    tags.append(["start", start])
    if dates.end:
        tags.append(["end", _iso_date(dates.end)])
    tags.extend(_trailing_tags(location or CalendarLocation(), audience or CalendarAudience()))
    return EventPayload(kind=EventKinds.DATE_CALENDAR, tags=tags, content=content)


def time_calendar_payload(
    name: str,
    content: str,
    timestamps: TimeCalendarOptions,
    location: Optional[CalendarLocation] = None,
    audience: Optional[CalendarAudience] = None,
) -> EventPayload:
    tags = _core_tags(name)
    tags.append(["start", _unix(timestamps.start)])
    if timestamps.start_tzid:
        tags.append(["start_tzid", timestamps.start_tzid])
    if timestamps.end is not None:
        tags.append(["end", _unix(timestamps.end)])
        end_tzid = timestamps.end_tzid or timestamps.start_tzid
        if end_tzid:
            tags.append(["end_tzid", end_tzid])
    tags.extend(_trailing_tags(location or CalendarLocation(), audience or CalendarAudience()))
    return EventPayload(kind=EventKinds.TIME_CALENDAR, tags=tags, content=content)
