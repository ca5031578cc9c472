"""Stream substitution schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """Active substitution for one host channel.

    Persisted under ``session_active_<channel_key>``; a cleared session is
    stored as null rather than with an empty ``active_stream_id``.
    """

    channel_key: str
    active_stream_id: str
    last_updated: datetime = Field(default_factory=utc_now)


class HistoryEntry(BaseModel):
    """A previously watched substitution."""

    stream_id: str
    title: str = ""
    channel_name: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    pinned: bool = False


class Candidate(BaseModel):
    """A search result proposing a remote stream for the host channel."""

    model_config = ConfigDict(frozen=True)

    stream_id: str
    title: str = ""
    channel_name: str = ""
    is_live: bool = True
    # Set by the resolver when no similarity predicate held
    approximate: bool = False


class StreamDetails(BaseModel):
    """Metadata for a remote stream looked up by id."""

    stream_id: str
    title: str = ""
    channel_name: str = ""


class Preferences(BaseModel):
    """Global user preferences."""

    auto_sync_enabled: bool = True
    force_highest_quality: bool = False
