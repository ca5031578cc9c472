"""Shapes of the JSON blobs embedded in YouTube HTML pages.

Only the fields used for stream lookup are modelled; everything else is ignored.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from crosscast.schemas import Candidate, StreamDetails


class TextRun(BaseModel):
    text: str = ""


class RunsText(BaseModel):
    """YouTube's formatted text: a list of styled runs."""

    runs: list[TextRun] = Field(default_factory=list)

    @property
    def first_text(self) -> str:
        return self.runs[0].text if self.runs else ""


class MetadataBadge(BaseModel):
    label: str | None = None


class Badge(BaseModel):
    metadata_badge: MetadataBadge | None = Field(
        default=None,
        alias="metadataBadgeRenderer",
        validation_alias=AliasChoices("metadataBadgeRenderer", "metadata_badge"),
    )

    model_config = ConfigDict(populate_by_name=True)


class VideoRenderer(BaseModel):
    """One video item of a search results page."""

    video_id: str = Field(
        ...,
        alias="videoId",
        validation_alias=AliasChoices("videoId", "video_id"),
    )
    title: RunsText | None = None
    owner_text: RunsText | None = Field(
        default=None,
        alias="ownerText",
        validation_alias=AliasChoices("ownerText", "owner_text"),
    )
    badges: list[Badge] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_live(self) -> bool:
        return any(
            badge.metadata_badge is not None
            and badge.metadata_badge.label is not None
            and "live" in badge.metadata_badge.label.lower()
            for badge in self.badges
        )

    def to_candidate(self) -> Candidate:
        return Candidate(
            stream_id=self.video_id,
            title=self.title.first_text if self.title else "",
            channel_name=self.owner_text.first_text if self.owner_text else "",
            is_live=self.is_live,
        )


class VideoDetails(BaseModel):
    """``videoDetails`` of a watch page player response."""

    video_id: str = Field(
        ...,
        alias="videoId",
        validation_alias=AliasChoices("videoId", "video_id"),
    )
    title: str = ""
    author: str = ""

    model_config = ConfigDict(populate_by_name=True)

    def to_stream_details(self) -> StreamDetails:
        return StreamDetails(stream_id=self.video_id, title=self.title, channel_name=self.author)
