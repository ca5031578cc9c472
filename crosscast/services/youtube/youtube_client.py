"""
YouTube search and metadata over plain HTML pages.

The search results and watch pages embed their data as JSON assigned to
``ytInitialData`` / ``ytInitialPlayerResponse``; no API key is needed.
"""

import html as html_lib
import re

import httpx
import orjson
from loguru import logger
from pydantic import ValidationError

from crosscast.app_config import get_app_environ_config
from crosscast.schemas import Candidate, StreamDetails
from crosscast.utils.app_errors import SearchError

from .youtube_schemas import VideoDetails, VideoRenderer

# Search filter restricting results to live streams
LIVE_FILTER = "EgJAAQ=="

_INITIAL_DATA_PATTERNS = (
    re.compile(r"var ytInitialData\s*=\s*({.*?});\s*</script>", re.DOTALL),
    re.compile(r"window\[\"ytInitialData\"\]\s*=\s*({.*?});\s*</script>", re.DOTALL),
    re.compile(r"var ytInitialData\s*=\s*({.*?});", re.DOTALL),
)
_PLAYER_RESPONSE_PATTERNS = (
    re.compile(r"var ytInitialPlayerResponse\s*=\s*({.*?});\s*(?:var |</script>)", re.DOTALL),
    re.compile(r"ytInitialPlayerResponse\s*=\s*({.*?});", re.DOTALL),
)
_TITLE_PATTERN = re.compile(r"<title>(.*?) - YouTube</title>", re.DOTALL)

FALLBACK_CHANNEL_NAME = "YouTube Stream"


def _extract_json(page: str, patterns: tuple[re.Pattern[str], ...]) -> dict | None:
    for pattern in patterns:
        match = pattern.search(page)
        if not match:
            continue
        try:
            data = orjson.loads(match.group(1))
        except orjson.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def parse_search_results(page: str) -> list[Candidate]:
    """
    Extract live video candidates from a search results page.

    Args:
        page: HTML of /results

    Returns:
        Live candidates in page order (possibly empty)

    Raises:
        SearchError: If the page carries no readable ytInitialData
    """
    data = _extract_json(page, _INITIAL_DATA_PATTERNS)
    if data is None:
        raise SearchError("Could not parse YouTube results")

    try:
        sections = data["contents"]["twoColumnSearchResultsRenderer"]["primaryContents"][
            "sectionListRenderer"
        ]["contents"]
        items = sections[0]["itemSectionRenderer"]["contents"]
    except (KeyError, IndexError, TypeError):
        logger.info("Search results page has no result section")
        return []

    candidates: list[Candidate] = []
    for item in items:
        raw = item.get("videoRenderer") if isinstance(item, dict) else None
        if not raw:
            continue
        try:
            renderer = VideoRenderer.model_validate(raw)
        except ValidationError as e:
            logger.debug("Skipping unreadable search item: {}", e)
            continue
        if renderer.is_live:
            candidates.append(renderer.to_candidate())
    return candidates


def parse_video_details(page: str, stream_id: str) -> StreamDetails | None:
    """
    Extract title and channel from a watch page.

    Falls back to the page <title> when the player response is missing.
    """
    data = _extract_json(page, _PLAYER_RESPONSE_PATTERNS)
    if data and isinstance(data.get("videoDetails"), dict):
        try:
            return VideoDetails.model_validate(data["videoDetails"]).to_stream_details()
        except ValidationError as e:
            logger.debug("Unreadable videoDetails for {}: {}", stream_id, e)

    match = _TITLE_PATTERN.search(page)
    if match:
        return StreamDetails(
            stream_id=stream_id,
            title=html_lib.unescape(match.group(1).strip()),
            channel_name=FALLBACK_CHANNEL_NAME,
        )
    return None


class YouTubeClient:
    """``SearchProvider`` and ``MetadataProvider`` for YouTube live streams."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        demo_mode: bool | None = None,
    ):
        app_config = get_app_environ_config()
        self.base_url = (base_url or app_config.YOUTUBE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else app_config.HTTP_TIMEOUT_SECONDS
        self.demo_mode = demo_mode if demo_mode is not None else app_config.DEMO_MODE
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept-Language": "en-US,en;q=0.9"},
            follow_redirects=True,
        )

    async def search(self, query: str) -> list[Candidate]:
        """Search live streams matching ``query``."""
        if self.demo_mode:
            logger.info("YouTube client DEMO_MODE=true: returning stubbed search results")
            return [
                Candidate(
                    stream_id="jfKfPfyJRdk",
                    title=f"{query} live",
                    channel_name=query,
                )
            ]

        try:
            async with self._client() as client:
                response = await client.get(
                    "/results", params={"search_query": query, "sp": LIVE_FILTER}
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise SearchError(f"YouTube search failed: {e}") from e

        candidates = parse_search_results(response.text)
        logger.debug("YouTube search '{}' returned {} live result(s)", query, len(candidates))
        return candidates

    async def details(self, stream_id: str) -> StreamDetails | None:
        """Look up title and channel of a video; None if unavailable."""
        if self.demo_mode:
            logger.info("YouTube client DEMO_MODE=true: returning stubbed video details")
            return StreamDetails(
                stream_id=stream_id, title=f"Demo stream {stream_id}", channel_name="Demo Channel"
            )

        try:
            async with self._client() as client:
                response = await client.get("/watch", params={"v": stream_id})
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("YouTube details request failed for {}: {}", stream_id, e)
            return None

        return parse_video_details(response.text, stream_id)
