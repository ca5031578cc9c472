"""Host platform adapters.

One core drives every host page. An adapter only describes where the host
player container and channel name live on the page, and how streams of the
remote platform are addressed and embedded.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import quote


@dataclass(frozen=True)
class PlatformAdapter:
    """Static description of a host page and the remote platform it embeds."""

    host: str
    remote: str
    container_selectors: tuple[str, ...]
    channel_selectors: tuple[str, ...]
    embed_url_template: str
    # Applied to the URL in order; the first group of the first match is the stream id
    stream_url_patterns: tuple[re.Pattern[str], ...]
    # A bare stream id typed by the user instead of a URL
    bare_id_pattern: re.Pattern[str]
    quality_param: str | None = None
    embed_params: dict[str, str] = field(default_factory=dict)
    # Remote streams are addressed by channel name, so a host channel name is a guess
    channel_named_streams: bool = False

    def extract_stream_id(self, text: str | None) -> str | None:
        """
        Parse a remote stream id from a URL or a bare id.

        Returns:
            The stream id, or None if the input is not recognised
        """
        if not text:
            return None
        text = text.strip()
        for pattern in self.stream_url_patterns:
            match = pattern.search(text)
            if match:
                return match.group(1)
        if self.bare_id_pattern.fullmatch(text):
            return text
        return None

    def embed_url(self, stream_id: str, force_highest_quality: bool = False) -> str:
        url = self.embed_url_template.format(stream_id=quote(stream_id, safe=""))
        params = dict(self.embed_params)
        if force_highest_quality and self.quality_param:
            key, _, value = self.quality_param.partition("=")
            params[key] = value
        if params:
            separator = "&" if "?" in url else "?"
            url += separator + "&".join(f"{k}={v}" for k, v in params.items())
        return url


# YouTube streams replace the Twitch player
TWITCH_HOST = PlatformAdapter(
    host="twitch",
    remote="youtube",
    container_selectors=(
        '[data-a-target="video-player-layout"]',
        ".video-player__container",
        ".video-player",
        '[data-a-target="video-player"]',
    ),
    channel_selectors=(
        '[data-a-target="channel-header-display-name"]',
        ".channel-info-content h1",
        "h1.tw-title",
    ),
    embed_url_template="https://www.youtube.com/embed/{stream_id}?autoplay=1&rel=0&enablejsapi=1",
    stream_url_patterns=(
        re.compile(
            r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/live/)([A-Za-z0-9_-]{11})"
        ),
        re.compile(r"youtube\.com/embed/([A-Za-z0-9_-]{11})"),
    ),
    bare_id_pattern=re.compile(r"[A-Za-z0-9_-]{11}"),
    quality_param="vq=highres",
)

# Twitch streams replace the YouTube player
YOUTUBE_HOST = PlatformAdapter(
    host="youtube",
    remote="twitch",
    container_selectors=(
        "#player-container-inner",
        "#player-container",
        "#movie_player",
    ),
    channel_selectors=(
        "ytd-channel-name yt-formatted-string a",
        "ytd-channel-name a",
        "#channel-name a",
        "#owner-name a",
        ".ytd-channel-name a",
    ),
    embed_url_template="https://player.twitch.tv/?channel={stream_id}",
    stream_url_patterns=(
        re.compile(r"player\.twitch\.tv/\?(?:.*&)?channel=([A-Za-z0-9_]{3,25})"),
        re.compile(r"twitch\.tv/(?:popout/|embed/)?([A-Za-z0-9_]{3,25})(?:[/?#]|$)"),
    ),
    bare_id_pattern=re.compile(r"[A-Za-z0-9_]{3,25}"),
    embed_params={"parent": "www.youtube.com", "autoplay": "true"},
    channel_named_streams=True,
)

PLATFORMS: dict[str, PlatformAdapter] = {
    TWITCH_HOST.host: TWITCH_HOST,
    YOUTUBE_HOST.host: YOUTUBE_HOST,
}


def get_platform(host: str) -> PlatformAdapter:
    """Look up the adapter for a host platform name."""
    try:
        return PLATFORMS[host.lower()]
    except KeyError:
        raise ValueError(f"Unsupported host platform: {host}") from None
