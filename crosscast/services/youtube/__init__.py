from .youtube_client import YouTubeClient, parse_search_results, parse_video_details

__all__ = ["YouTubeClient", "parse_search_results", "parse_video_details"]
