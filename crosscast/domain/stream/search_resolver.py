"""Remote stream discovery from the host channel name."""

from collections.abc import Sequence

from loguru import logger

from crosscast.app_config import get_app_environ_config
from crosscast.schemas import Candidate
from crosscast.utils.app_errors import NotFoundError, SearchError

from ._matching import is_similar, normalize
from .ports import SearchProvider


class SearchResolver:
    """Pick the remote stream that belongs to a host channel.

    Candidates are scanned in provider order and the first one whose
    normalized channel name matches is returned. This is a first-match policy:
    a later candidate with a smaller edit distance does not win.
    """

    def __init__(
        self,
        provider: SearchProvider,
        max_distance: int | None = None,
    ):
        self.provider = provider
        self.max_distance = (
            max_distance
            if max_distance is not None
            else get_app_environ_config().SEARCH_MAX_DISTANCE
        )

    def resolve(self, channel_name: str, candidates: Sequence[Candidate]) -> Candidate:
        """
        Select the candidate matching ``channel_name``.

        Args:
            channel_name: Host channel display name
            candidates: Provider results, assumed ranked

        Returns:
            The first similar candidate tagged ``approximate=False``, or the first
            candidate tagged ``approximate=True`` when nothing is similar

        Raises:
            NotFoundError: If there are no candidates at all
        """
        if not candidates:
            raise NotFoundError(f"No live streams found for '{channel_name}'")

        query = normalize(channel_name)
        for index, candidate in enumerate(candidates):
            if is_similar(query, normalize(candidate.channel_name), self.max_distance):
                logger.debug(
                    "Matched '{}' to candidate #{} {} ({})",
                    channel_name,
                    index,
                    candidate.stream_id,
                    candidate.channel_name,
                )
                return candidate.model_copy(update={"approximate": False})

        fallback = candidates[0]
        logger.info(
            "No similar channel for '{}' among {} candidates, guessing {}",
            channel_name,
            len(candidates),
            fallback.stream_id,
        )
        return fallback.model_copy(update={"approximate": True})

    async def search(self, channel_name: str) -> Candidate:
        """
        Fetch candidates for ``channel_name`` and resolve them.

        Raises:
            SearchError: If the provider failed to fetch or parse results
            NotFoundError: If the provider succeeded but returned nothing
        """
        try:
            candidates = await self.provider.search(channel_name)
        except SearchError:
            raise
        except Exception as e:
            logger.warning("Search provider failed for '{}': {}", channel_name, e)
            raise SearchError(f"Search failed: {e}") from e

        return self.resolve(channel_name, candidates)
