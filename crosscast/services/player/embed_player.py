"""Command channel to an embedded iframe player."""

from collections.abc import Callable
from typing import Any

import orjson
from loguru import logger


def encode_command(name: str, *args: Any) -> bytes:
    """Encode a player API call as the message the iframe API listens for."""
    return orjson.dumps({"event": "command", "func": name, "args": list(args)})


class EmbedPlayerControl:
    """``PlayerControl`` that posts JSON messages into the player frame.

    Each message is posted with ``origin`` as the target origin. The frame never
    acknowledges commands. A detached frame is reported by the sink raising; the
    error is logged and the command dropped.
    """

    def __init__(self, post_message: Callable[[bytes, str], None], origin: str = "*"):
        self._post_message = post_message
        self.origin = origin
        self.detached = False

    def command(self, name: str, *args: Any) -> None:
        if self.detached:
            logger.debug("Player detached, dropping command {}", name)
            return
        try:
            self._post_message(encode_command(name, *args), self.origin)
        except Exception as e:
            logger.warning("Player command {} failed: {}", name, e)

    def detach(self) -> None:
        self.detached = True
