from .embed_player import EmbedPlayerControl, encode_command

__all__ = ["EmbedPlayerControl", "encode_command"]
