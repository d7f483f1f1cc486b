"""SpA1 sprite codec and sheet builders."""

from .codec import Frame, SpriteFormatError, decode_frames, encode_sprite
from .icons import build_icon_sprites
from .trees import build_tree_sprites

__all__ = [
    "Frame",
    "SpriteFormatError",
    "decode_frames",
    "encode_sprite",
    "build_icon_sprites",
    "build_tree_sprites",
]
