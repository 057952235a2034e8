from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class DestinationCapabilities:
    """
    Describes WHAT a destination can carry in one post.
    """
    destination: str

    max_media_per_post: int = 1
    max_caption_chars: int | None = None
    max_text_chars: int | None = None

    # Media groups cannot carry inline keyboards on this destination
    buttons_on_media_group: bool = False


TELEGRAM_CHANNEL = DestinationCapabilities(
    destination="telegram_channel",
    max_media_per_post=10,
    max_caption_chars=1024,
    max_text_chars=4096,
)
