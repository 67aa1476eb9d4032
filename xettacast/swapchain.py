"""Surface configuration: format and present-mode choice and size clamping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

MAILBOX = "Mailbox"


@dataclass
class SurfaceConfig:
    """What a presentation surface is configured with."""

    format: str
    present_mode: str
    alpha_mode: str
    width: int = 800
    height: int = 600
    usage: str = "RENDER_ATTACHMENT"
    view_formats: list[str] = field(default_factory=list)


def _is_srgb(texture_format: str) -> bool:
    return texture_format.lower().endswith("srgb")


def choose_format_and_present_mode(
    formats: Sequence[str], present_modes: Sequence[str]
) -> tuple[str, str]:
    """Prefer an sRGB format and mailbox presentation, else take the first of each."""
    if not formats:
        raise ValueError("Surface offers no formats")
    if not present_modes:
        raise ValueError("Surface offers no present modes")
    texture_format = next((f for f in formats if _is_srgb(f)), formats[0])
    present_mode = next((m for m in present_modes if m == MAILBOX), present_modes[0])
    return texture_format, present_mode


class Swapchain:
    """Holds the surface configuration and keeps its size within limits."""

    def __init__(
        self,
        formats: Sequence[str],
        present_modes: Sequence[str],
        alpha_modes: Sequence[str],
    ) -> None:
        if not alpha_modes:
            raise ValueError("Surface offers no alpha modes")
        texture_format, present_mode = choose_format_and_present_mode(
            formats, present_modes
        )
        self.min_size = (800, 600)
        self.max_size = (8000, 8000)
        self.surface_config = SurfaceConfig(
            format=texture_format,
            present_mode=present_mode,
            alpha_mode=alpha_modes[0],
        )

    def resize(self, width: int, height: int) -> None:
        """Set the surface size, clamped to the minimum and maximum sizes."""
        self.surface_config.width = min(max(width, self.min_size[0]), self.max_size[0])
        self.surface_config.height = min(max(height, self.min_size[1]), self.max_size[1])