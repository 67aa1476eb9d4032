"""Batched drawing of rounded, masked rectangles into per-instance GPU records."""

from __future__ import annotations

import math
import struct
from dataclasses import astuple, dataclass, field
from typing import Callable, Optional

Vec4 = tuple[float, float, float, float]

_ITEM_FORMAT = struct.Struct("<28f")
_GPU_DATA_FORMAT = struct.Struct("<4f")

FrameTarget = Callable[[bytes, bytes, int], None]


@dataclass(frozen=True)
class RendererItem:
    """One drawn rectangle as laid out in the storage buffer."""

    offset_scale: Vec4
    # Texture transform, or the colour (r, g, b, a) when untextured.
    texture_transform: Vec4
    mask: Vec4
    border_radius: Vec4
    border_radius_mask: Vec4
    # (depth, rotation, unused, unused)
    data0: Vec4
    # (type, tex_layer, unused, unused)
    meta0: Vec4

    SIZE = _ITEM_FORMAT.size

    def to_bytes(self) -> bytes:
        """Pack the item as 28 little-endian 32-bit floats."""
        values = [value for group in astuple(self) for value in group]
        return _ITEM_FORMAT.pack(*values)


@dataclass
class FrameConfig:
    """Drawing state that applies to the rectangles added after it is set."""

    num_items: int = 0
    depth: float = 0.0
    texture: Optional[Vec4] = None
    color: Vec4 = (0.0, 0.0, 0.0, 1.0)
    mask: Vec4 = (0.0, 0.0, 1.0, 1.0)
    border_radius: Vec4 = (0.0, 0.0, 0.0, 0.0)
    border_radius_mask: Vec4 = (0.0, 0.0, 0.0, 0.0)
    frame_res: tuple[float, float] = (800.0, 600.0)


@dataclass
class Renderer:
    """Collects rectangles for one frame and hands them to a target on flush.

    The target is called as ``target(gpu_data_bytes, items_bytes, item_count)``.
    """

    MAX_ITEMS = 1024 * 64

    target: Optional[FrameTarget] = None
    items: list[RendererItem] = field(default_factory=list)
    frame_config: FrameConfig = field(default_factory=FrameConfig)
    gpu_data: list[float] = field(default_factory=lambda: [1.0, 0.0, 0.0, 1.0])

    def begin(self) -> None:
        """Start a new frame: drop items, reset the state and the target."""
        self.items.clear()
        self.frame_config = FrameConfig()
        self.target = None

    def set_frame_res(self, width: int, height: int) -> None:
        """Set the frame size in pixels and the aspect ratio sent to the GPU."""
        self.frame_config.frame_res = (float(width), float(height))
        if height:
            aspect = width / height
        else:
            aspect = math.nan if width == 0 else math.copysign(math.inf, width)
        self.gpu_data[0] = aspect

    def set_color(self, r: float, g: float, b: float, a: float) -> None:
        self.frame_config.color = (r, g, b, a)
        self.frame_config.texture = None

    def set_depth(self, depth: float) -> None:
        self.frame_config.depth = depth

    def set_mask(self, x: float, y: float, w: float, h: float) -> None:
        """Set the clipping rectangle in frame-relative units."""
        self.frame_config.mask = (x, y, w, h)

    def set_maskp(self, x: int, y: int, w: int, h: int) -> None:
        """Set the clipping rectangle in pixels."""
        self.set_mask(*self._to_relative(x, y, w, h))

    def set_mask_border_radius(
        self, top_left: float, top_right: float, bottom_right: float, bottom_left: float
    ) -> None:
        self.frame_config.border_radius_mask = (top_left, top_right, bottom_right, bottom_left)

    def set_border_radius(
        self, top_left: float, top_right: float, bottom_right: float, bottom_left: float
    ) -> None:
        self.frame_config.border_radius = (top_left, top_right, bottom_right, bottom_left)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        """Add a rectangle in frame-relative units with the current state."""
        config = self.frame_config
        self.items.append(
            RendererItem(
                offset_scale=(x, y, w, h),
                texture_transform=config.color,
                mask=config.mask,
                border_radius=config.border_radius,
                border_radius_mask=config.border_radius_mask,
                data0=(config.depth, 0.0, 0.0, 0.0),
                meta0=(0.0, 0.0, 0.0, 0.0),
            )
        )

    def rectp(self, x: int, y: int, w: int, h: int) -> None:
        """Add a rectangle given in pixels."""
        self.rect(*self._to_relative(x, y, w, h))

    def _to_relative(self, x: int, y: int, w: int, h: int) -> Vec4:
        res_w, res_h = self.frame_config.frame_res
        return (_div(x, res_w), _div(y, res_h), _div(w, res_w), _div(h, res_h))

    def gpu_data_bytes(self) -> bytes:
        """The uniform block: (aspect ratio, unused, unused, unused)."""
        return _GPU_DATA_FORMAT.pack(*self.gpu_data)

    def flush(self) -> None:
        """Send the collected items to the target and clear them.

        Raises ValueError when there are more items than the buffer holds and
        RuntimeError when no target is set.
        """
        count = len(self.items)
        if count > self.MAX_ITEMS:
            raise ValueError(f"Too many items: {count} > {self.MAX_ITEMS}")
        self.frame_config.num_items = count
        items_bytes = b"".join(item.to_bytes() for item in self.items)
        self.items.clear()
        if self.target is None:
            raise RuntimeError("No target view!")
        self.target(self.gpu_data_bytes(), items_bytes, count)

    def end(self) -> None:
        """Finish the frame by flushing it."""
        self.flush()


def _div(value: float, divisor: float) -> float:
    if divisor:
        return value / divisor
    return math.nan if value == 0 else math.copysign(math.inf, value)