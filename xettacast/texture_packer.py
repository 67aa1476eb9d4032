"""Packing of named rectangles into the layers of an RGBA texture atlas."""

from __future__ import annotations

import random
import zlib
from dataclasses import dataclass
from os import PathLike

import numpy as np
from PIL import Image


@dataclass
class PackerSpace:
    """A rectangle on one layer of the atlas, free or taken."""

    x: int
    y: int
    width: int
    height: int
    layer: int

    def area(self) -> int:
        return self.width * self.height

    def fits(self, width: int, height: int) -> bool:
        """Whether a ``width`` x ``height`` rectangle fits inside this space."""
        return self.width >= width and self.height >= height

    def fits_in(self, other: PackerSpace) -> bool:
        """Whether this space fits inside ``other``."""
        return self.width <= other.width and self.height <= other.height


class PackError(Exception):
    """Raised when some queued rectangles find no free space."""

    def __init__(self, names: list[str], total: int) -> None:
        super().__init__(f"Could not pack: {len(names)} of {total} {names!r}")
        self.names = names
        self.total = total


def _fill(layer: np.ndarray, space: PackerSpace, color: int) -> None:
    rgba = [(color >> shift) & 0xFF for shift in (24, 16, 8, 0)]
    layer[space.y : space.y + space.height, space.x : space.x + space.width] = rgba


class TexturePacker:
    """A layered RGBA atlas that places named rectangles into free spaces."""

    def __init__(self, width: int, height: int, layer_count: int) -> None:
        self.width = width
        self.height = height
        self.depth = layer_count
        self.layers = [
            np.zeros((height, width, 4), dtype=np.uint8) for _ in range(layer_count)
        ]
        self.spaces: list[PackerSpace] = []
        self.registered: dict[str, PackerSpace] = {}
        self.pending: list[tuple[str, int, int]] = []
        self._reset_spaces()

    def _reset_spaces(self) -> None:
        self.spaces = [
            PackerSpace(0, 0, self.width, self.height, layer)
            for layer in range(self.depth)
        ]

    def save(self, path: str | PathLike[str], layer: int) -> None:
        """Write one layer to an image file."""
        if not 0 <= layer < self.depth:
            raise IndexError(f"Layer {layer} out of range (depth {self.depth})")
        Image.fromarray(self.layers[layer]).save(path)

    def reset(self) -> None:
        """Free every space and forget all registered and queued rectangles."""
        self._reset_spaces()
        self.registered.clear()
        self.pending.clear()

    def add(self, name: str, width: int, height: int) -> None:
        """Queue a rectangle to be placed by the next :meth:`pack`."""
        self.pending.append((name, width, height))

    def update(self, name: str, data: bytes, width: int, height: int) -> None:
        """Copy RGBA ``data`` of the given size into the space of ``name``.

        The data is resampled by nearest neighbour when its size differs from
        the space. Unknown names are ignored.
        """
        space = self.registered.get(name)
        if space is None:
            return
        source = np.frombuffer(bytes(data), dtype=np.uint8)[: width * height * 4]
        source = source.reshape(height, width, 4)
        if (width, height) == (space.width, space.height):
            block = source
        else:
            xs = (
                np.arange(space.width, dtype=np.float32)
                / np.float32(space.width)
                * np.float32(width - 1)
            ).astype(np.int64)
            ys = (
                np.arange(space.height, dtype=np.float32)
                / np.float32(space.height)
                * np.float32(height - 1)
            ).astype(np.int64)
            block = source[np.ix_(ys, xs)]
        self.layers[space.layer][
            space.y : space.y + space.height, space.x : space.x + space.width
        ] = block

    def pack(self) -> None:
        """Place queued rectangles, largest area first.

        Rectangles that do not fit stay queued and are reported by PackError.
        """
        self.pending.sort(key=lambda item: item[1] * item[2], reverse=True)
        queued = list(self.pending)
        failed = [
            name
            for name, width, height in queued
            if not self._pack_item(name, width, height)
        ]
        self.pending = [item for item in self.pending if item[0] in failed]
        if failed:
            raise PackError(failed, len(queued))

    def _pack_item(self, name: str, width: int, height: int) -> bool:
        for index in reversed(range(len(self.spaces))):
            if not self.spaces[index].fits(width, height):
                continue
            space = self.spaces.pop(index)
            x, y, layer = space.x, space.y, space.layer
            self.registered[name] = PackerSpace(x, y, width, height, layer)

            right_w = space.width - width
            below_h = space.height - height
            if right_w > 0 and below_h == 0:
                self._insert(x + width, y, right_w, height, layer)
            elif right_w == 0 and below_h > 0:
                self._insert(x, y + height, width, below_h, layer)
            elif right_w > 0 and below_h > 0:
                # Split 0: a short strip right, a full-width strip below.
                right0, below0 = right_w * height, space.width * below_h
                # Split 1: a full-height strip right, a narrow strip below.
                right1, below1 = right_w * space.height, width * below_h
                if abs(right0 - below0) > abs(right1 - below1):
                    right = (x + width, y, right_w, height, layer)
                    below = (x, y + height, space.width, below_h, layer)
                    larger_right = right0 > below0
                else:
                    right = (x + width, y, right_w, space.height, layer)
                    below = (x, y + height, width, below_h, layer)
                    larger_right = right1 > below1
                first, second = (right, below) if larger_right else (below, right)
                self._insert(*first)
                self._insert(*second)
            return True
        return False

    def _insert(self, x: int, y: int, width: int, height: int, layer: int) -> None:
        self.spaces.append(PackerSpace(x, y, width, height, layer))

    def _clear(self) -> None:
        for layer in self.layers:
            layer.fill(0)

    def fill_color(self) -> None:
        """Clear all layers and paint each registered space in a colour of its name."""
        self._clear()
        for name, space in self.registered.items():
            _fill(self.layers[space.layer], space, self._name_color(name))

    def fill_color_empty(self) -> None:
        """Clear all layers and paint each free space in a random opaque colour."""
        self._clear()
        for space in self.spaces:
            _fill(self.layers[space.layer], space, random.getrandbits(32) | 0xFF)

    @staticmethod
    def _name_color(name: str) -> int:
        return zlib.crc32(name.encode("utf-8")) | 0xFF