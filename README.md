# xettacast

Building blocks for a hotkey-triggered overlay window:

- **`xettacast.config_store`**: `ConfigStore`, a YAML settings file that falls back to a
  default document when the file is missing, and the `ConfigItem` base class for typed
  entries. Failures raise `ConfigError`.
- **`xettacast.app_config`**: the typed entries `MonitorItem` and `TriggerItem`,
  `load_app_config_item` to build them from raw values, and `parse_hotkey` / `HotKey`.
- **`xettacast.texture_packer`**: `TexturePacker`, a multi-layer RGBA atlas with
  guillotine-style rectangle packing, pixel upload and image export (`PackerSpace`,
  `PackError`).
- **`xettacast.font`**: `Font`, which rasterises every character a TrueType/OpenType font
  maps into 8-bit coverage bitmaps (`FontGlyph`), and `read_cmap` for the character map.
- **`xettacast.renderer`**: `Renderer`, a 2D draw-list builder that packs rounded, masked
  rectangles into the per-item (`RendererItem`) and per-frame records a shader consumes.
- **`xettacast.swapchain`**: `Swapchain` and `SurfaceConfig` for the surface size limits,
  and `choose_format_and_present_mode`.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Configuration

```python
from xettacast.config_store import ConfigStore
from xettacast.app_config import MonitorItem, load_app_config_item

DEFAULT = "monitor: primary\ntrigger: cmd+alt+space\n"

store = ConfigStore("settings/app_config.yml", DEFAULT)
monitor = store.get("monitor", load_app_config_item)   # MonitorItem(name="primary")
trigger = store.get("trigger", load_app_config_item)   # TriggerItem holding a HotKey

store.set(MonitorItem("Office display"))
store.save()
```

When the file does not exist, the store parses the default document and writes it to
disk (creating the directory). `get_raw` and `set_raw` read and write plain strings;
`reload` reads the file again and `reset` goes back to the default. `changed` tells
whether the data was modified since the last load or save.

`parse_hotkey("cmd+alt+space")` returns a `HotKey` with the modifiers `{"super", "alt"}`
and the key `"Space"`; unknown or repeated keys raise `ValueError`. A `TriggerItem` is
always written back as `cmd+alt+space`.

## Packing a texture atlas

```python
from xettacast.texture_packer import PackError, TexturePacker

packer = TexturePacker(1024, 1024, 2)
packer.add("icon", 64, 64)
packer.add("banner", 512, 128)
try:
    packer.pack()
except PackError as exc:
    print(exc.names, "of", exc.total, "did not fit")

packer.update("icon", rgba_bytes, 64, 64)   # resampled to the slot if sizes differ
packer.save("atlas0.png", 0)
```

Queued rectangles are placed largest area first; those that do not fit stay queued.
Placed rectangles are in `packer.registered`, free ones in `packer.spaces`.
`fill_color()` paints each placed rectangle in a colour derived from its name and
`fill_color_empty()` paints each free space in a random colour, to show the layout.

## Fonts

```python
from xettacast.font import Font

with open("SomeFont-Regular.ttf", "rb") as fh:
    font = Font(fh.read(), 50.0)

for char, glyph in font.glyphs.items():
    if glyph.width and glyph.height:
        packer.add(f"glyph0{char}", glyph.width, glyph.height)

font.save_bitmaps("glyphs")   # writes <code point>.png for every non-empty glyph
```

Unreadable fonts raise `FontError`.

## Building a frame

```python
from xettacast.renderer import Renderer

def submit(gpu_data: bytes, items: bytes, count: int) -> None:
    ...  # upload to your uniform and storage buffers and draw 6 vertices x count instances

renderer = Renderer()
renderer.begin()                     # also clears the target
renderer.target = submit
renderer.set_frame_res(1920, 1080)
renderer.set_border_radius(0.2, 0.2, 0.4, 1.0)
renderer.set_color(1.0, 1.0, 0.0, 1.0)
renderer.rectp(100, 200, 200, 100)   # pixel coordinates
renderer.end()                       # calls submit(...) and clears the items
```

Each item is 28 little-endian floats (`RendererItem.SIZE` bytes); the frame block is four
floats beginning with the aspect ratio. `flush` raises `RuntimeError` without a target and
`ValueError` past `Renderer.MAX_ITEMS` items.

## What this package does not do

It opens no window, talks to no GPU and registers no global hotkey: it prepares the
settings, atlas images, glyph bitmaps, surface configuration and packed draw data, and
leaves presenting them to the caller. It provides no command-line program.