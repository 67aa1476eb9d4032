"""YAML settings, hotkey parsing, texture atlas packing, font glyphs and 2D draw lists."""

__version__ = "0.1.0"
__all__ = ["app_config", "config_store", "font", "renderer", "swapchain", "texture_packer"]