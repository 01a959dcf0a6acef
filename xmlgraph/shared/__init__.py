# Shared utilities package
from .channel import Channel
from .config import Config, Settings, get_config, get_settings, init_config
from .errors import (
    AdapterError,
    ChannelClosed,
    ExtractionError,
    StoreError,
    XmlGraphError,
)

__all__ = [
    "Channel",
    "Config",
    "Settings",
    "get_config",
    "get_settings",
    "init_config",
    "XmlGraphError",
    "ExtractionError",
    "StoreError",
    "AdapterError",
    "ChannelClosed",
]
