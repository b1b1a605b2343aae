"""
Text extraction for type layers.

The type tool block stores the text content in a descriptor and the styling
in EngineData markup. Only the first style run is consulted; values missing
from the markup fall back to Photoshop's defaults.
"""

import logging
from typing import Any, Optional

from psd_ingest.api.layers import TextData
from psd_ingest.constants import Tag
from psd_ingest.psd import engine_data
from psd_ingest.psd.layer_and_mask import LayerRecord
from psd_ingest.psd.tagged_blocks import TypeToolObjectSetting

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 12.0
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_COLOR = "#000000"

_STYLE_PATH = ("EngineDict", "StyleRun", "RunArray", 0, "StyleSheet", "StyleSheetData")


def get_text_data(record: LayerRecord) -> Optional[TextData]:
    """
    Extract :py:class:`~psd_ingest.api.layers.TextData` from a layer record.

    :return: `None` when the record has no decodable type tool block.
    """
    setting = record.tagged_blocks.get_data(Tag.TYPE_TOOL_OBJECT_SETTING)
    if not isinstance(setting, TypeToolObjectSetting):
        return None

    content = setting.text_data.get(b"Txt ", "")
    if not isinstance(content, str):
        content = ""
    content = content.rstrip("\0")

    engine_dict = _parse_engine_data(setting.text_data.get(b"EngineData"))
    style = engine_data.lookup(engine_dict, *_STYLE_PATH, default={})
    return TextData(
        content=content,
        font_size=_get_font_size(style),
        font_family=_get_font_family(engine_dict, style),
        color=_get_color(style),
    )


def _parse_engine_data(data: Any) -> dict:
    if not isinstance(data, bytes):
        return {}
    try:
        return engine_data.parse(data)
    except ValueError as e:
        logger.warning("Failed to parse engine data: %s", e)
        return {}


def _get_font_size(style: Any) -> float:
    size = engine_data.lookup(style, "FontSize")
    if isinstance(size, (int, float)) and not isinstance(size, bool):
        return float(size)
    return DEFAULT_FONT_SIZE


def _get_font_family(engine_dict: dict, style: Any) -> str:
    index = engine_data.lookup(style, "Font", default=0)
    if not isinstance(index, int):
        index = 0
    name = engine_data.lookup(engine_dict, "ResourceDict", "FontSet", index, "Name")
    if isinstance(name, str) and name:
        return name.rstrip("\0")
    return DEFAULT_FONT_FAMILY


def _get_color(style: Any) -> str:
    # Values are [alpha, red, green, blue] in [0, 1].
    values = engine_data.lookup(style, "FillColor", "Values")
    if not isinstance(values, list) or len(values) < 4:
        return DEFAULT_COLOR
    try:
        rgb = [min(max(int(round(float(v) * 255)), 0), 255) for v in values[1:4]]
    except (TypeError, ValueError):
        return DEFAULT_COLOR
    return "#%02x%02x%02x" % tuple(rgb)
