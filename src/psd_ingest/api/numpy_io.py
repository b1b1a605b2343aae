"""
Layer materializer.

Decodes the channel data of one layer record into an RGBA8
:py:class:`~psd_ingest.api.raster.Raster` sized to the layer's bounding box,
plus the optional user mask. Problems confined to the layer are returned as
:py:class:`~psd_ingest.errors.DecodeWarning` entries instead of being raised.
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
from attrs import define, field

from psd_ingest.api.mask import Mask
from psd_ingest.api.raster import Raster
from psd_ingest.compression import decompress, row_size
from psd_ingest.constants import ChannelID, ColorMode, Compression
from psd_ingest.errors import (
    DecodeWarning,
    StructuralInconsistency,
    UnsupportedCompression,
)
from psd_ingest.psd.document import PSD
from psd_ingest.psd.header import FileHeader
from psd_ingest.psd.layer_and_mask import ChannelData, LayerRecord

logger = logging.getLogger(__name__)

# Mapping of expected number of color channels for each color mode.
EXPECTED_CHANNELS = {
    ColorMode.BITMAP: 1,
    ColorMode.GRAYSCALE: 1,
    ColorMode.INDEXED: 1,
    ColorMode.RGB: 3,
    ColorMode.CMYK: 4,
    ColorMode.MULTICHANNEL: 1,
    ColorMode.DUOTONE: 1,
    ColorMode.LAB: 3,
}


@define
class LayerPixels:
    """
    Materialization result of a single layer.

    .. py:attribute:: raster
    .. py:attribute:: mask
    .. py:attribute:: warnings
    """

    raster: Optional[Raster] = None
    mask: Optional[Mask] = None
    warnings: List[DecodeWarning] = field(factory=list)


def parse_array(data: bytes, width: int, height: int, depth: int) -> np.ndarray:
    """
    Convert decompressed samples into a (height, width) uint8 plane.

    16-bit samples keep their high byte, 32-bit floats are clipped to [0, 1],
    and 1-bit samples map set bits to black.
    """
    if depth == 8:
        array = np.frombuffer(data, dtype=np.uint8)
    elif depth == 16:
        array = (np.frombuffer(data, dtype=">u2") >> 8).astype(np.uint8)
    elif depth == 32:
        array = np.frombuffer(data, dtype=">f4")
        array = np.rint(np.clip(np.nan_to_num(array), 0.0, 1.0) * 255.0)
        array = array.astype(np.uint8)
    elif depth == 1:
        bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8))
        bits = bits.reshape((height, row_size(width, 1) * 8))[:, :width]
        return ((1 - bits) * 255).astype(np.uint8)
    else:
        raise ValueError("Unsupported depth: %g" % depth)
    return array.reshape((height, width))


def decode_channel(
    channel: ChannelData, width: int, height: int, depth: int, version: int = 1
) -> np.ndarray:
    """
    Decode one channel into a (height, width) uint8 plane.

    :raise UnsupportedCompression: for unknown ids and corrupt zip data.
    :raise StructuralInconsistency: when raw data is shorter than the
        declared rectangle.
    """
    expected = row_size(width, depth) * height
    if channel.compression == Compression.RAW and len(channel.data) < expected:
        raise StructuralInconsistency(
            "Channel has %d bytes, %dx%d at %d bit needs %d"
            % (len(channel.data), width, height, depth, expected)
        )
    data = decompress(channel.data, channel.compression, width, height, depth, version)
    return parse_array(data, width, height, depth)


def to_rgb(
    planes: Dict[int, np.ndarray],
    color_mode: ColorMode,
    shape: Tuple[int, int],
    palette: Optional[bytes] = None,
) -> np.ndarray:
    """
    Convert color planes keyed by channel id into a (height, width, 3) RGB
    array.
    """

    def plane(index: int, fill: int = 0) -> np.ndarray:
        if index in planes:
            return planes[index]
        return np.full(shape, fill, dtype=np.uint8)

    if color_mode == ColorMode.RGB:
        return np.stack([plane(0), plane(1), plane(2)], axis=2)
    elif color_mode == ColorMode.CMYK:
        # Inks are stored inverted, 255 means no ink.
        k = plane(3, 255).astype(np.float64)
        rgb = [plane(i, 255).astype(np.float64) * k / 255.0 for i in range(3)]
        return np.rint(np.stack(rgb, axis=2)).astype(np.uint8)
    elif color_mode == ColorMode.INDEXED and palette and len(palette) >= 768:
        lut = np.frombuffer(palette[:768], dtype=np.uint8).reshape((3, 256))
        return lut.transpose()[plane(0)]
    # Grayscale, duotone, multichannel, bitmap and Lab lightness.
    gray = plane(0)
    return np.stack([gray, gray, gray], axis=2)


def materialize_layer(
    layer_id: int,
    record: LayerRecord,
    channels: List[ChannelData],
    header: FileHeader,
    palette: Optional[bytes] = None,
) -> LayerPixels:
    """
    Combine the channels of one record into a raster and mask.

    Channel ids 0, 1, 2 (and 3 for CMYK) are color, -1 is alpha, -2 and -3
    are the user mask and the real user mask. A missing alpha channel makes
    the raster opaque.

    :param layer_id: id used in the warnings.
    :param record: :py:class:`~psd_ingest.psd.layer_and_mask.LayerRecord`.
    :param channels: list of
        :py:class:`~psd_ingest.psd.layer_and_mask.ChannelData` in record
        channel order.
    :param header: :py:class:`~psd_ingest.psd.header.FileHeader`.
    :param palette: color mode data for indexed documents.
    """
    width, height = record.width, record.height
    result = LayerPixels()
    planes: Dict[int, np.ndarray] = {}
    for info, channel in zip(record.channel_info, channels):
        channel_width, channel_height = record.channel_size(info.id)
        if channel_width == 0 or channel_height == 0:
            continue
        try:
            planes[info.id] = decode_channel(
                channel, channel_width, channel_height, header.depth, header.version
            )
        except UnsupportedCompression as e:
            logger.warning("Layer %d channel %d: %s", layer_id, info.id, e)
            result.warnings.append(
                DecodeWarning(UnsupportedCompression, str(e), layer_id)
            )
            planes[info.id] = np.zeros((channel_height, channel_width), np.uint8)
        except StructuralInconsistency as e:
            logger.warning("Layer %d channel %d: %s", layer_id, info.id, e)
            result.warnings.append(
                DecodeWarning(StructuralInconsistency, str(e), layer_id)
            )
            result.raster = Raster.empty()
            return result

    result.mask = _get_mask(record, planes)
    if width == 0 or height == 0:
        result.raster = Raster.empty(width, height)
        return result

    color = to_rgb(planes, header.color_mode, (height, width), palette)
    alpha = planes.get(ChannelID.TRANSPARENCY_MASK)
    if alpha is None:
        alpha = np.full((height, width), 255, dtype=np.uint8)
    result.raster = Raster(np.concatenate((color, alpha[:, :, np.newaxis]), axis=2))
    return result


def _get_mask(record: LayerRecord, planes: Dict[int, np.ndarray]) -> Optional[Mask]:
    if record.mask_data is None:
        return None
    if ChannelID.REAL_USER_LAYER_MASK in planes:
        return Mask.from_record(
            record.mask_data, planes[ChannelID.REAL_USER_LAYER_MASK], real=True
        )
    return Mask.from_record(record.mask_data, planes.get(ChannelID.USER_LAYER_MASK))


def get_image_data(psd: PSD, has_alpha: bool = False) -> Raster:
    """
    Decode the merged image stored at the end of the file.

    The merged image of an RGB document with transparency is matted on
    white; the matte is removed here.

    :raise UnsupportedCompression: when the image data cannot be decoded.
    """
    header = psd.header
    planes_data = psd.image_data.get_data(header)
    shape = (header.height, header.width)
    planes = {
        i: parse_array(data, header.width, header.height, header.depth)
        for i, data in enumerate(planes_data)
    }
    color = to_rgb(planes, header.color_mode, shape, psd.color_mode_data.value)
    expected = EXPECTED_CHANNELS.get(header.color_mode, 1)
    if has_alpha and header.channels > expected:
        alpha = planes[expected]
        color = _remove_background(color, alpha)
    else:
        alpha = np.full(shape, 255, dtype=np.uint8)
    return Raster(np.concatenate((color, alpha[:, :, np.newaxis]), axis=2))


def _remove_background(color: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """Merged image is rendered on a white background."""
    c = color.astype(np.float64) / 255.0
    a = np.repeat(alpha[:, :, np.newaxis].astype(np.float64) / 255.0, 3, axis=2)
    index = a > 0
    c[index] = (c + a - 1)[index] / a[index]
    return np.rint(np.clip(c, 0.0, 1.0) * 255.0).astype(np.uint8)
