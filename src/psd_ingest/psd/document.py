"""
Whole-file decoder tying the five sections of a PSD/PSB together.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from attrs import define, field

from psd_ingest.constants import Tag
from psd_ingest.psd.base import BaseElement
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.psd.color_mode_data import ColorModeData
from psd_ingest.psd.header import FileHeader
from psd_ingest.psd.image_data import ImageData
from psd_ingest.psd.image_resources import ImageResources
from psd_ingest.psd.layer_and_mask import (
    ChannelData,
    LayerAndMaskInformation,
    LayerInfo,
    LayerRecord,
)

logger = logging.getLogger(__name__)


@define(repr=False)
class PSD(BaseElement):
    """
    Sections of one file, decoded in file order.

    The five fields mirror Adobe's file layout: ``header``,
    ``color_mode_data``, ``image_resources``,
    ``layer_and_mask_information`` and the merged ``image_data``. Nothing
    here interprets layers; :py:class:`~psd_ingest.api.psd_image.PSDImage`
    builds the tree from the ``(record, channels)`` pairs of
    :py:meth:`_iter_layers`.

    Format reference: https://www.adobe.com/devnet-apps/photoshop/fileformatashtml/
    """

    header: FileHeader = field(factory=FileHeader)
    color_mode_data: ColorModeData = field(factory=ColorModeData)
    image_resources: ImageResources = field(factory=ImageResources)
    layer_and_mask_information: LayerAndMaskInformation = field(
        factory=LayerAndMaskInformation
    )
    image_data: ImageData = field(factory=ImageData)

    @classmethod
    def read(
        cls, reader: BinaryReader, encoding: str = "macroman", **kwargs: Any
    ) -> "PSD":
        header = FileHeader.read(reader)
        return cls(
            header,
            ColorModeData.read(reader),
            ImageResources.read(reader, encoding),
            LayerAndMaskInformation.read(reader, encoding, header.version),
            ImageData.read(reader),
        )

    def _iter_layers(self) -> Iterator[Tuple[LayerRecord, List[ChannelData]]]:
        """
        Iterate over (layer_record, channel_data) pairs in storage order.
        """
        layer_info = self._get_layer_info()
        if layer_info is not None:
            records = layer_info.layer_records
            channel_data = layer_info.channel_image_data
            for record, channels in zip(records, channel_data):
                yield record, channels

    def _get_layer_info(self) -> Optional[LayerInfo]:
        tagged_blocks = self.layer_and_mask_information.tagged_blocks
        if tagged_blocks is not None:
            for key in (Tag.LAYER_16, Tag.LAYER_32):
                data = tagged_blocks.get_data(key)
                if isinstance(data, LayerInfo):
                    return data
        return self.layer_and_mask_information.layer_info

    @property
    def has_merged_alpha(self) -> bool:
        layer_info = self._get_layer_info()
        return layer_info is not None and layer_info.has_merged_alpha
