"""
Various constants for psd_ingest
"""

from enum import Enum, IntEnum


class ColorMode(IntEnum):
    """
    Color mode.
    """

    BITMAP = 0
    GRAYSCALE = 1
    INDEXED = 2
    RGB = 3
    CMYK = 4
    MULTICHANNEL = 7
    DUOTONE = 8
    LAB = 9


class ChannelID(IntEnum):
    """
    Channel types.
    """

    CHANNEL_0 = 0  # Red, Cyan, Gray, ...
    CHANNEL_1 = 1  # Green, Magenta, ...
    CHANNEL_2 = 2  # Blue, Yellow, ...
    CHANNEL_3 = 3  # Black, ...
    TRANSPARENCY_MASK = -1
    USER_LAYER_MASK = -2
    REAL_USER_LAYER_MASK = -3


class Clipping(IntEnum):
    """Clipping."""

    BASE = 0
    NON_BASE = 1


class BlendMode(Enum):
    """
    Blend modes.
    """

    PASS_THROUGH = b"pass"
    NORMAL = b"norm"
    DISSOLVE = b"diss"
    DARKEN = b"dark"
    MULTIPLY = b"mul "
    COLOR_BURN = b"idiv"
    LINEAR_BURN = b"lbrn"
    DARKER_COLOR = b"dkCl"
    LIGHTEN = b"lite"
    SCREEN = b"scrn"
    COLOR_DODGE = b"div "
    LINEAR_DODGE = b"lddg"
    LIGHTER_COLOR = b"lgCl"
    OVERLAY = b"over"
    SOFT_LIGHT = b"sLit"
    HARD_LIGHT = b"hLit"
    VIVID_LIGHT = b"vLit"
    LINEAR_LIGHT = b"lLit"
    PIN_LIGHT = b"pLit"
    HARD_MIX = b"hMix"
    DIFFERENCE = b"diff"
    EXCLUSION = b"smud"
    SUBTRACT = b"fsub"
    DIVIDE = b"fdiv"
    HUE = b"hue "
    SATURATION = b"sat "
    COLOR = b"colr"
    LUMINOSITY = b"lum "

    @classmethod
    def from_signature(cls, signature: bytes) -> "BlendMode":
        """Look up a blend mode key, falling back to NORMAL when unknown."""
        try:
            return cls(signature)
        except ValueError:
            return cls.NORMAL


class Compression(IntEnum):
    """
    Compression modes.

    Compression. 0 = Raw Data, 1 = RLE compressed, 2 = ZIP without prediction,
    3 = ZIP with prediction.
    """

    RAW = 0
    RLE = 1
    ZIP = 2
    ZIP_WITH_PREDICTION = 3


class SectionDivider(IntEnum):
    OTHER = 0
    OPEN_FOLDER = 1
    CLOSED_FOLDER = 2
    BOUNDING_SECTION_DIVIDER = 3


class Resource(IntEnum):
    """
    Image resource keys used by the decoder.

    Other resources are kept as raw bytes under their integer id.
    """

    RESOLUTION_INFO = 1005
    ICC_PROFILE = 1039
    LAYER_GROUP_INFO = 1026
    THUMBNAIL_RESOURCE = 1036
    VERSION_INFO = 1057
    XMP_METADATA = 1060

    @staticmethod
    def is_path_info(value: int) -> bool:
        return 2000 <= value and value <= 2997

    @staticmethod
    def is_plugin_resource(value: int) -> bool:
        return 4000 <= value and value <= 4999


class Tag(Enum):
    """
    Tagged blocks keys.
    """

    BLACK_AND_WHITE = b"blwh"
    BLEND_CLIPPING_ELEMENTS = b"clbl"
    BLEND_FILL_OPACITY = b"iOpa"
    BLEND_INTERIOR_ELEMENTS = b"infx"
    BRIGHTNESS_AND_CONTRAST = b"brit"
    CHANNEL_MIXER = b"mixr"
    COLOR_BALANCE = b"blnc"
    COLOR_LOOKUP = b"clrL"
    CURVES = b"curv"
    EFFECTS_LAYER = b"lrFX"
    EXPOSURE = b"expA"
    GRADIENT_FILL_SETTING = b"GdFl"
    GRADIENT_MAP = b"grdm"
    HUE_SATURATION = b"hue2"
    HUE_SATURATION_V4 = b"hue "
    INVERT = b"nvrt"
    KNOCKOUT_SETTING = b"knko"
    LAYER = b"Layr"
    LAYER_16 = b"Lr16"
    LAYER_32 = b"Lr32"
    LAYER_ID = b"lyid"
    LAYER_NAME_SOURCE_SETTING = b"lnsr"
    LEVELS = b"levl"
    NESTED_SECTION_DIVIDER_SETTING = b"lsdk"
    OBJECT_BASED_EFFECTS_LAYER_INFO = b"lfx2"
    PATTERN_FILL_SETTING = b"PtFl"
    PHOTO_FILTER = b"phfl"
    PLACED_LAYER1 = b"plLd"
    POSTERIZE = b"post"
    PROTECTED_SETTING = b"lspf"
    SECTION_DIVIDER_SETTING = b"lsct"
    SELECTIVE_COLOR = b"selc"
    SHEET_COLOR_SETTING = b"lclr"
    SMART_OBJECT_LAYER_DATA1 = b"SoLd"
    SOLID_COLOR_SHEET_SETTING = b"SoCo"
    TEXT_ENGINE_DATA = b"Txt2"
    THRESHOLD = b"thrs"
    TYPE_TOOL_INFO = b"tySh"
    TYPE_TOOL_OBJECT_SETTING = b"TySh"
    UNICODE_LAYER_NAME = b"luni"
    USER_MASK = b"LMsk"
    VIBRANCE = b"vibA"

    # PSB-only 8-byte length keys.
    ALPHA = b"Alph"
    FILTER_MASK = b"FMsk"
    LINKED_LAYER2 = b"lnk2"
    LINKED_LAYER3 = b"lnk3"
    LINKED_LAYER_EXTERNAL = b"lnkE"
    FILTER_EFFECTS1 = b"FXid"
    FILTER_EFFECTS2 = b"FEid"
    PIXEL_SOURCE_DATA2 = b"PxSD"
    SAVING_MERGED_TRANSPARENCY = b"Mtrn"
    SAVING_MERGED_TRANSPARENCY16 = b"Mt16"
    SAVING_MERGED_TRANSPARENCY32 = b"Mt32"
    UNICODE_PATH_NAME = b"pths"
    EXPORT_SETTING1 = b"extd"
    EXPORT_SETTING2 = b"extn"
    COMPOSITOR_INFO = b"cinf"
    ARTBOARD_DATA2 = b"abdd"


#: Tagged block keys marking an adjustment or fill layer.
ADJUSTMENT_TAGS = frozenset(
    {
        Tag.BLACK_AND_WHITE,
        Tag.BRIGHTNESS_AND_CONTRAST,
        Tag.CHANNEL_MIXER,
        Tag.COLOR_BALANCE,
        Tag.COLOR_LOOKUP,
        Tag.CURVES,
        Tag.EXPOSURE,
        Tag.GRADIENT_FILL_SETTING,
        Tag.GRADIENT_MAP,
        Tag.HUE_SATURATION,
        Tag.HUE_SATURATION_V4,
        Tag.INVERT,
        Tag.LEVELS,
        Tag.PATTERN_FILL_SETTING,
        Tag.PHOTO_FILTER,
        Tag.POSTERIZE,
        Tag.SELECTIVE_COLOR,
        Tag.SOLID_COLOR_SHEET_SETTING,
        Tag.THRESHOLD,
        Tag.VIBRANCE,
    }
)


class OSType(Enum):
    """
    Descriptor OSTypes and reference OSTypes.
    """

    # OS types
    REFERENCE = b"obj "
    DESCRIPTOR = b"Objc"
    LIST = b"VlLs"
    DOUBLE = b"doub"
    UNIT_FLOAT = b"UntF"
    UNIT_FLOATS = b"UnFl"
    STRING = b"TEXT"
    ENUMERATED = b"enum"
    INTEGER = b"long"
    LARGE_INTEGER = b"comp"
    BOOLEAN = b"bool"
    GLOBAL_OBJECT = b"GlbO"
    CLASS1 = b"type"
    CLASS2 = b"GlbC"
    ALIAS = b"alis"
    RAW_DATA = b"tdta"
    OBJECT_ARRAY = b"ObAr"
    PATH = b"Pth "

    # Reference OS types
    PROPERTY = b"prop"
    CLASS3 = b"Clss"
    ENUMERATED_REFERENCE = b"Enmr"
    OFFSET = b"rele"
    IDENTIFIER = b"Idnt"
    INDEX = b"indx"
    NAME = b"name"
