import pytest

from psd_ingest.psd import engine_data
from psd_ingest.psd.engine_data import EngineToken, Tokenizer

from ..utils import engine_data as make_engine_data


@pytest.mark.parametrize(
    "fixture, length",
    [
        (b"(\xfe\xff\x000) /1 (\xfe\xff\x001)", 3),
        (b"(\xfe\xff\x000\\)) /1", 2),
        (b"(\xfe\xff) <<", 2),
    ],
)
def test_tokenizer(fixture: bytes, length: int) -> None:
    tokens = list(Tokenizer(fixture))
    assert len(tokens) == length


@pytest.mark.parametrize(
    "fixture, token_type",
    [
        (b"(\xfe\xff\x000\x00\n)", EngineToken.STRING),
        (b"<<", EngineToken.DICT_START),
        (b">>\x00\x00", EngineToken.DICT_END),
        (b"[", EngineToken.ARRAY_START),
        (b"true", EngineToken.BOOLEAN),
        (b"-12", EngineToken.NUMBER),
        (b".5", EngineToken.NUMBER_WITH_DECIMAL),
        (b"/FontSize", EngineToken.PROPERTY),
        (b"(hwid)", EngineToken.UNKNOWN_TAG),
    ],
)
def test_tokenizer_item(fixture: bytes, token_type: EngineToken) -> None:
    token, kind = next(Tokenizer(fixture))
    assert token == fixture
    assert kind == token_type


def test_parse() -> None:
    data = (
        b"<< /Editor << /Text (\xfe\xff\x00H\x00i) >> "
        b"/Sizes [ 12 .5 -3.25 ] /On true /Tag (hwid) >>"
    )
    result = engine_data.parse(data)
    assert result["Editor"]["Text"] == "Hi"
    assert result["Sizes"] == [12, 0.5, -3.25]
    assert result["On"] is True
    assert result["Tag"] == b"(hwid)"


def test_parse_escaped_parenthesis() -> None:
    result = engine_data.parse(b"<< /Text (\xfe\xff\x00\\)\x00a) >>")
    assert result["Text"] == ")a"


def test_parse_style_sheet() -> None:
    result = engine_data.parse(make_engine_data(font_size=30.0, font="Futura"))
    style = engine_data.lookup(
        result,
        "EngineDict",
        "StyleRun",
        "RunArray",
        0,
        "StyleSheet",
        "StyleSheetData",
    )
    assert style["FontSize"] == 30.0
    assert style["FillColor"]["Values"] == [1.0, 1.0, 0.0, 0.0]
    assert engine_data.lookup(result, "ResourceDict", "FontSet", 0, "Name") == "Futura"


def test_parse_invalid() -> None:
    with pytest.raises(ValueError):
        engine_data.parse(b"<< /Text @@@ >>")


def test_lookup_missing() -> None:
    data = {"a": [{"b": 1}]}
    assert engine_data.lookup(data, "a", 0, "b") == 1
    assert engine_data.lookup(data, "a", 3, "b", default=0) == 0
    assert engine_data.lookup(data, "a", 0, "b", "c") is None
