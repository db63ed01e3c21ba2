import pytest

from cadexchange.dxf import DxfFieldError, decode_dxf, iter_group_pairs, parse_entities


def _dxf(*pairs):
    return "".join(f"{code}\n{value}\n" for code, value in pairs)


def test_line_example_parses_to_single_entity():
    text = "0\nLINE\n 8\n0\n 10\n0.0\n 20\n0.0\n 11\n5.0\n 21\n0.0\n"
    entities = parse_entities(text)
    assert len(entities) == 1
    line = entities[0]
    assert line.type == "LINE"
    assert line.layer == "0"
    assert line.group_codes == {10: "0.0", 20: "0.0", 11: "5.0", 21: "0.0"}
    assert line.color is None


def test_code_zero_always_starts_new_entity():
    entities = parse_entities(_dxf((0, "LINE"), (0, "CIRCLE"), (0, "ARC")))
    assert [e.type for e in entities] == ["LINE", "CIRCLE", "ARC"]
    assert all(not e.group_codes for e in entities)


def test_layer_applies_to_entities_closed_afterwards():
    text = _dxf(
        (0, "LINE"),
        (0, "CIRCLE"),
        (8, "Walls"),
        (0, "ARC"),
        (0, "POINT"),
    )
    layers = [(e.type, e.layer) for e in parse_entities(text)]
    assert layers == [
        ("LINE", "0"),
        ("CIRCLE", "Walls"),
        ("ARC", "Walls"),
        ("POINT", "Walls"),
    ]


def test_layer_code_before_first_entity_is_ignored():
    entities = parse_entities(_dxf((8, "Ignored"), (0, "LINE")))
    assert entities[0].layer == "0"


def test_color_is_kept_out_of_group_codes():
    entities = parse_entities(_dxf((0, "LINE"), (62, "1"), (10, "2.5")))
    assert entities[0].color == "1"
    assert 62 not in entities[0].group_codes
    assert entities[0].group_codes[10] == "2.5"


def test_last_value_wins_but_tags_keep_every_value():
    entity = parse_entities(_dxf((0, "LWPOLYLINE"), (10, "1"), (10, "2"), (10, "3")))[0]
    assert entity.group_codes[10] == "3"
    assert entity.values(10) == ["1", "2", "3"]


def test_values_are_trimmed():
    entity = parse_entities("  0  \n  LINE  \n  10\n   4.25   \n")[0]
    assert entity.type == "LINE"
    assert entity.group_codes[10] == "4.25"


def test_blank_lines_between_records_are_skipped():
    entities = parse_entities("\n0\nLINE\n\n\n10\n1.0\n\n0\nCIRCLE\n")
    assert [e.type for e in entities] == ["LINE", "CIRCLE"]
    assert entities[0].group_codes == {10: "1.0"}


def test_empty_value_line_is_kept():
    entities = parse_entities("0\nTEXT\n1\n\n0\nLINE\n")
    assert [e.type for e in entities] == ["TEXT", "LINE"]
    assert entities[0].group_codes == {1: ""}


def test_non_integer_code_line_is_skipped():
    pairs = list(iter_group_pairs(["0", "LINE", "garbage", "10", "1.5"]))
    assert pairs == [(0, "LINE"), (10, "1.5")]


def test_dangling_code_at_end_is_dropped():
    assert list(iter_group_pairs(["0", "LINE", "10"])) == [(0, "LINE")]


def test_float_field_errors_are_value_errors():
    entity = parse_entities(_dxf((0, "LINE"), (10, "abc")))[0]
    with pytest.raises(DxfFieldError) as excinfo:
        entity.float_field(10)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.code == 10
    with pytest.raises(DxfFieldError):
        entity.float_field(20)


def test_non_finite_numbers_are_rejected():
    entity = parse_entities(_dxf((0, "CIRCLE"), (40, "nan")))[0]
    with pytest.raises(DxfFieldError):
        entity.float_field(40)


def test_int_field_accepts_real_notation():
    entity = parse_entities(_dxf((0, "LWPOLYLINE"), (70, "1.0")))[0]
    assert entity.int_field(70) == 1
    assert entity.int_field(90, default=7) == 7


def test_decode_rejects_binary_dxf():
    assert decode_dxf(b"AutoCAD Binary DXF\r\n\x1a\x00rest") is None


def test_decode_falls_back_to_cp1252():
    text = decode_dxf(b"0\nTEXT\n1\ncaf\xe9\n")
    assert parse_entities(text)[0].group_codes[1] == "café"


def test_decode_strips_byte_order_mark():
    text = decode_dxf(b"\xef\xbb\xbf0\nLINE\n")
    assert parse_entities(text)[0].type == "LINE"


def test_decode_reads_bytes_without_cp1252_mapping():
    text = decode_dxf(b"0\nTEXT\n1\nbad\x81byte\n")
    assert parse_entities(text)[0].group_codes[1] == "bad\x81byte"


def test_decode_accepts_memoryview():
    text = decode_dxf(memoryview(b"0\nLINE\n"))
    assert parse_entities(text)[0].type == "LINE"
    assert decode_dxf(memoryview(b"AutoCAD Binary DXF\r\n\x1a\x00")) is None
