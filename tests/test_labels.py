from cadexchange.document import ArenaDocument, ColorChannel, rgb_to_hex
from cadexchange.kernel import native
from cadexchange.labels import (
    is_free_shape,
    is_mesh_node,
    label_color,
    label_name,
    shape_color,
    shape_name,
)


def _edge(x=1.0):
    return native.make_segment((0, 0, 0), (x, 0, 0))


def test_rgb_to_hex():
    assert rgb_to_hex(1.0, 0.0, 0.5) == "#FF0080"
    assert rgb_to_hex(0.0, 0.0, 0.0) == "#000000"
    assert rgb_to_hex(1.2, -0.1, 1.0) == "#FF00FF"


def test_label_without_children_is_mesh_node():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge())
    assert is_mesh_node(doc, part)


def test_label_with_sub_shape_children_is_mesh_node():
    doc = ArenaDocument(native)
    face = native.make_polygon_face([(0, 0), (1, 0), (1, 1)])
    part = doc.add_shape(face, name="plate")
    doc.add_sub_shape(face.boundary.edges[0], parent=part, name="edge")
    # a free child next to a sub-shape does not make it an assembly
    doc.add_shape(_edge(), parent=part)
    assert is_mesh_node(doc, part)


def test_label_with_free_children_is_assembly():
    doc = ArenaDocument(native)
    assembly = doc.add_shape(None, name="asm")
    doc.add_shape(_edge(), parent=assembly)
    assert not is_mesh_node(doc, assembly)


def test_label_whose_children_are_not_free_is_mesh_node():
    doc = ArenaDocument(native)
    holder = doc.add_shape(None, name="holder")
    doc.add_shape(None, parent=holder, name="empty")
    assert is_mesh_node(doc, holder)


def test_referenced_label_is_not_free():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge(), name="bolt")
    assert is_free_shape(doc, part)
    assembly = doc.add_shape(None, name="asm")
    instance = doc.add_reference(part, parent=assembly)
    assert not is_free_shape(doc, part)
    assert is_free_shape(doc, instance)
    assert not is_free_shape(doc, assembly)


def test_references_resolve_to_same_name_and_color():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge(), name="bolt", color="#FF0000")
    assembly = doc.add_shape(None, name="asm")
    first = doc.add_reference(part, parent=assembly)
    second = doc.add_reference(part, parent=assembly)
    assert label_name(doc, first) == label_name(doc, second) == "bolt"
    assert label_color(doc, first) == label_color(doc, second) == "#FF0000"


def test_own_attributes_win_over_referred_ones():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge(), name="bolt", color="#FF0000")
    instance = doc.add_reference(part, parent=doc.root(), name="bolt-1", color="#00FF00")
    assert label_name(doc, instance) == "bolt-1"
    assert label_color(doc, instance) == "#00FF00"


def test_reference_chain_is_followed():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge(), name="pin", color="#123456")
    middle = doc.add_reference(part, parent=doc.root())
    outer = doc.add_reference(middle, parent=doc.root())
    assert label_name(doc, outer) == "pin"
    assert label_color(doc, outer) == "#123456"


def test_color_channel_priority():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge())
    doc.set_color(part, "#0000FF", ColorChannel.GENERIC)
    assert label_color(doc, part) == "#0000FF"
    doc.set_color(part, "#00FF00", ColorChannel.CURVE)
    assert label_color(doc, part) == "#00FF00"
    doc.set_color(part, "#FF0000", ColorChannel.SURFACE)
    assert label_color(doc, part) == "#FF0000"
    doc.set_color(part, None, ColorChannel.SURFACE)
    assert label_color(doc, part) == "#00FF00"


def test_missing_attributes_are_absent():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge())
    assert label_name(doc, part) == ""
    assert label_color(doc, part) is None


def test_reference_cycle_resolves_to_absent():
    doc = ArenaDocument(native)
    part = doc.add_shape(_edge())
    first = doc.add_reference(part, parent=doc.root())
    second = doc.add_reference(first, parent=doc.root())
    doc.retarget(first, second)
    assert label_name(doc, first) == ""
    assert label_color(doc, second) is None


def test_shape_lookup_uses_owning_label():
    doc = ArenaDocument(native)
    edge = _edge()
    doc.add_shape(edge, name="rail", color="#ABCDEF")
    assert shape_name(doc, edge) == "rail"
    assert shape_color(doc, edge) == "#ABCDEF"
    stranger = _edge(2.0)
    assert shape_name(doc, stranger) == ""
    assert shape_color(doc, stranger) is None
