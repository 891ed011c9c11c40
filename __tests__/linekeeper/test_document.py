"""Tests for the Document arena and Node snapshots."""
import pytest
from pydantic import ValidationError
from linekeeper import (
    Document,
    DocumentError,
    IndexPath,
    Mark,
    Node,
    NodeNotFoundError,
    Options,
    deserialize_code,
    text_to_lines,
)


def line(text: str) -> Node:
    return Node.block("code_line", [Node.text_leaf(text)])


def container(*nodes: Node) -> Node:
    return Node.block("code_block", list(nodes))


class TestArena:

    def test_keys_are_allocated_on_insert(self):
        doc = Document([container(line("a"))])

        keys = list(doc.iter_keys())

        assert len(keys) == len(set(keys)) == 4
        assert keys[0] == doc.root_key
        assert all(node.key is not None for node in doc.root.iter_depth_first())

    def test_keys_are_monotonic_and_never_reused(self):
        doc = Document([line("a")])
        first = doc.nodes[0].key

        doc.remove_node(first)
        key = doc.insert_node(doc.root_key, 0, line("b"))

        assert key > first
        assert not doc.has_node(first)

    def test_removal_frees_the_subtree(self):
        doc = Document([container(line("a"), line("b"))])
        block = doc.nodes[0]

        parent_key, index, removed = doc.remove_node(block.key)

        assert (parent_key, index) == (doc.root_key, 0)
        assert removed == block
        assert len(doc) == 1
        assert all(not doc.has_node(n.key) for n in block.iter_depth_first())

    def test_unknown_key(self):
        doc = Document()

        with pytest.raises(NodeNotFoundError) as exc_info:
            doc.get_node(42)

        assert exc_info.value.key == 42
        assert isinstance(exc_info.value, KeyError)

    def test_index_of(self):
        doc = Document([line("a"), line("b")])
        a, b = doc.nodes

        assert doc.index_of(doc.root_key, b.key) == 1
        with pytest.raises(DocumentError):
            doc.index_of(a.key, b.key)

    def test_kind_and_marks_without_snapshot(self):
        doc = Document([Node.block("code_line", [Node.text_leaf("a", marks=["bold"])])])
        line_key = doc.child_keys(doc.root_key)[0]
        text_key = doc.child_keys(line_key)[0]

        assert doc.get_kind(doc.root_key) == ("document", None)
        assert doc.get_kind(line_key) == ("block", "code_line")
        assert doc.get_kind(text_key) == ("text", None)
        assert doc.get_marks(text_key) == (Mark(type="bold"),)
        with pytest.raises(NodeNotFoundError):
            doc.get_kind(99)

    def test_cannot_remove_or_move_root(self):
        doc = Document([container()])

        with pytest.raises(DocumentError):
            doc.remove_node(doc.root_key)
        with pytest.raises(DocumentError):
            doc.move_node(doc.root_key, doc.nodes[0].key, 0)

    def test_cannot_insert_into_text(self):
        doc = Document([line("a")])
        text_key = doc.nodes[0].nodes[0].key

        with pytest.raises(DocumentError):
            doc.insert_node(text_key, 0, Node.text_leaf("b"))

    def test_cannot_insert_document(self):
        doc = Document()

        with pytest.raises(DocumentError):
            doc.insert_node(doc.root_key, 0, Node(object="document"))

    def test_deeply_nested_document(self):
        depth = 1500
        node = line("x")
        for _ in range(depth):
            node = Node.block("quote", [node])

        doc = Document([node])
        top = doc.child_keys(doc.root_key)[0]

        assert len(doc) == depth + 3
        snapshot = doc.get_node(top)
        assert snapshot.text == "x"
        assert not snapshot.has_marks()
        assert all(n.key is None for n in snapshot.without_keys().iter_depth_first())
        assert len(doc.debug_tree().splitlines()) == depth + 3

        doc.remove_node(top)
        assert len(doc) == 1


class TestMove:

    def test_move_between_parents(self):
        doc = Document([container(line("a"), line("b")), container()])
        first, second = doc.nodes

        old = doc.move_node(first.nodes[0].key, second.key, 0)

        assert old == (first.key, 0)
        assert [n.text for n in doc.get_node(first.key).nodes] == ["b"]
        assert [n.text for n in doc.get_node(second.key).nodes] == ["a"]
        assert doc.parent_key(first.nodes[0].key) == second.key

    def test_move_within_parent_uses_index_after_detach(self):
        doc = Document([line("a"), line("b"), line("c")])
        a = doc.nodes[0]

        doc.move_node(a.key, doc.root_key, 2)

        assert [n.text for n in doc.nodes] == ["b", "c", "a"]

    def test_move_index_out_of_range(self):
        doc = Document([line("a"), line("b")])

        with pytest.raises(DocumentError):
            doc.move_node(doc.nodes[0].key, doc.root_key, 2)

    def test_cannot_move_into_descendant(self):
        doc = Document([container(line("a"))])
        block = doc.nodes[0]

        with pytest.raises(DocumentError):
            doc.move_node(block.key, block.nodes[0].key, 0)
        with pytest.raises(DocumentError):
            doc.move_node(block.key, block.key, 0)


class TestPaths:

    def test_get_path(self):
        doc = Document([line("a"), container(line("b"), line("c"))])
        c = doc.nodes[1].nodes[1]

        path = doc.get_path(c.key)

        assert path == IndexPath([1, 1])
        assert str(path) == "1.1"
        assert doc.get_path(doc.root_key).is_root
        assert doc.get_by_path("1.1") == c

    def test_paths_follow_document_order(self):
        doc = Document([container(line("a"), line("b")), line("c")])

        paths = [doc.get_path(key) for key in doc.iter_keys()]

        assert paths == sorted(paths)

    def test_path_relations(self):
        path = IndexPath.from_string("0.2.1")

        assert path.parent == IndexPath([0, 2])
        assert path.last == 1
        assert path.depth == 3
        assert IndexPath().parent is None

    def test_missing_path(self):
        doc = Document([line("a")])
        with pytest.raises(DocumentError):
            doc.get_by_path("3")


class TestSerialization:

    def test_dump_and_load_keeps_structure(self):
        text = Node.text_leaf("a", marks=[Mark(type="bold", data={"w": 700})])
        doc = Document([container(Node.block("code_line", [text])), Node.block("paragraph", data={"align": "left"})])

        loaded = Document.model_load(doc.model_dump())

        assert loaded.model_dump() == doc.model_dump()

    def test_load_with_keys_continues_allocation(self):
        doc = Document([line("a")])
        loaded = Document.model_load(doc.model_dump(), keep_keys=True)

        assert loaded.root_key == doc.root_key
        assert loaded.nodes[0].key == doc.nodes[0].key
        new_key = loaded.insert_node(loaded.root_key, 1, line("b"))
        assert new_key > max(doc.iter_keys())

    def test_debug_tree(self):
        doc = Document([container(line("a"))])

        tree = doc.debug_tree()

        assert tree.splitlines()[0].startswith("document#")
        assert "'code_block'" in tree
        assert "text#" in tree and "'a'" in tree


class TestNode:

    def test_nodes_are_immutable(self):
        node = line("a")
        with pytest.raises(ValidationError):
            node.type = "paragraph"

    def test_text_concatenates_descendants(self):
        node = Node.block("quote", [Node.text_leaf("a"), Node.inline("link", [Node.text_leaf("b")]), line("c")])
        assert node.text == "abc"

    def test_without_keys(self):
        doc = Document([container(line("a"))])
        copy = doc.nodes[0].without_keys()

        assert all(n.key is None for n in copy.iter_depth_first())
        assert copy.text == "a"

    def test_marks_from_names(self):
        node = Node.text_leaf("a", marks=["bold", Mark(type="code")])
        assert [m.type for m in node.marks] == ["bold", "code"]
        assert node.has_marks()
        assert not line("a").has_marks()

    def test_dict_round_trip(self):
        node = container(line("a"), Node.text_leaf("x", marks=["bold"]))
        assert Node.from_dict(node.to_dict()) == node


class TestDeserialize:

    def test_single_line(self):
        block = deserialize_code(Options(), "xy")

        assert block.type == "code_block"
        assert [n.type for n in block.nodes] == ["code_line"]
        assert block.nodes[0].text == "xy"

    def test_newlines(self):
        lines = text_to_lines(Options(), "a\nb\r\nc\n")
        assert [n.text for n in lines] == ["a", "b", "c", ""]

    def test_empty_text_gives_one_empty_line(self):
        lines = text_to_lines(Options(), "")

        assert len(lines) == 1
        assert lines[0].text == ""
        assert [n.object for n in lines[0].nodes] == ["text"]

    def test_custom_types_and_no_keys(self):
        lines = text_to_lines(Options(container_type="poem", line_type="verse"), "a")

        assert lines[0].type == "verse"
        assert lines[0].key is None
        assert not lines[0].has_marks()


class TestOptions:

    def test_defaults(self):
        opts = Options()
        assert (opts.container_type, opts.line_type, opts.allow_marks) == ("code_block", "code_line", False)

    def test_read_only(self):
        with pytest.raises(ValidationError):
            Options().allow_marks = True

    def test_types_must_differ(self):
        with pytest.raises(ValidationError):
            Options(container_type="x", line_type="x")

    def test_kind_checks(self):
        opts = Options()
        assert opts.is_line(line("a"))
        assert not opts.is_line(Node.inline("code_line"))
