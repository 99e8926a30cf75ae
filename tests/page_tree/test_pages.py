"""
Tests for the page tree model and its modification primitives.
"""

import pytest

from plugins.page_tree.pages import (
    DRI,
    ContentPage,
    Copy,
    DocumentableKind,
    NavigationNode,
    PageTreeAssemblyError,
    RendererSpecificResourcePage,
    RootPageNode,
    union_resources,
)


def page(name, *children, kind=None, resources=()):
    return ContentPage(
        name=name,
        dri=(DRI(package_name="sample", class_names=name),),
        children=tuple(children),
        embedded_resources=tuple(resources),
        documentable=kind,
    )


class TestDRI:
    def test_string_form(self):
        """Absent parts render as empty segments."""
        dri = DRI(package_name="com.example", class_names="Color", callable_name="name")
        assert str(dri) == "com.example/Color/name/"
        assert str(DRI()) == "///"

    def test_parse_inverts_string_form(self):
        """Test: Parsing the string form gives back the same DRI."""
        dri = DRI(package_name="com.example", class_names="Color.RED", extra="entry")
        assert DRI.parse(str(dri)) == dri

    def test_parse_bare_package(self):
        assert DRI.parse(" com.example ") == DRI(package_name="com.example")

    def test_parse_short_form_pads_missing_parts(self):
        """Test: Missing trailing parts parse as absent."""
        assert DRI.parse("com.example/Color") == DRI(package_name="com.example", class_names="Color")


class TestContentPage:
    def test_requires_a_dri(self):
        """Test: A content page without a DRI is rejected."""
        with pytest.raises(PageTreeAssemblyError):
            ContentPage(name="empty", dri=())

    def test_classlike_kinds(self):
        """Test: Only classlike kinds report is_classlike."""
        assert page("Color", kind=DocumentableKind.ENUM).is_classlike
        assert page("RED", kind=DocumentableKind.ENUM_ENTRY).is_classlike
        assert not page("sample", kind=DocumentableKind.PACKAGE).is_classlike
        assert not page("run", kind=DocumentableKind.FUNCTION).is_classlike
        assert not page("group").is_classlike

    def test_embedded_resources_union_keeps_order(self):
        """Test: Embedded resources merge in order without duplicates."""
        original = page("a", resources=["styles/a.css", "scripts/a.js"])
        updated = original.with_embedded_resources(["scripts/a.js", "scripts/b.js"])
        assert updated.embedded_resources == ("styles/a.css", "scripts/a.js", "scripts/b.js")
        # the original page is untouched
        assert original.embedded_resources == ("styles/a.css", "scripts/a.js")

    def test_union_resources_of_empty(self):
        assert union_resources((), ["x", "x", "y"]) == ("x", "y")


class TestRootPageNode:
    def setup_method(self):
        self.leaf = page("leaf")
        self.untouched = page("untouched")
        self.resource = RendererSpecificResourcePage("scripts/x.js", Copy("/x.js"))
        self.root = RootPageNode(
            children=(page("module", page("pkg", self.leaf), self.untouched), self.resource)
        )

    def test_transform_visits_every_content_page(self):
        """Test: The transform reaches every content page in pre-order."""
        transformed = self.root.transform_content_pages_tree(
            lambda p: p.with_embedded_resources(["scripts/x.js"])
        )
        pages = list(transformed.walk_content_pages())
        assert [p.name for p in pages] == ["module", "pkg", "leaf", "untouched"]
        assert all(p.embedded_resources == ("scripts/x.js",) for p in pages)

    def test_transform_keeps_resource_pages_and_input(self):
        transformed = self.root.transform_content_pages_tree(lambda p: p.modified(name=p.name.upper()))
        assert transformed.children[1] is self.resource
        assert [p.name for p in self.root.walk_content_pages()] == ["module", "pkg", "leaf", "untouched"]

    def test_identity_transform_shares_subtrees(self):
        """Test: An identity transform returns the same subtree objects."""
        transformed = self.root.transform_content_pages_tree(lambda p: p)
        assert transformed.children[0] is self.root.children[0]

    def test_partial_transform_shares_unchanged_branches(self):
        """Test: Unchanged branches are shared with the input tree."""
        transformed = self.root.transform_content_pages_tree(
            lambda p: p.modified(name="LEAF") if p is self.leaf else p
        )
        module = transformed.children[0]
        assert module.children[0].children[0].name == "LEAF"
        assert module.children[1] is self.untouched

    def test_partitions_children(self):
        assert self.root.content_pages() == (self.root.children[0],)
        assert self.root.resource_pages() == (self.resource,)


class TestNavigationNode:
    def test_with_descendants_is_pre_order(self):
        """Test: Descendants are yielded root first, depth first."""
        dri = DRI(package_name="p")
        tree = NavigationNode(
            "root",
            dri,
            children=(
                NavigationNode("a", dri, children=(NavigationNode("a1", dri),)),
                NavigationNode("b", dri),
            ),
        )
        assert [n.name for n in tree.with_descendants()] == ["root", "a", "a1", "b"]

    def test_label_and_search_key_default_to_name(self):
        """Test: Label and search key fall back to the node name."""
        node = NavigationNode("Color", DRI(package_name="p"))
        assert node.label == "Color"
        assert node.search_key == "Color"

    def test_explicit_label_and_search_key(self):
        node = NavigationNode("Color", DRI(package_name="p"), label="enum Color", search_key="color")
        assert (node.name, node.label, node.search_key) == ("Color", "enum Color", "color")
