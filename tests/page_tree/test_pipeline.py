"""
Tests for the default transformer pipeline.
"""

import json

from plugins.page_tree.installers import (
    AssetsInstaller,
    CustomResource,
    CustomResourceInstaller,
    ScriptsInstaller,
    SourcesetDependencyAppender,
    StylesInstaller,
)
from plugins.page_tree.navigation import NAVIGATION_PANE, NavigationPageInstaller
from plugins.page_tree.pages import (
    DRI,
    ContentPage,
    Copy,
    DocumentableKind,
    NavigationPage,
    RootPageNode,
)
from plugins.page_tree.pipeline import apply_transformers, default_transformers


def page(name, *children, kind=None):
    return ContentPage(
        name=name,
        dri=(DRI(package_name="sample", class_names=name),),
        source_sets=frozenset({"jvm"}),
        children=tuple(children),
        documentable=kind,
    )


class TestPipeline:
    def setup_method(self):
        self.root = RootPageNode(
            children=(
                page(
                    "module",
                    page(
                        "Color",
                        page("RED", kind=DocumentableKind.ENUM_ENTRY),
                        page("name", kind=DocumentableKind.PROPERTY),
                        kind=DocumentableKind.ENUM,
                    ),
                ),
            )
        )

    def test_default_order(self):
        """Test: The default transformers run in the fixed order."""
        transformers = default_transformers({"jvm": []})
        assert [type(t) for t in transformers] == [
            NavigationPageInstaller,
            ScriptsInstaller,
            StylesInstaller,
            AssetsInstaller,
            CustomResourceInstaller,
            SourcesetDependencyAppender,
        ]

    def test_full_run(self):
        """Test: A full run yields navigation, resources and the dependency script."""
        custom = [CustomResource("main.css", "/custom/main.css")]
        result = apply_transformers(
            self.root, default_transformers({"jvm": ["common"]}, custom_style_sheets=custom)
        )

        names = [c.name for c in result.children]
        assert names[:2] == ["module", "navigation"]
        assert names.count("styles/main.css") == 1
        assert names[-1] == "scripts/sourceset_dependencies.js"
        assert NAVIGATION_PANE in names

        main_css = next(r for r in result.resource_pages() if r.name == "styles/main.css")
        assert main_css.strategy == Copy("/custom/main.css")

        navigation = next(c for c in result.children if isinstance(c, NavigationPage))
        assert [n.name for n in navigation.root.with_descendants()] == ["module", "Color", "RED"]

    def test_pane_is_resolved_against_final_tree(self):
        """Test: The pane renders locations through the given resolver."""
        result = apply_transformers(self.root, default_transformers({}))
        pane = next(r for r in result.resource_pages() if r.name == NAVIGATION_PANE)
        entries = json.loads(pane.strategy.contents(lambda dri, source_sets: f"{dri.class_names}/"))
        assert [e["location"] for e in entries] == ["module/", "Color/", "RED/"]

    def test_no_transformers(self):
        """Test: With no transformers the tree is returned as is."""
        assert apply_transformers(self.root, []) is self.root
