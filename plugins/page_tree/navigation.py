"""
Navigation pane derived from the content tree.

The navigation tree mirrors the content tree with two restrictions: members
of classlike pages are left out (except the entries of an enum), and every
level is ordered by case-insensitive name.
"""

import json
import logging
from dataclasses import asdict, dataclass
from typing import Iterable, List, Tuple

from plugins.page_tree.pages import (
    ContentPage,
    DocumentableKind,
    LocationResolvableWrite,
    LocationResolver,
    NavigationNode,
    NavigationPage,
    PageTreeAssemblyError,
    RendererSpecificResourcePage,
    RootPageNode,
)

log = logging.getLogger("mkdocs.plugins.page_tree")

NAVIGATION_PANE = "scripts/navigation-pane.json"


@dataclass(frozen=True)
class NavigationNodeView:
    """One entry of ``navigation-pane.json``."""

    name: str
    label: str
    searchKey: str
    dri: str
    location: str

    @classmethod
    def from_node(cls, node: NavigationNode, location: str) -> "NavigationNodeView":
        return cls(
            name=node.name,
            label=node.label,
            searchKey=node.search_key,
            dri=str(node.dri),
            location=location,
        )


def serialize_navigation(root: NavigationNode, resolver: LocationResolver) -> str:
    """Flatten ``root`` in pre-order and serialize it to a JSON array.

    ``resolver`` is called exactly once per node, in flattening order, and any
    error it raises propagates.
    """
    views = [
        NavigationNodeView.from_node(node, resolver(node.dri, node.source_sets))
        for node in root.with_descendants()
    ]
    return json.dumps([asdict(view) for view in views], ensure_ascii=False)


class NavigationPageInstaller:
    """Build the navigation tree and add it (and its JSON artifact) to the root."""

    def __call__(self, root: RootPageNode) -> RootPageNode:
        nodes, pane = self.build(root)
        log.debug(f"[page_tree] navigation tree has {sum(1 for _ in nodes.with_descendants())} nodes")
        return root.modified(children=root.children + (pane, NavigationPage(nodes)))

    def build(self, root: RootPageNode) -> Tuple[NavigationNode, RendererSpecificResourcePage]:
        content = root.content_pages()
        if len(content) != 1:
            raise PageTreeAssemblyError(
                f"Expected exactly one top-level content page, found {len(content)}"
            )

        nodes = self.visit(content[0])
        pane = RendererSpecificResourcePage(
            name=NAVIGATION_PANE,
            strategy=LocationResolvableWrite(lambda resolver: serialize_navigation(nodes, resolver)),
        )
        return nodes, pane

    def visit(self, page: ContentPage) -> NavigationNode:
        return NavigationNode(
            name=page.name,
            dri=page.dri[0],
            source_sets=page.source_sets,
            children=tuple(self._sorted(self.visit(child) for child in navigable_children(page))),
        )

    @staticmethod
    def _sorted(nodes: Iterable[NavigationNode]) -> List[NavigationNode]:
        # sorted() is stable, so equal names keep their input order
        return sorted(nodes, key=lambda node: node.name.lower())


def navigable_children(page: ContentPage) -> Tuple[ContentPage, ...]:
    """Children of ``page`` that appear in the navigation tree."""
    if not page.is_classlike:
        return page.children
    if page.documentable is DocumentableKind.ENUM:
        return tuple(c for c in page.children if c.documentable is DocumentableKind.ENUM_ENTRY)
    return ()
