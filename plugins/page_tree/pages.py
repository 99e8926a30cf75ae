"""
Page tree model shared by the page_tree transformers.

A build produces one ``RootPageNode`` whose children are content pages,
resource pages and (once navigation has been installed) a navigation page.
Nodes are frozen dataclasses: every transformation returns a new root and
shares unchanged subtrees with its input.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Iterator, Optional, Tuple, Union


class PageTreeAssemblyError(ValueError):
    """The tree handed to a transformer does not have the expected shape."""


@dataclass(frozen=True)
class DRI:
    """Documentable reference identifier: a stable key naming one symbol."""

    package_name: Optional[str] = None
    class_names: Optional[str] = None
    callable_name: Optional[str] = None
    extra: Optional[str] = None

    def __str__(self) -> str:
        parts = (self.package_name, self.class_names, self.callable_name, self.extra)
        return "/".join(part or "" for part in parts)

    @classmethod
    def parse(cls, text: str) -> "DRI":
        """Inverse of ``str(dri)``. A string without ``/`` is a package name."""
        text = text.strip()
        if "/" not in text:
            return cls(package_name=text or None)
        parts = text.split("/", 3)
        parts += [""] * (4 - len(parts))
        return cls(*(part or None for part in parts))


class DocumentableKind(str, Enum):
    PACKAGE = "package"
    MODULE = "module"
    CLASS = "class"
    INTERFACE = "interface"
    OBJECT = "object"
    ENUM = "enum"
    ENUM_ENTRY = "enum_entry"
    ANNOTATION = "annotation"
    FUNCTION = "function"
    PROPERTY = "property"
    TYPE_ALIAS = "type_alias"


CLASSLIKE_KINDS: FrozenSet[DocumentableKind] = frozenset(
    {
        DocumentableKind.CLASS,
        DocumentableKind.INTERFACE,
        DocumentableKind.OBJECT,
        DocumentableKind.ENUM,
        DocumentableKind.ENUM_ENTRY,
        DocumentableKind.ANNOTATION,
    }
)


# -------------------------------
# Rendering strategies
# -------------------------------

# (dri, source_sets) -> location of the page documenting ``dri``
LocationResolver = Callable[[DRI, FrozenSet[str]], str]


@dataclass(frozen=True)
class Copy:
    """Copy the file at ``source`` to the resource's output path."""

    source: str


@dataclass(frozen=True)
class Write:
    """Write ``text`` verbatim to the resource's output path."""

    text: str


@dataclass(frozen=True)
class LocationResolvableWrite:
    """Write text that can only be computed once locations are known.

    The renderer calls ``contents`` with its location resolver, once.
    """

    contents: Callable[[LocationResolver], str]


RenderingStrategy = Union[Copy, Write, LocationResolvableWrite]


# -------------------------------
# Nodes
# -------------------------------


def union_resources(existing: Tuple[str, ...], added: Iterable[str]) -> Tuple[str, ...]:
    """Ordered, duplicate-free union of embedded resource names."""
    seen = set(existing)
    result = list(existing)
    for name in added:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return tuple(result)


@dataclass(frozen=True)
class ContentPage:
    """One documentation page."""

    name: str
    dri: Tuple[DRI, ...]
    source_sets: FrozenSet[str] = frozenset()
    children: Tuple["ContentPage", ...] = ()
    embedded_resources: Tuple[str, ...] = ()
    documentable: Optional[DocumentableKind] = None

    def __post_init__(self):
        if not self.dri:
            raise PageTreeAssemblyError(f"Content page {self.name!r} has no DRI")

    @property
    def is_classlike(self) -> bool:
        return self.documentable in CLASSLIKE_KINDS

    def modified(self, **changes) -> "ContentPage":
        return dataclasses.replace(self, **changes)

    def with_embedded_resources(self, names: Iterable[str]) -> "ContentPage":
        return self.modified(embedded_resources=union_resources(self.embedded_resources, names))


@dataclass(frozen=True)
class RendererSpecificResourcePage:
    """A non-content artifact (script, stylesheet, image, data file)."""

    name: str
    strategy: RenderingStrategy
    children: Tuple = ()


@dataclass(frozen=True)
class NavigationNode:
    name: str
    dri: DRI
    source_sets: FrozenSet[str] = frozenset()
    children: Tuple["NavigationNode", ...] = ()
    label: Optional[str] = None
    search_key: Optional[str] = None

    def __post_init__(self):
        # label and search key fall back to the name
        if self.label is None:
            object.__setattr__(self, "label", self.name)
        if self.search_key is None:
            object.__setattr__(self, "search_key", self.name)

    def with_descendants(self) -> Iterator["NavigationNode"]:
        """Pre-order traversal, yielding self first."""
        yield self
        for child in self.children:
            yield from child.with_descendants()


@dataclass(frozen=True)
class NavigationPage:
    """Carries the navigation tree in the page tree for templates."""

    root: NavigationNode
    name: str = "navigation"
    children: Tuple = ()


PageNode = Union[ContentPage, RendererSpecificResourcePage, NavigationPage]


@dataclass(frozen=True)
class RootPageNode:
    children: Tuple[PageNode, ...] = ()
    name: str = ""

    def modified(self, children: Iterable[PageNode]) -> "RootPageNode":
        return dataclasses.replace(self, children=tuple(children))

    def content_pages(self) -> Tuple[ContentPage, ...]:
        return tuple(c for c in self.children if isinstance(c, ContentPage))

    def resource_pages(self) -> Tuple[RendererSpecificResourcePage, ...]:
        return tuple(c for c in self.children if isinstance(c, RendererSpecificResourcePage))

    def transform_content_pages_tree(
        self, transform: Callable[[ContentPage], ContentPage]
    ) -> "RootPageNode":
        """Apply ``transform`` to every content page, bottom-up.

        Resource and navigation pages are kept as they are.
        """

        def visit(page: ContentPage) -> ContentPage:
            children = tuple(visit(child) for child in page.children)
            if any(new is not old for new, old in zip(children, page.children)):
                page = page.modified(children=children)
            return transform(page)

        return self.modified(
            visit(child) if isinstance(child, ContentPage) else child
            for child in self.children
        )

    def walk_content_pages(self) -> Iterator[ContentPage]:
        """Pre-order traversal over every content page in the tree."""

        def visit(page: ContentPage) -> Iterator[ContentPage]:
            yield page
            for child in page.children:
                yield from visit(child)

        for child in self.content_pages():
            yield from visit(child)
