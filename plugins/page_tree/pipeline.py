import logging
from typing import Callable, List, Mapping, Sequence

from plugins.page_tree.installers import (
    AssetsInstaller,
    CustomResource,
    CustomResourceInstaller,
    ScriptsInstaller,
    SourcesetDependencyAppender,
    StylesInstaller,
)
from plugins.page_tree.navigation import NavigationPageInstaller
from plugins.page_tree.pages import RootPageNode

log = logging.getLogger("mkdocs.plugins.page_tree")

# A pure function from one whole page tree to another.
PageTransformer = Callable[[RootPageNode], RootPageNode]


def default_transformers(
    source_sets: Mapping[str, Sequence[str]],
    custom_assets: Sequence[CustomResource] = (),
    custom_style_sheets: Sequence[CustomResource] = (),
) -> List[PageTransformer]:
    """The transformers of a build, in the order they must run.

    Navigation comes first so it only sees content pages. The custom resource
    installer runs after the built-in ones so it can replace them.
    """
    return [
        NavigationPageInstaller(),
        ScriptsInstaller(),
        StylesInstaller(),
        AssetsInstaller(),
        CustomResourceInstaller(custom_assets, custom_style_sheets),
        SourcesetDependencyAppender(source_sets),
    ]


def apply_transformers(root: RootPageNode, transformers: Sequence[PageTransformer]) -> RootPageNode:
    for transformer in transformers:
        root = transformer(root)
        log.debug(f"[page_tree] applied {type(transformer).__name__}: {len(root.children)} root children")
    return root
