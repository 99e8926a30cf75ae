"""
Transformers that add shared resources to the page tree.

Each installer appends resource pages to the root and, for scripts and
styles, records on every content page that it embeds them. The catalog
installers and the dependency appender are not idempotent: running one twice
appends its resource pages twice. The custom installer drops root resources
sharing a custom name first, so a second run replaces its own pages.
"""

import logging
from typing import Dict, Iterable, List, Mapping, NamedTuple, Sequence, Tuple, Union

from plugins.page_tree.pages import (
    Copy,
    RendererSpecificResourcePage,
    RootPageNode,
    Write,
)

log = logging.getLogger("mkdocs.plugins.page_tree")

# Prefix of bundled resource sources; the renderer maps it onto its resources directory.
BUNDLED_ROOT = "/page_tree"

SCRIPTS: Tuple[str, ...] = (
    "scripts/clipboard.js",
    "scripts/navigation-loader.js",
    "scripts/platform-content-handler.js",
    "scripts/main.js",
)

STYLES: Tuple[str, ...] = (
    "styles/style.css",
    "styles/logo-styles.css",
    "styles/jetbrains-mono.css",
    "styles/main.css",
)

IMAGES: Tuple[str, ...] = (
    "images/arrow_down.svg",
    "images/docs_logo.svg",
    "images/logo-icon.svg",
)

SOURCESET_DEPENDENCIES = "scripts/sourceset_dependencies.js"


def bundled_resource_pages(names: Iterable[str]) -> List[RendererSpecificResourcePage]:
    return [RendererSpecificResourcePage(name, Copy(f"{BUNDLED_ROOT}/{name}")) for name in names]


class ResourceInstaller:
    """Append a fixed catalog of bundled resources to the root.

    With ``embed`` set, every content page is also marked as embedding them.
    """

    resources: Tuple[str, ...] = ()
    embed: bool = True

    def __call__(self, root: RootPageNode) -> RootPageNode:
        root = root.modified(children=root.children + tuple(bundled_resource_pages(self.resources)))
        log.debug(f"[page_tree] {type(self).__name__} added {len(self.resources)} resources")
        if not self.embed:
            return root
        return root.transform_content_pages_tree(
            lambda page: page.with_embedded_resources(self.resources)
        )


class ScriptsInstaller(ResourceInstaller):
    resources = SCRIPTS


class StylesInstaller(ResourceInstaller):
    resources = STYLES


class AssetsInstaller(ResourceInstaller):
    resources = IMAGES
    embed = False


class CustomResource(NamedTuple):
    """A user supplied file: its output file name and absolute source path."""

    name: str
    path: str


class CustomResourceInstaller:
    """Add user assets and stylesheets, replacing built-ins of the same name."""

    def __init__(
        self,
        custom_assets: Sequence[CustomResource] = (),
        custom_style_sheets: Sequence[CustomResource] = (),
    ):
        self.custom_assets = tuple(
            RendererSpecificResourcePage(f"images/{res.name}", Copy(res.path)) for res in custom_assets
        )
        self.custom_style_sheets = tuple(
            RendererSpecificResourcePage(f"styles/{res.name}", Copy(res.path))
            for res in custom_style_sheets
        )

    def __call__(self, root: RootPageNode) -> RootPageNode:
        custom = self.custom_assets + self.custom_style_sheets
        custom_names = [page.name for page in custom]
        overridden = set(custom_names)

        with_resources = root.transform_content_pages_tree(
            lambda page: page.with_embedded_resources(custom_names)
        )

        current_resources = []
        other_pages = []
        for child in with_resources.children:
            if isinstance(child, RendererSpecificResourcePage):
                current_resources.append(child)
            else:
                other_pages.append(child)

        kept = [page for page in current_resources if page.name not in overridden]
        if len(kept) != len(current_resources):
            log.debug(
                f"[page_tree] custom resources override {len(current_resources) - len(kept)} built-in resources"
            )
        return root.modified(children=other_pages + kept + list(custom))


def source_set_graph(dependencies: Mapping[str, Union[str, Sequence[str]]]) -> Dict[str, Tuple[str, ...]]:
    """Normalize a source-set dependency mapping to id -> tuple of ids.

    A single id given as a plain string counts as a one-element list.
    """
    graph = {}
    for key, deps in dependencies.items():
        if deps is None:
            deps = ()
        elif isinstance(deps, str):
            deps = (deps,)
        elif not isinstance(deps, (list, tuple)) or not all(isinstance(dep, str) for dep in deps):
            raise TypeError(f"dependencies of source set '{key}' must be a list of ids, got {deps!r}")
        graph[str(key)] = tuple(deps)
    return graph


def sourceset_dependencies_script(dependencies: Mapping[str, Sequence[str]]) -> str:
    """Render the source-set dependency graph as a JavaScript assignment.

    The object is assembled by hand in mapping order and is not escaped.
    """
    entries = ", ".join(
        '"{}": [{}]'.format(key, ",".join(f'"{dep}"' for dep in deps))
        for key, deps in dependencies.items()
    )
    return "sourceset_dependencies = '{" + entries + "}'"


class SourcesetDependencyAppender:
    """Publish the source-set dependency graph for the client scripts."""

    name = SOURCESET_DEPENDENCIES

    def __init__(self, dependencies: Mapping[str, Union[str, Sequence[str]]]):
        self.dependencies = source_set_graph(dependencies)

    def __call__(self, root: RootPageNode) -> RootPageNode:
        page = RendererSpecificResourcePage(
            name=self.name,
            strategy=Write(sourceset_dependencies_script(self.dependencies)),
        )
        return root.modified(children=root.children + (page,)).transform_content_pages_tree(
            lambda content: content.with_embedded_resources([self.name])
        )
