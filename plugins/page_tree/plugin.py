"""
An MkDocs plugin that runs the page tree transformers over the site navigation.

The navigation becomes a tree of content pages (front matter keys ``dri``,
``kind`` and ``source_sets`` describe the documented symbol), the transformers
derive the navigation pane and install shared resources, and the resulting
resource pages are written into ``site_dir`` after the build.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup
from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.exceptions import PluginError
from mkdocs.plugins import BasePlugin
from mkdocs.structure.nav import Navigation
from mkdocs.structure.pages import Page
from mkdocs.utils import get_relative_url

from plugins.page_tree.installers import BUNDLED_ROOT, CustomResource, source_set_graph
from plugins.page_tree.pages import (
    DRI,
    ContentPage,
    Copy,
    DocumentableKind,
    LocationResolvableWrite,
    NavigationNode,
    NavigationPage,
    PageTreeAssemblyError,
    RendererSpecificResourcePage,
    RootPageNode,
    Write,
)
from plugins.page_tree.pipeline import apply_transformers, default_transformers

log = logging.getLogger("mkdocs.plugins.page_tree")

RESOURCES_DIR = Path(__file__).parent / "resources"


class UnresolvedLocationError(LookupError):
    """No page of the site documents the requested DRI."""


class PageTreePlugin(BasePlugin):
    """MkDocs plugin exposing the page tree pipeline.

    Configuration options (all optional):
    - custom_assets (list): image files copied to ``images/<name>``.
    - custom_style_sheets (list): stylesheets copied to ``styles/<name>``; they
      replace bundled stylesheets with the same name.
    - source_sets (dict): source-set id -> ids it depends on.
    - default_source_sets (list): source sets of pages that declare none.
    - resources_dir (str): directory holding the bundled scripts, styles and images.
    - embed_resources (bool): add ``<script>``/``<link>`` tags for embedded resources.
    """

    config_scheme = (
        ("custom_assets", c.Type(list, default=[])),
        ("custom_style_sheets", c.Type(list, default=[])),
        ("source_sets", c.Type(dict, default={})),
        ("default_source_sets", c.Type(list, default=[])),
        ("resources_dir", c.Optional(c.Type(str))),
        ("embed_resources", c.Type(bool, default=True)),
    )

    def __init__(self):
        super().__init__()
        self.custom_assets: List[CustomResource] = []
        self.custom_style_sheets: List[CustomResource] = []
        self.resources_dir = RESOURCES_DIR
        self.source_sets: Dict[str, Tuple[str, ...]] = {}
        self.root: Optional[RootPageNode] = None
        self.navigation: Optional[NavigationNode] = None
        self._nav: Optional[Navigation] = None
        # dri -> page url, filled while assembling the tree
        self._locations: Dict[DRI, str] = {}
        # page url -> dri of the content page built from it
        self._page_dris: Dict[str, DRI] = {}
        self._resources_by_dri: Dict[DRI, Tuple[str, ...]] = {}

    # -------------------------------
    # Configuration
    # -------------------------------

    def on_config(self, config: MkDocsConfig, **kwargs):
        config_file = config.get("config_file_path")
        base_dir = Path(config_file).resolve().parent if config_file else Path.cwd()

        try:
            self.source_sets = source_set_graph(self.config["source_sets"])
        except TypeError as e:
            raise PluginError(f"[page_tree] invalid 'source_sets': {e}") from e
        self.custom_assets = [self._custom_resource(p, base_dir) for p in self.config["custom_assets"]]
        self.custom_style_sheets = [
            self._custom_resource(p, base_dir) for p in self.config["custom_style_sheets"]
        ]
        if self.config["resources_dir"]:
            self.resources_dir = (base_dir / self.config["resources_dir"]).resolve()
        log.debug(
            f"[page_tree] {len(self.custom_assets)} custom assets, "
            f"{len(self.custom_style_sheets)} custom stylesheets, resources from {self.resources_dir}"
        )
        return config

    @staticmethod
    def _custom_resource(path: str, base_dir: Path) -> CustomResource:
        resolved = (base_dir / path).resolve()
        return CustomResource(name=resolved.name, path=str(resolved))

    def default_source_sets(self) -> FrozenSet[str]:
        return frozenset(self.config["default_source_sets"] or self.source_sets.keys())

    # -------------------------------
    # Tree assembly
    # -------------------------------

    def assemble_tree(self, nav: Navigation, site_name: str) -> RootPageNode:
        """Turn the MkDocs navigation into a root holding one content page."""
        self._locations = {}
        self._page_dris = {}
        module = self._section_page(site_name, nav.items, ())
        if module is None:
            raise PageTreeAssemblyError("The site navigation holds no pages")
        return RootPageNode(children=(module,))

    def _section_page(self, name: str, items: Sequence, path: Tuple[str, ...]) -> Optional[ContentPage]:
        """Content page for a nav section, or None when it holds no pages."""
        items = [item for item in items if item.is_page or item.is_section]
        index = items.pop(0) if items and items[0].is_page and items[0].is_index else None
        children = tuple(
            child for child in (self._visit(item, path) for item in items) if child is not None
        )

        if index is not None:
            return self._content_page(index, name=name, children=children)
        if not children:
            log.debug(f"[page_tree] section '{name}' holds no pages; leaving it out")
            return None

        # A section without an index page links to its first page.
        dri = DRI(extra="section:" + ("/".join(path) or "root"))
        self._locations[dri] = self._locations[children[0].dri[0]]
        return ContentPage(name=name, dri=(dri,), source_sets=self.default_source_sets(), children=children)

    def _visit(self, item, path: Tuple[str, ...]) -> Optional[ContentPage]:
        if item.is_section:
            return self._section_page(item.title, item.children, path + (item.title,))
        return self._content_page(item, name=item.title or item.file.name)

    def _content_page(self, page: Page, name: str, children: Tuple[ContentPage, ...] = ()) -> ContentPage:
        meta = page.meta or {}
        if meta.get("dri"):
            dri = DRI.parse(str(meta["dri"]))
        else:
            dri = DRI(package_name=page.file.src_uri.rsplit(".", 1)[0])

        if dri in self._locations:
            log.warning(f"[page_tree] DRI '{dri}' of {page.file.src_uri} is already documented; keeping the last page")
        self._locations[dri] = page.url
        self._page_dris[page.url] = dri

        source_sets = meta.get("source_sets")
        if isinstance(source_sets, str):
            source_sets = [source_sets]

        return ContentPage(
            name=name,
            dri=(dri,),
            source_sets=frozenset(source_sets) if source_sets else self.default_source_sets(),
            children=children,
            documentable=self._documentable_kind(page),
        )

    @staticmethod
    def _documentable_kind(page: Page) -> Optional[DocumentableKind]:
        raw = (page.meta or {}).get("kind")
        if raw is None:
            return None
        try:
            return DocumentableKind(str(raw).strip().lower())
        except ValueError:
            log.warning(f"[page_tree] unknown kind '{raw}' in {page.file.src_uri}; treating it as a plain page")
            return None

    def resolve_location(self, dri: DRI, source_sets: FrozenSet[str]) -> str:
        """Location resolver handed to resolver-driven resources."""
        try:
            return self._locations[dri]
        except KeyError:
            raise UnresolvedLocationError(f"No page documents '{dri}'") from None

    # -------------------------------
    # Hooks
    # -------------------------------

    def on_nav(self, nav: Navigation, config: MkDocsConfig, files):
        self._nav = nav
        return nav

    def on_env(self, env, config: MkDocsConfig, files):
        # Page metadata is only available once every page has been read.
        if self._nav is None:
            return env
        self.run(self.assemble_tree(self._nav, config["site_name"]))
        return env

    def run(self, root: RootPageNode) -> RootPageNode:
        transformers = default_transformers(
            self.source_sets, self.custom_assets, self.custom_style_sheets
        )
        self.root = apply_transformers(root, transformers)
        self.navigation = next(
            child.root for child in self.root.children if isinstance(child, NavigationPage)
        )
        self._resources_by_dri = {
            page.dri[0]: page.embedded_resources for page in self.root.walk_content_pages()
        }
        log.info(
            f"[page_tree] built page tree: {sum(1 for _ in self.root.walk_content_pages())} pages, "
            f"{len(self.root.resource_pages())} resources"
        )
        return self.root

    def embedded_resources(self, page: Page) -> Tuple[str, ...]:
        dri = self._page_dris.get(page.url)
        return self._resources_by_dri.get(dri, ()) if dri is not None else ()

    def on_page_context(self, context, page: Page, config: MkDocsConfig, nav: Navigation):
        context["page_tree_navigation"] = self.navigation
        context["embedded_resources"] = self.embedded_resources(page)
        return context

    def on_post_page(self, output: str, page: Page, config: MkDocsConfig) -> Optional[str]:
        if not self.config["embed_resources"]:
            return output
        resources = [name for name in self.embedded_resources(page) if name.endswith((".css", ".js"))]
        if not resources:
            return output

        soup = BeautifulSoup(output, "html.parser")
        head = soup.head
        if head is None:
            return output

        present = {tag.get("src") for tag in head.find_all("script")}
        present |= {tag.get("href") for tag in head.find_all("link")}
        for name in resources:
            url = get_relative_url(name, page.url)
            if url in present:
                continue
            if name.endswith(".css"):
                head.append(soup.new_tag("link", rel="stylesheet", href=url))
            else:
                head.append(soup.new_tag("script", type="text/javascript", src=url))
        return str(soup)

    def on_post_build(self, config: MkDocsConfig) -> None:
        if self.root is None:
            return
        site_dir = Path(config["site_dir"])
        written = sum(self.render_resource(page, site_dir) for page in self.root.resource_pages())
        log.info(f"[page_tree] wrote {written} resources to {site_dir}")

    # -------------------------------
    # Resource rendering
    # -------------------------------

    def source_path(self, source: str) -> Path:
        if source.startswith(BUNDLED_ROOT + "/"):
            return self.resources_dir / source[len(BUNDLED_ROOT) + 1 :]
        return Path(source)

    def render_resource(self, resource: RendererSpecificResourcePage, site_dir: Path) -> bool:
        """Write one resource page below ``site_dir``. Returns False when skipped."""
        target = site_dir / resource.name
        strategy = resource.strategy

        if isinstance(strategy, Copy):
            source = self.source_path(strategy.source)
            if not source.is_file():
                log.warning(f"[page_tree] source '{source}' for {resource.name} not found; skipping.")
                return False
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        elif isinstance(strategy, Write):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(strategy.text, encoding="utf-8")
        elif isinstance(strategy, LocationResolvableWrite):
            text = strategy.contents(self.resolve_location)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        else:
            raise TypeError(f"Unknown rendering strategy for {resource.name}: {strategy!r}")

        log.debug(f"[page_tree] wrote {resource.name}")
        return True
