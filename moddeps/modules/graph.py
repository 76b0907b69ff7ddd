# moddeps/modules/graph.py
"""
Mod dependency graph.

Turns scanned mod folders into a directed graph:
 - one node per mod with a manifest (id = manifest UniqueID)
 - content packs link to their owner mod, either as a containment link
   (owner -> pack) when grouping content packs, or as a plain dependency
   link (pack -> owner) otherwise
 - one link per required dependency, in manifest order

Links are never deduplicated and may point at mods that aren't installed.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional

from moddeps.modules import logger as _logger
from moddeps.modules.manifest import ModFolder


class GraphNode:
    def __init__(self, id: str, label: str, category: Optional[str] = None):
        self.id = id
        self.label = label
        self.category = category

    def as_tuple(self):
        return (self.id, self.label, self.category)

    def __eq__(self, other):
        if not isinstance(other, GraphNode):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"GraphNode(id={self.id!r}, label={self.label!r}, category={self.category!r})"

    def to_dict(self):
        return {"id": self.id, "label": self.label, "category": self.category}


class GraphLink:
    def __init__(self, source: str, target: str, is_containment: bool = False):
        self.source = source
        self.target = target
        self.is_containment = is_containment

    def as_tuple(self):
        return (self.source, self.target, self.is_containment)

    def __eq__(self, other):
        if not isinstance(other, GraphLink):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        arrow = "=>" if self.is_containment else "->"
        return f"GraphLink({self.source!r} {arrow} {self.target!r})"

    def to_dict(self):
        return {"source": self.source, "target": self.target, "is_containment": self.is_containment}


class DirectedGraph:
    def __init__(self):
        self._nodes: Dict[str, GraphNode] = {}
        self.links: List[GraphLink] = []

    @property
    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def add_node(self, node: GraphNode) -> bool:
        """Add or replace a node. Returns True if a node with that id already existed."""
        replaced = node.id in self._nodes
        # a replaced id keeps its original position
        self._nodes[node.id] = node
        return replaced

    def add_link(self, link: GraphLink):
        self.links.append(link)

    def categories(self) -> List[str]:
        """Distinct node categories, in first-seen order."""
        seen: List[str] = []
        for node in self._nodes.values():
            if node.category and node.category not in seen:
                seen.append(node.category)
        return seen

    def containers(self) -> List[str]:
        """Ids of nodes that are the source of at least one containment link."""
        seen: List[str] = []
        for link in self.links:
            if link.is_containment and link.source not in seen:
                seen.append(link.source)
        return seen

    def to_dict(self):
        return {
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "links": [l.to_dict() for l in self.links],
        }


# -------------------------
# Default strategies
# -------------------------
def descriptor_to_node(mod: ModFolder) -> Optional[GraphNode]:
    """Node for a mod folder, or None if it has no usable manifest."""
    manifest = mod.manifest
    if manifest is None or not manifest.unique_id:
        return None
    return GraphNode(
        id=manifest.unique_id,
        label=mod.display_name,
        category=mod.type.value,
    )


def descriptor_to_links(mod: ModFolder, group_content_packs: bool,
                        logger: Optional[_logger.Logger] = None) -> List[GraphLink]:
    """Links declared by a mod folder: owner link first, then required dependencies."""
    manifest = mod.manifest
    if manifest is None or not manifest.unique_id:
        return []

    links: List[GraphLink] = []

    # content pack consumer
    owner_id = manifest.owner_id
    if owner_id:
        if group_content_packs:
            links.append(GraphLink(source=owner_id, target=manifest.unique_id, is_containment=True))
        else:
            links.append(GraphLink(source=manifest.unique_id, target=owner_id))

    # required dependencies
    for dependency in manifest.dependencies:
        if not dependency.is_required:
            continue
        if not dependency.unique_id:
            if logger:
                logger.warning(f"{manifest.unique_id}: skipped required dependency with no UniqueID")
            continue
        links.append(GraphLink(source=manifest.unique_id, target=dependency.unique_id))

    return links


NodeBuilder = Callable[[ModFolder], Optional[GraphNode]]
LinkBuilder = Callable[..., List[GraphLink]]


class GraphBuilder:
    """
    Builds a DirectedGraph from scanned mod folders.

    node_builder(mod) returns a node or None to skip the mod;
    link_builder(mod, group_content_packs, logger=...) returns its links.
    """

    def __init__(self,
                 node_builder: NodeBuilder = descriptor_to_node,
                 link_builder: LinkBuilder = descriptor_to_links,
                 logger: Optional[_logger.Logger] = None):
        self.node_builder = node_builder
        self.link_builder = link_builder
        self.log = logger or _logger.Logger("graph")

    def build(self, mods: Iterable[ModFolder], group_content_packs: bool = True) -> DirectedGraph:
        graph = DirectedGraph()
        skipped = 0
        for mod in mods:
            node = self.node_builder(mod)
            if node is None:
                skipped += 1
                self.log.debug(f"Skipped {mod.relative_path}: no manifest")
                continue

            if graph.add_node(node):
                self.log.warning(f"Duplicate mod id '{node.id}' ({mod.relative_path}); keeping the last one")

            for link in self.link_builder(mod, group_content_packs, logger=self.log):
                graph.add_link(link)

        self.log.info(f"Graph built: {len(graph.nodes)} nodes, {len(graph.links)} links, {skipped} skipped")
        return graph


def build_directed_graph(mods: Iterable[ModFolder],
                         group_content_packs: bool = True,
                         node_builder: NodeBuilder = descriptor_to_node,
                         link_builder: LinkBuilder = descriptor_to_links,
                         logger: Optional[_logger.Logger] = None) -> DirectedGraph:
    """Build the dependency graph for the given mods."""
    builder = GraphBuilder(node_builder=node_builder, link_builder=link_builder, logger=logger)
    return builder.build(mods, group_content_packs=group_content_packs)
