# moddeps/modules/dgml.py
"""
DGML (Directed Graph Markup Language) export/import.

Output layout:

  <?xml version='1.0' encoding='utf-8'?>
  <DirectedGraph xmlns="http://schemas.microsoft.com/vs/2009/dgml">
    <Nodes>
      <Node Id="Pathoschild.ContentPatcher" Label="Content Patcher" Category="Smapi" Group="Expanded" />
      <Node Id="Someone.CP.Pack" Label="Some Pack" Category="ContentPack" />
    </Nodes>
    <Links>
      <Link Source="Pathoschild.ContentPatcher" Target="Someone.CP.Pack" Category="Contains" />
    </Links>
    <Categories>
      <Category Id="Smapi" />
      <Category Id="ContentPack" />
    </Categories>
  </DirectedGraph>

Containment links are the ones with Category="Contains"; plain dependency
links have no Category.
"""

from __future__ import annotations
import re
import xml.etree.ElementTree as ET

from moddeps.modules import logger as _logger
from moddeps.modules.graph import DirectedGraph, GraphLink, GraphNode

DGML_NAMESPACE = "http://schemas.microsoft.com/vs/2009/dgml"
CONTAINS_CATEGORY = "Contains"

ET.register_namespace("", DGML_NAMESPACE)

# anything outside the XML 1.0 Char production, lone surrogates included
_INVALID_XML_CHARS = re.compile("[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")
REPLACEMENT_CHAR = "\uFFFD"

LOG = _logger.Logger("dgml")


class DgmlWriteError(OSError):
    pass


class DgmlReadError(Exception):
    pass


def _tag(name: str) -> str:
    return f"{{{DGML_NAMESPACE}}}{name}"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def xml_safe(value: str) -> str:
    """Replace characters XML can't carry with U+FFFD."""
    return _INVALID_XML_CHARS.sub(REPLACEMENT_CHAR, value)


def _element(parent: ET.Element, name: str, attrs) -> ET.Element:
    return ET.SubElement(parent, _tag(name), {k: xml_safe(v) for k, v in attrs.items()})


# -------------------------
# Export
# -------------------------
def build_dgml_tree(graph: DirectedGraph) -> ET.ElementTree:
    root = ET.Element(_tag("DirectedGraph"))
    containers = set(graph.containers())

    nodes_el = ET.SubElement(root, _tag("Nodes"))
    for node in graph.nodes:
        attrs = {"Id": node.id, "Label": node.label or node.id}
        if node.category:
            attrs["Category"] = node.category
        if node.id in containers:
            attrs["Group"] = "Expanded"
        _element(nodes_el, "Node", attrs)

    links_el = ET.SubElement(root, _tag("Links"))
    for link in graph.links:
        attrs = {"Source": link.source, "Target": link.target}
        if link.is_containment:
            attrs["Category"] = CONTAINS_CATEGORY
        _element(links_el, "Link", attrs)

    categories = graph.categories()
    if categories:
        cats_el = ET.SubElement(root, _tag("Categories"))
        for category in categories:
            _element(cats_el, "Category", {"Id": category})

    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")
    return tree


def to_dgml_string(graph: DirectedGraph) -> str:
    tree = build_dgml_tree(graph)
    return ET.tostring(tree.getroot(), encoding="unicode", xml_declaration=True)


def export_dgml(graph: DirectedGraph, file_path: str):
    """Write the graph to a .dgml file. Parent directories must already exist."""
    tree = build_dgml_tree(graph)
    try:
        with open(file_path, "wb") as fh:
            tree.write(fh, encoding="utf-8", xml_declaration=True)
    except OSError as e:
        LOG.error(f"Can't write DGML file {file_path}: {e}")
        raise DgmlWriteError(f"Can't write DGML file {file_path}: {e.strerror or e}") from e
    LOG.info(f"DGML saved to {file_path} ({len(graph.nodes)} nodes, {len(graph.links)} links)")


# -------------------------
# Import
# -------------------------
def _is_containment(attrs) -> bool:
    if attrs.get("Category") == CONTAINS_CATEGORY:
        return True
    return str(attrs.get("IsContainment", "")).strip().lower() == "true"


def _graph_from_root(root: ET.Element) -> DirectedGraph:
    if _local(root.tag) != "DirectedGraph":
        raise DgmlReadError(f"Unexpected root element <{_local(root.tag)}>")

    graph = DirectedGraph()
    for el in root.iter():
        name = _local(el.tag)
        if name == "Node":
            node_id = el.get("Id")
            if not node_id:
                raise DgmlReadError("<Node> without Id attribute")
            graph.add_node(GraphNode(node_id, el.get("Label", node_id), el.get("Category")))
        elif name == "Link":
            source, target = el.get("Source"), el.get("Target")
            if not source or not target:
                raise DgmlReadError("<Link> without Source/Target attribute")
            graph.add_link(GraphLink(source, target, is_containment=_is_containment(el.attrib)))
    return graph


def parse_dgml(text: str) -> DirectedGraph:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise DgmlReadError(f"Malformed DGML: {e}") from e
    return _graph_from_root(root)


def load_dgml(file_path: str) -> DirectedGraph:
    try:
        tree = ET.parse(file_path)
    except ET.ParseError as e:
        raise DgmlReadError(f"Malformed DGML in {file_path}: {e}") from e
    return _graph_from_root(tree.getroot())
