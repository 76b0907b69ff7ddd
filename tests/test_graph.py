"""Tests for the mod dependency graph builder."""

from collections import Counter

import pytest

from moddeps.modules.graph import (
    DirectedGraph,
    GraphBuilder,
    GraphLink,
    GraphNode,
    build_directed_graph,
    descriptor_to_links,
    descriptor_to_node,
)


def link_set(graph: DirectedGraph) -> Counter:
    return Counter(link.as_tuple() for link in graph.links)


def test_content_pack_grouped_as_containment(make_folder, log) -> None:
    mods = [make_folder("A"), make_folder("B", owner="A")]

    graph = build_directed_graph(mods, group_content_packs=True, logger=log)

    assert [n.id for n in graph.nodes] == ["A", "B"]
    assert graph.links == [GraphLink("A", "B", is_containment=True)]


def test_content_pack_linked_to_owner_when_not_grouped(make_folder, log) -> None:
    mods = [make_folder("A"), make_folder("B", owner="A")]

    graph = build_directed_graph(mods, group_content_packs=False, logger=log)

    assert [n.id for n in graph.nodes] == ["A", "B"]
    assert graph.links == [GraphLink("B", "A", is_containment=False)]


def test_optional_dependencies_are_dropped(make_folder, log) -> None:
    mods = [make_folder("C", deps=[("D", True), ("E", False)])]

    graph = build_directed_graph(mods, logger=log)

    assert graph.links == [GraphLink("C", "D")]
    assert all(link.target != "E" for link in graph.links)


def test_folder_without_manifest_is_skipped_and_target_dangles(make_folder, log) -> None:
    mods = [
        make_folder("X", name="Broken", with_manifest=False),
        make_folder("A", deps=[("X", True)]),
    ]

    graph = build_directed_graph(mods, logger=log)

    assert [n.id for n in graph.nodes] == ["A"]
    assert graph.links == [GraphLink("A", "X")]
    assert not graph.has_node("X")


def test_node_carries_display_name_and_type(make_folder) -> None:
    node = descriptor_to_node(make_folder("Pathoschild.ContentPatcher", name="Content Patcher"))

    assert node == GraphNode("Pathoschild.ContentPatcher", "Content Patcher", "Smapi")


def test_content_pack_node_category(make_folder) -> None:
    node = descriptor_to_node(make_folder("Pack", owner="Owner"))

    assert node.category == "ContentPack"


def test_owner_link_comes_before_dependency_links(make_folder) -> None:
    mod = make_folder("P", owner="O", deps=[("D1", True), ("D2", True)])

    assert descriptor_to_links(mod, True) == [
        GraphLink("O", "P", True),
        GraphLink("P", "D1"),
        GraphLink("P", "D2"),
    ]
    assert descriptor_to_links(mod, False) == [
        GraphLink("P", "O"),
        GraphLink("P", "D1"),
        GraphLink("P", "D2"),
    ]


def test_links_follow_input_order(make_folder, log) -> None:
    mods = [
        make_folder("M2", deps=[("Z", True)]),
        make_folder("M1", deps=[("Y", True)]),
    ]

    graph = build_directed_graph(mods, logger=log)

    assert [l.as_tuple() for l in graph.links] == [("M2", "Z", False), ("M1", "Y", False)]


def test_duplicate_links_are_not_collapsed(make_folder, log) -> None:
    mods = [
        make_folder("A", deps=[("Core", True), ("Core", True)]),
        make_folder("B", owner="A", deps=[("A", True)]),
    ]

    graph = build_directed_graph(mods, group_content_packs=False, logger=log)

    counts = link_set(graph)
    assert counts[("A", "Core", False)] == 2
    # ownership link and explicit dependency both kept
    assert counts[("B", "A", False)] == 2


def test_required_dependency_without_id_is_skipped_with_warning(make_folder, log) -> None:
    mods = [make_folder("A", deps=[(None, True), ("B", True)])]

    graph = build_directed_graph(mods, logger=log)

    assert graph.links == [GraphLink("A", "B")]
    assert any("no UniqueID" in m for m in log.messages("WARNING"))


def test_duplicate_node_id_last_write_wins(make_folder, log) -> None:
    mods = [
        make_folder("A", name="First"),
        make_folder("Other"),
        make_folder("A", name="Second", deps=[("Other", True)]),
    ]

    graph = build_directed_graph(mods, logger=log)

    assert [n.id for n in graph.nodes] == ["A", "Other"]
    assert graph.get_node("A").label == "Second"
    assert graph.links == [GraphLink("A", "Other")]
    assert any("Duplicate mod id 'A'" in m for m in log.messages("WARNING"))


def test_manifest_without_unique_id_produces_nothing(make_folder, log) -> None:
    mods = [make_folder(None, name="Nameless", deps=[("A", True)])]

    graph = build_directed_graph(mods, logger=log)

    assert graph.nodes == []
    assert graph.links == []


@pytest.mark.parametrize("group", [True, False])
def test_node_count_matches_folders_with_manifest(make_folder, log, group) -> None:
    mods = [
        make_folder("A"),
        make_folder("B", owner="A"),
        make_folder("broken", with_manifest=False),
        make_folder("C", deps=[("A", True), ("B", False)]),
    ]

    graph = build_directed_graph(mods, group_content_packs=group, logger=log)

    assert len(graph.nodes) == sum(1 for m in mods if m.manifest is not None)
    expected_links = 1 + 1  # ownership + one required dependency
    assert len(graph.links) == expected_links


@pytest.mark.parametrize("group", [True, False])
def test_ownership_direction_is_exclusive(make_folder, log, group) -> None:
    mods = [make_folder("Owner"), make_folder("Pack", owner="Owner")]

    graph = build_directed_graph(mods, group_content_packs=group, logger=log)
    links = link_set(graph)

    if group:
        assert links[("Owner", "Pack", True)] == 1
        assert links[("Pack", "Owner", False)] == 0
    else:
        assert links[("Pack", "Owner", False)] == 1
        assert links[("Owner", "Pack", True)] == 0


def test_build_is_repeatable(make_folder, log) -> None:
    mods = [
        make_folder("A", deps=[("B", True)]),
        make_folder("B"),
        make_folder("P", owner="A", deps=[("C", True), ("D", False)]),
    ]

    first = build_directed_graph(mods, logger=log)
    second = build_directed_graph(mods, logger=log)

    assert set(first.nodes) == set(second.nodes)
    assert link_set(first) == link_set(second)
    assert first.to_dict() == second.to_dict()


def test_custom_strategies(make_folder, log) -> None:
    def upper_node(mod):
        node = descriptor_to_node(mod)
        return GraphNode(node.id, node.label.upper(), "Custom") if node else None

    def no_links(mod, group_content_packs, logger=None):
        return []

    builder = GraphBuilder(node_builder=upper_node, link_builder=no_links, logger=log)
    graph = builder.build([make_folder("a", name="alpha", deps=[("b", True)])])

    assert graph.nodes == [GraphNode("a", "ALPHA", "Custom")]
    assert graph.links == []


def test_graph_helpers() -> None:
    graph = DirectedGraph()
    assert graph.add_node(GraphNode("A", "A", "Smapi")) is False
    graph.add_node(GraphNode("B", "B", "ContentPack"))
    graph.add_node(GraphNode("C", "C", "Smapi"))
    graph.add_link(GraphLink("A", "B", True))
    graph.add_link(GraphLink("A", "C", True))
    graph.add_link(GraphLink("C", "A"))

    assert graph.categories() == ["Smapi", "ContentPack"]
    assert graph.containers() == ["A"]
    assert graph.to_dict()["links"][0] == {"source": "A", "target": "B", "is_containment": True}
