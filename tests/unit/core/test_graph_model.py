"""Unit tests for GraphModel construction and queries."""

import dataclasses

import pytest

from ddgraph.core.errors import DisconnectedPathElem, MalformedVisibilityToken, UnknownVertexKey
from ddgraph.core.graph_model import GenerationUpdate, GraphModel, make_graph
from ddgraph.core.transform import transform_ddg_data
from ddgraph.core.types import CheckedStatus, Density, Direction
from ddgraph.core.visibility_codec import decode, encode


def vertex_of(graph, visibility_idx):
    return graph.path_elem_to_vertex[graph.vis_idx_to_path_elem[visibility_idx]]


def edge_pairs(edges):
    return {(edge.from_key, edge.to_key) for edge in edges}


@pytest.fixture
def convergent_graph(convergent_paths, focal):
    model = transform_ddg_data(convergent_paths, focal)
    return GraphModel(model, density=Density.PREVENT_PATH_ENTANGLEMENT, show_operations=True)


@pytest.fixture
def fan_out_graph(fan_out_model):
    return GraphModel(fan_out_model, density=Density.MOST_CONCISE)


class TestConstruction:
    def test_one_path_gives_one_vertex_per_elem(self, simple_model):
        graph = GraphModel(simple_model, density=Density.PREVENT_PATH_ENTANGLEMENT, show_operations=True)
        assert len(graph.vertices) == 5
        assert len(graph.edges) == 4
        keys = [vertex_of(graph, i).key for i in range(5)]
        assert edge_pairs(graph.edges) == {
            (keys[2], keys[0]),  # beta -> focal
            (keys[4], keys[2]),  # alpha -> beta
            (keys[0], keys[1]),  # focal -> gamma
            (keys[1], keys[3]),  # gamma -> delta
        }

    def test_three_hop_scenario(self, focal):
        a, c = {"service": "a", "operation": "x"}, {"service": "c", "operation": "z"}
        graph = GraphModel(transform_ddg_data([[a, focal, c]], focal), density=Density.MOST_CONCISE)
        visible = graph.get_visible()
        assert len(visible.vertices) == 3
        assert len(visible.edges) == 2
        assert edge_pairs(visible.edges) == {("a", "focal::op"), ("focal::op", "c")}

    def test_focal_vertex(self, simple_model):
        graph = GraphModel(simple_model, density=Density.MOST_CONCISE)
        focal_vertex = vertex_of(graph, 0)
        assert focal_vertex.is_focal_node
        assert focal_vertex.operation == "op"
        assert vertex_of(graph, 1).operation is None
        assert not vertex_of(graph, 1).is_focal_node

    def test_divergent_paths_stay_separate_under_path_entanglement(self, convergent_graph):
        # focal 0-1, x 2, y 3, alpha 4-5, z 6-7
        assert vertex_of(convergent_graph, 0) is vertex_of(convergent_graph, 1)
        assert vertex_of(convergent_graph, 4) is vertex_of(convergent_graph, 5)
        assert vertex_of(convergent_graph, 2) is not vertex_of(convergent_graph, 3)
        z1, z2 = vertex_of(convergent_graph, 6), vertex_of(convergent_graph, 7)
        assert z1.service == z2.service == "z"
        assert z1.operation == z2.operation == "z1"
        assert z1.key != z2.key
        assert len(convergent_graph.vertices) == 6
        assert len(convergent_graph.edges) == 5

    def test_most_concise_merges_reconverging_paths(self, convergent_paths, focal):
        graph = GraphModel(transform_ddg_data(convergent_paths, focal), density=Density.MOST_CONCISE)
        assert vertex_of(graph, 6) is vertex_of(graph, 7)
        assert len(graph.vertices) == 5
        assert edge_pairs(graph.edges) == {
            ("alpha", "focal::op"), ("focal::op", "x"), ("focal::op", "y"), ("x", "z"), ("y", "z"),
        }

    def test_reuses_edge(self, convergent_graph):
        elem_a, elem_b = convergent_graph.vis_idx_to_path_elem[4], convergent_graph.vis_idx_to_path_elem[5]
        assert convergent_graph.path_elem_to_edge[elem_a] is convergent_graph.path_elem_to_edge[elem_b]

    def test_vertex_to_path_elems(self, convergent_graph):
        vertex = vertex_of(convergent_graph, 0)
        elems = convergent_graph.vertex_to_path_elems[vertex]
        assert [elem.visibility_idx for elem in elems] == [0, 1]

    def test_focal_elems_have_no_edge(self, convergent_graph):
        assert convergent_graph.vis_idx_to_path_elem[0] not in convergent_graph.path_elem_to_edge

    def test_repeated_focal_merges_under_most_concise(self, focal):
        a, b = {"service": "a", "operation": "x"}, {"service": "b", "operation": "y"}
        model = transform_ddg_data([[a, focal, b, focal, a]], focal)
        graph = GraphModel(model, density=Density.MOST_CONCISE, show_operations=True)
        assert set(graph.vertices) == {"a::x", "focal::op", "b::y"}
        assert edge_pairs(graph.edges) == {
            ("a::x", "focal::op"), ("focal::op", "b::y"), ("b::y", "focal::op"), ("focal::op", "a::x"),
        }

    def test_disconnected_elem_raises(self, simple_model):
        elems = simple_model.vis_idx_to_path_elem
        broken = dataclasses.replace(simple_model, vis_idx_to_path_elem=elems[:1] + elems[2:])
        with pytest.raises(DisconnectedPathElem):
            GraphModel(broken, density=Density.PREVENT_PATH_ENTANGLEMENT)

    def test_maps_are_read_only(self, fan_out_graph):
        with pytest.raises(TypeError):
            fan_out_graph.vertices["new"] = None
        with pytest.raises(TypeError):
            fan_out_graph.path_elem_to_vertex[object()] = None

    def test_unknown_density(self, simple_model):
        with pytest.raises(ValueError):
            GraphModel(simple_model, density="nope")


class TestGetVisible:
    def test_just_focal(self, convergent_graph):
        visible = convergent_graph.get_visible(encode([0]))
        assert visible.edges == ()
        assert [v.service for v in visible.vertices] == ["focal"]

    def test_two_vertices_and_edge(self, convergent_graph):
        visible = convergent_graph.get_visible(encode([0, 4]))
        assert [v.service for v in visible.vertices] == ["focal", "alpha"]
        assert len(visible.edges) == 1

    def test_no_duplicates(self, convergent_graph):
        visible = convergent_graph.get_visible(encode([0, 1, 4, 5]))
        assert [v.service for v in visible.vertices] == ["focal", "alpha"]
        assert len(visible.edges) == 1

    def test_out_of_range_indices_are_dropped(self, convergent_graph):
        visible = convergent_graph.get_visible(encode([100]))
        assert visible.vertices == ()
        assert visible.edges == ()

    def test_huge_run_is_clipped_to_model(self, fan_out_graph):
        token = "0-zzzzzzzzzz"
        assert fan_out_graph.get_visible_indices(token) == set(range(12))
        assert len(fan_out_graph.get_visible(token).vertices) == 6
        assert fan_out_graph.get_vis_without_vertex("mid", token) == "0-2.3-2"
        assert fan_out_graph.get_vis_with_vertices(["leaf1"], "zzzzzzzzzz-zzzzzzzzzz") == "0.2.5"

    def test_default_is_two_hops(self, simple_model):
        graph = GraphModel(simple_model, density=Density.PREVENT_PATH_ENTANGLEMENT)
        visible = graph.get_visible()
        assert set(visible.vertices) == set(graph.vertices.values())
        assert set(visible.edges) == set(graph.edges)

    def test_default_excludes_farther_hops(self, focal):
        path = [{"service": f"s{i}", "operation": "o"} for i in range(3)] + [focal]
        graph = GraphModel(transform_ddg_data([path], focal), density=Density.MOST_CONCISE)
        assert {v.service for v in graph.get_visible().vertices} == {"focal", "s1", "s2"}

    def test_visible_hops_setting(self, fan_out_model):
        graph = GraphModel(fan_out_model, density=Density.MOST_CONCISE, visible_hops=1)
        assert {v.service for v in graph.get_visible().vertices} == {"focal", "up", "mid"}

    def test_empty_encoding_shows_nothing(self, fan_out_graph):
        assert fan_out_graph.get_visible("").vertices == ()

    def test_malformed_encoding_raises(self, fan_out_graph):
        with pytest.raises(MalformedVisibilityToken):
            fan_out_graph.get_visible("not a token")

    def test_resilient_to_source_mutation(self, convergent_paths, focal):
        model = transform_ddg_data(convergent_paths, focal)
        elems = list(model.vis_idx_to_path_elem)
        graph = GraphModel(dataclasses.replace(model, vis_idx_to_path_elem=elems), density=Density.MOST_CONCISE)
        last = len(elems) - 1
        prior = graph.get_visible(encode([last]))
        elems.append(object())
        assert graph.get_visible(encode([last, last + 1])) == prior


class TestUiFind:
    def test_case_insensitive_tokens(self, fan_out_graph):
        matches = fan_out_graph.get_visible_ui_find_matches("LEAF")
        assert {v.service for v in matches} == {"leaf1", "leaf2", "leaf3"}

    def test_any_token_matches(self, fan_out_graph):
        matches = fan_out_graph.get_visible_ui_find_matches("  mid   up ")
        assert {v.service for v in matches} == {"mid", "up"}

    def test_matches_focal_operation(self, fan_out_graph):
        matches = fan_out_graph.get_visible_ui_find_matches("op")
        assert {v.key for v in matches} == {"focal::op"}

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_empty_query(self, fan_out_graph, query):
        assert fan_out_graph.get_visible_ui_find_matches(query) == frozenset()
        assert fan_out_graph.get_hidden_ui_find_matches(query) == frozenset()

    def test_only_visible_vertices(self, fan_out_graph):
        assert fan_out_graph.get_visible_ui_find_matches("leaf", "0-8") == frozenset()

    def test_hidden_matches(self, fan_out_graph):
        hidden = fan_out_graph.get_hidden_ui_find_matches("leaf", "0-8")
        assert {v.key for v in hidden} == {"leaf1", "leaf2", "leaf3"}
        assert all(v not in fan_out_graph.get_visible("0-8").vertices for v in hidden)
        assert fan_out_graph.get_hidden_ui_find_matches("leaf") == frozenset()


class TestVertexVisiblePathElems:
    def test_default(self, fan_out_graph):
        elems = fan_out_graph.get_vertex_visible_path_elems("mid")
        assert [elem.visibility_idx for elem in elems] == [3, 4, 5]

    def test_with_encoding(self, fan_out_graph):
        elems = fan_out_graph.get_vertex_visible_path_elems("mid", "0-3")
        assert [elem.visibility_idx for elem in elems] == [3]

    def test_hidden_vertex(self, fan_out_graph):
        assert fan_out_graph.get_vertex_visible_path_elems("mid", "0-2.3-2") == []

    def test_unknown_vertex(self, fan_out_graph):
        assert fan_out_graph.get_vertex_visible_path_elems("absent") is None


class TestGenerations:
    # fan-out indices: focal 0-2, mid 3-5, up 6-8, leaves 9-11

    def test_generation_members(self, fan_out_graph):
        generation = fan_out_graph.get_generation("mid", Direction.DOWNSTREAM)
        assert [elem.operation.service.name for elem in generation] == ["leaf1", "leaf2", "leaf3"]

    def test_focal_generations(self, fan_out_graph):
        downstream = fan_out_graph.get_generation("focal::op", Direction.DOWNSTREAM)
        upstream = fan_out_graph.get_generation("focal::op", Direction.UPSTREAM)
        assert [elem.visibility_idx for elem in downstream] == [3, 4, 5]
        assert [elem.visibility_idx for elem in upstream] == [6, 7, 8]

    def test_omits_focal_side(self, fan_out_graph):
        assert fan_out_graph.get_generation("mid", Direction.UPSTREAM) == []
        assert fan_out_graph.get_generation("up", Direction.DOWNSTREAM) == []

    def test_only_counts_visible_elems(self, fan_out_graph):
        generation = fan_out_graph.get_generation("mid", Direction.DOWNSTREAM, "0-4")
        assert [elem.visibility_idx for elem in generation] == [9, 10]

    def test_empty_for_unknown_hidden_or_leaf(self, fan_out_graph):
        assert fan_out_graph.get_generation("absent", Direction.DOWNSTREAM) == []
        assert fan_out_graph.get_generation("mid", Direction.DOWNSTREAM, "0-2") == []
        assert fan_out_graph.get_generation("leaf1", Direction.DOWNSTREAM) == []
        assert fan_out_graph.get_generation("up", Direction.UPSTREAM) == []

    def test_accepts_int_direction(self, fan_out_graph):
        assert len(fan_out_graph.get_generation("mid", 1)) == 3

    def test_visibility_tri_state(self, fan_out_graph):
        assert fan_out_graph.get_generation_visibility("mid", Direction.DOWNSTREAM) is CheckedStatus.FULL
        assert fan_out_graph.get_generation_visibility("mid", Direction.DOWNSTREAM, "0-8") is CheckedStatus.EMPTY
        partial = encode(list(range(9)) + [10])
        assert fan_out_graph.get_generation_visibility("mid", Direction.DOWNSTREAM, partial) is CheckedStatus.PARTIAL

    def test_visibility_none_without_generation(self, fan_out_graph):
        assert fan_out_graph.get_generation_visibility("leaf1", Direction.DOWNSTREAM) is None
        assert fan_out_graph.get_generation_visibility("absent", Direction.UPSTREAM) is None


class TestUpdatedGeneration:
    def test_full_generation_is_emptied_then_restored(self, fan_out_graph):
        full = encode(range(12))
        hidden = fan_out_graph.get_vis_with_updated_generation("mid", Direction.DOWNSTREAM, full)
        assert hidden == GenerationUpdate(vis_encoding=encode(range(9)), update=CheckedStatus.EMPTY)
        assert decode(full) - decode(hidden.vis_encoding) == {9, 10, 11}

        restored = fan_out_graph.get_vis_with_updated_generation("mid", Direction.DOWNSTREAM, hidden.vis_encoding)
        assert restored == GenerationUpdate(vis_encoding=full, update=CheckedStatus.FULL)

    def test_default_view_is_full(self, fan_out_graph):
        update = fan_out_graph.get_vis_with_updated_generation("mid", Direction.DOWNSTREAM)
        assert update.update is CheckedStatus.EMPTY
        assert update.vis_encoding == "0-8"

    def test_partial_generation_is_filled(self, fan_out_graph):
        partial = encode(list(range(9)) + [10])
        update = fan_out_graph.get_vis_with_updated_generation("mid", Direction.DOWNSTREAM, partial)
        assert update == GenerationUpdate(vis_encoding=encode(range(12)), update=CheckedStatus.FULL)

    def test_nothing_to_toggle(self, fan_out_graph):
        assert fan_out_graph.get_vis_with_updated_generation("mid", Direction.UPSTREAM) is None
        assert fan_out_graph.get_vis_with_updated_generation("mid", Direction.DOWNSTREAM, "0-2") is None
        assert fan_out_graph.get_vis_with_updated_generation("absent", Direction.DOWNSTREAM) is None


class TestVertexMutators:
    def test_without_vertex_hides_beyond(self, fan_out_graph):
        assert fan_out_graph.get_vis_without_vertex("mid") == "0-2.3-2"

    def test_without_leaf(self, fan_out_graph):
        assert decode(fan_out_graph.get_vis_without_vertex("leaf2")) == set(range(12)) - {10}

    def test_without_vertex_already_hidden_or_unknown(self, fan_out_graph):
        assert fan_out_graph.get_vis_without_vertex("mid", "0-2") is None
        assert fan_out_graph.get_vis_without_vertex("absent") is None

    def test_with_vertices_adds_focal_path(self, fan_out_graph):
        assert decode(fan_out_graph.get_vis_with_vertices(["leaf2"], "0-2")) == {0, 1, 2, 4, 10}

    def test_with_vertex_objects(self, fan_out_graph):
        leaf = fan_out_graph.vertices["leaf3"]
        up = fan_out_graph.vertices["up"]
        # leaf3 brings focal 2 and mid 5; each upstream elem brings its own focal occurrence
        assert decode(fan_out_graph.get_vis_with_vertices([leaf, up], "")) == {0, 1, 2, 5, 6, 7, 8, 11}

    def test_with_unknown_vertex_raises(self, fan_out_graph):
        with pytest.raises(UnknownVertexKey) as exc:
            fan_out_graph.get_vis_with_vertices(["mid", "absent"])
        assert exc.value.key == "absent"

    def test_hide_then_reveal_round_trip(self, fan_out_graph):
        without = fan_out_graph.get_vis_without_vertex("leaf1")
        assert decode(fan_out_graph.get_vis_with_vertices(["leaf1"], without)) == set(range(12))


class TestDeterminism:
    @pytest.mark.parametrize("density", list(Density))
    def test_input_order_does_not_change_graph(self, convergent_paths, fan_out_paths, focal, density):
        paths = convergent_paths + fan_out_paths
        forward = GraphModel(transform_ddg_data(paths, focal), density=density)
        backward = GraphModel(transform_ddg_data(list(reversed(paths)), focal), density=density)

        assert dict(forward.vertices) == dict(backward.vertices)
        assert set(forward.edges) == set(backward.edges)
        size = len(forward.vis_idx_to_path_elem)
        assert size == len(backward.vis_idx_to_path_elem) == 20
        assert [vertex_of(forward, i) for i in range(size)] == [vertex_of(backward, i) for i in range(size)]


class TestMakeGraph:
    def test_memoized_per_configuration(self, fan_out_model):
        first = make_graph(fan_out_model, False, Density.MOST_CONCISE)
        assert make_graph(fan_out_model, False, Density.MOST_CONCISE) is first
        assert make_graph(fan_out_model, True, Density.MOST_CONCISE) is not first
        assert make_graph(fan_out_model, False, Density.ONE_PER_LEVEL) is not first

    def test_configuration_is_applied(self, fan_out_model):
        graph = make_graph(fan_out_model, True, Density.UPSTREAM_VS_DOWNSTREAM)
        assert graph.show_operations
        assert graph.density is Density.UPSTREAM_VS_DOWNSTREAM
        assert "mid::m=1" in graph.vertices
