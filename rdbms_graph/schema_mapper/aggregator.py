"""Many-to-many aggregation of join vertex types"""

from typing import List
from loguru import logger

from .class_mapper import EEClassMapper
from .db_schema import INVERSE
from .graph_schema import AggregatorEdge, EdgeType, ModelProperty, VertexType


class Many2ManyAggregator:
    """
    Collapses every vertex type built from a two-column join table

    The join vertex type and its two outgoing edge types are replaced by one
    aggregator edge type linking the two real endpoints directly. The pass
    runs once over a snapshot of the vertex types; aggregator edges created
    here are not aggregated again.
    """

    def __init__(self, mapper):
        self.mapper = mapper
        self.graph_model = mapper.graph_model
        self.rules = mapper.rules
        self.statistics = mapper.statistics

    def aggregate(self) -> int:
        """
        Perform the aggregation

        Returns:
            Number of join vertex types collapsed
        """
        aggregated = 0
        for vertex_type in list(self.graph_model.vertices_type):
            if vertex_type.is_from_join_table and len(vertex_type.out_edges_type) == 2:
                self._aggregate_join_vertex(vertex_type)
                aggregated += 1
        logger.info(f"Many-to-many aggregation collapsed {aggregated} join vertex types")
        return aggregated

    def _aggregate_join_vertex(self, join_vertex_type: VertexType) -> None:
        entity = self.mapper.get_entity_by_vertex_type(join_vertex_type)
        first_edge, second_edge = join_vertex_type.out_edges_type

        if entity is not None and entity.direction_of_n2n_relationship == INVERSE:
            out_vertex_type, in_vertex_type = second_edge.in_vertex_type, first_edge.in_vertex_type
        else:
            out_vertex_type, in_vertex_type = first_edge.in_vertex_type, second_edge.in_vertex_type

        edge_name = join_vertex_type.name
        if entity is not None and entity.name_of_n2n_relationship:
            edge_name = entity.name_of_n2n_relationship

        aggregator_edge_type = EdgeType(
            edge_name,
            out_vertex_type=out_vertex_type,
            in_vertex_type=in_vertex_type,
            is_aggregator_edge=True
        )
        self._copy_properties(aggregator_edge_type, join_vertex_type, [first_edge, second_edge])

        for edge_type in (first_edge, second_edge):
            edge_type.number_relationships_represented -= 1
            if edge_type.number_relationships_represented <= 0:
                self._remove_edge_type(edge_type, join_vertex_type)

        self.rules.register_aggregator_edge(
            join_vertex_type,
            AggregatorEdge(out_vertex_type.name, in_vertex_type.name, aggregator_edge_type)
        )
        if entity is not None:
            self._register_edge_class_mapper(entity, join_vertex_type, aggregator_edge_type)

        self.graph_model.vertices_type.remove(join_vertex_type)
        self.statistics.built_model_vertex_types -= 1
        self.statistics.total_number_of_model_vertices -= 1

        self.graph_model.add_edge_type(aggregator_edge_type)
        self.statistics.built_model_edge_types += 1
        self.statistics.total_number_of_model_edges += 1
        out_vertex_type.out_edges_type.append(aggregator_edge_type)
        in_vertex_type.in_edges_type.append(aggregator_edge_type)

        logger.debug(
            f"Join vertex type {join_vertex_type.name} aggregated into edge type {edge_name} "
            f"({out_vertex_type.name} -> {in_vertex_type.name})"
        )

    @staticmethod
    def _copy_properties(target: EdgeType, join_vertex_type: VertexType, edge_types: List[EdgeType]) -> None:
        sources = [p for p in join_vertex_type.properties if not p.from_primary_key]
        for edge_type in edge_types:
            sources.extend(edge_type.properties)

        position = 1
        for model_property in sources:
            if target.get_property_by_name(model_property.name) is not None:
                continue
            copied: ModelProperty = model_property.copy_to(target, position)
            target.properties.append(copied)
            position += 1

    def _remove_edge_type(self, edge_type: EdgeType, join_vertex_type: VertexType) -> None:
        if edge_type in self.graph_model.edges_type:
            self.graph_model.edges_type.remove(edge_type)
            self.statistics.built_model_edge_types -= 1
            self.statistics.total_number_of_model_edges -= 1
        in_vertex_type = edge_type.in_vertex_type
        if in_vertex_type is not None and edge_type in in_vertex_type.in_edges_type:
            in_vertex_type.in_edges_type.remove(edge_type)
        if edge_type in join_vertex_type.out_edges_type:
            join_vertex_type.out_edges_type.remove(edge_type)

    def _register_edge_class_mapper(self, entity, join_vertex_type: VertexType, edge_type: EdgeType) -> None:
        ev_class_mapper = self.rules.get_ev_class_mappers_by_entity(entity)[0]
        class_mapper = EEClassMapper(entity=entity, edge_type=edge_type)
        for model_property in edge_type.properties:
            attribute_name = ev_class_mapper.property2attribute.get(model_property.name)
            if attribute_name is not None:
                class_mapper.map_attribute(attribute_name, model_property.name)
        self.rules.upsert_ee_class_mapper(class_mapper)
