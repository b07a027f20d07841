"""Counters describing the progress of a mapping run"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class Statistics:
    """Mutable counters the mapping engine updates while it works"""
    running_step_number: int = 0

    # step 1: source database schema
    start_work1_time: Optional[datetime] = None
    total_number_of_entities: int = 0
    built_entities: int = 0
    entities_analyzed_for_relationship: int = 0
    total_number_of_relationships: int = 0
    built_relationships: int = 0

    # step 2: graph model
    start_work2_time: Optional[datetime] = None
    total_number_of_model_vertices: int = 0
    built_model_vertex_types: int = 0
    total_number_of_model_edges: int = 0
    built_model_edge_types: int = 0

    warning_messages: List[str] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    def reset(self) -> None:
        """Restore every counter to its initial value"""
        for name, value in asdict(Statistics()).items():
            setattr(self, name, value)

    def source_db_schema_building_progress(self) -> str:
        return (
            f"Entities: {self.built_entities}/{self.total_number_of_entities}, "
            f"relationships: {self.built_relationships}/{self.total_number_of_relationships}"
        )

    def graph_model_building_progress(self) -> str:
        return (
            f"Vertex types: {self.built_model_vertex_types}/{self.total_number_of_model_vertices}, "
            f"edge types: {self.built_model_edge_types}/{self.total_number_of_model_edges}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result = asdict(self)
        for key in ("start_work1_time", "start_work2_time"):
            if result[key] is not None:
                result[key] = result[key].isoformat()
        return result
