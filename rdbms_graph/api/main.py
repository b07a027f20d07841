"""FastAPI application exposing the relational to graph schema mapping"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Dict, Any, List, Optional
from loguru import logger
import sys

from ..config.settings import get_settings, load_yaml_config
from ..connectors.data_source import DataSourceInfo, VendorType, create_connector
from ..exceptions import DescriptorFormatError, UnsupportedDataSourceError
from ..metadata.provider import MetadataProvider
from ..schema_mapper.factory import run_schema_mapping

settings = get_settings()

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

app = FastAPI(
    title="RDBMS to Graph Schema API",
    description="API for mapping relational database schemas to property-graph schemas",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class MappingRequest(BaseModel):
    """Database and mapping configuration"""
    db_type: str
    connection_string: Optional[str] = None
    schema_name: Optional[str] = None
    naming_convention: Optional[str] = None  # java or original
    included_tables: Optional[List[str]] = None
    excluded_tables: Optional[List[str]] = None
    aggregate: Optional[bool] = None
    hibernate_xml_path: Optional[str] = None


class SchemaResponse(BaseModel):
    """Schema response"""
    vertex_types: List[Dict[str, Any]]
    edge_types: List[Dict[str, Any]]
    aggregator_edges: Dict[str, Dict[str, Any]]
    statistics: Dict[str, Any]


class MetadataResponse(BaseModel):
    """Metadata response"""
    nodes_classes: List[Dict[str, Any]]
    edges_classes: List[Dict[str, Any]]


def build_data_source(request: MappingRequest) -> DataSourceInfo:
    """Create the data source descriptor of a request, falling back to the settings"""
    vendor = VendorType.from_name(request.db_type)
    aggregate = settings.aggregation_enabled if request.aggregate is None else request.aggregate
    return DataSourceInfo(
        vendor=vendor,
        connection_string=request.connection_string or settings.default_connection_string(request.db_type),
        schema=request.schema_name or settings.source_schema,
        aggregation_enabled=aggregate,
        name=request.db_type
    )


def mapping_options(request: MappingRequest) -> Dict[str, Any]:
    """Mapping options of a request, falling back to the settings"""
    included = settings.included_table_list if request.included_tables is None else request.included_tables
    excluded = settings.excluded_table_list if request.excluded_tables is None else request.excluded_tables
    return {
        "naming_convention": request.naming_convention or settings.naming_convention,
        "included_tables": included,
        "excluded_tables": excluded,
        "hibernate_xml_path": request.hibernate_xml_path or settings.hibernate_xml_path,
        "join_table_config": load_yaml_config(settings.join_table_config_path)
    }


@app.get("/")
async def api_root():
    """API root endpoint"""
    return {
        "message": "RDBMS to Graph Schema API",
        "version": "0.1.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.post("/schema/map")
async def map_schema(request: MappingRequest) -> SchemaResponse:
    """
    Map a relational database schema to a graph schema

    Args:
        request: Database and mapping configuration

    Returns:
        Graph schema with the aggregation registry and the run statistics
    """
    try:
        data_source = build_data_source(request)
        with create_connector(data_source) as connector:
            mapper = run_schema_mapping(data_source, connector, **mapping_options(request))

        result = mapper.to_dict()
        return SchemaResponse(
            vertex_types=result["vertex_types"],
            edge_types=result["edge_types"],
            aggregator_edges=result["aggregator_edges"],
            statistics=mapper.statistics.to_dict()
        )

    except (DescriptorFormatError, UnsupportedDataSourceError, ValueError) as e:
        logger.error(f"Invalid mapping request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error mapping schema: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/schema/metadata")
async def schema_metadata(request: MappingRequest) -> MetadataResponse:
    """Describe the graph classes of a database with their record counts"""
    try:
        data_source = build_data_source(request)
        provider = MetadataProvider(**mapping_options(request))
        metadata = provider.fetch_metadata(data_source).to_dict()
        return MetadataResponse(**metadata)

    except (DescriptorFormatError, UnsupportedDataSourceError, ValueError) as e:
        logger.error(f"Invalid metadata request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching metadata: {e}")
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
