"""Relational database to property-graph schema mapping"""

__version__ = "0.1.0"
