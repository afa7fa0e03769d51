"""depgraph: dependency graph analysis for work items."""

__version__ = "0.1.0"
