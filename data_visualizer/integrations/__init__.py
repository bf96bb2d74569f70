"""Integrations layer: ports to chart and table renderers."""
from .chart_backend import ChartBackend, EChartsBackend, available_backends, create_backend, register_backend
from .table_port import PandasPivotRenderer, PivotResult, TableOptions, TableRenderer, build_sorters

__all__ = ["ChartBackend", "EChartsBackend", "available_backends", "create_backend", "register_backend",
           "PandasPivotRenderer", "PivotResult", "TableOptions", "TableRenderer", "build_sorters"]
