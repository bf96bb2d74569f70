"""Services layer for data-visualizer."""
from .dataset import Dataset
from .chart_service import AxisOptions, ChartConfiguration, ChartOptions, ChartService, get_palette_from_dataset
from .goal_service import Goal, GoalService, SavedGoalState
from .table_service import TableService

__all__ = ["Dataset", "AxisOptions", "ChartConfiguration", "ChartOptions", "ChartService",
           "get_palette_from_dataset", "Goal", "GoalService", "SavedGoalState", "TableService"]
