"""Input prediction and affected project detection."""

from .predictors import (
    PredictionReporter,
    ProjectPredictor,
    ProjectGraphPredictor,
    ProjectFileAndImportsPredictor,
    CompileItemsPredictor,
    ContentItemsPredictor,
    NoneItemsPredictor,
    EmbeddedResourceItemsPredictor,
    AdditionalFilesPredictor,
    OutDirOrOutputPathPredictor,
    ProjectFileAndImportsGraphPredictor,
    ALL_PROJECT_PREDICTORS,
    ALL_GRAPH_PREDICTORS,
    PredictorRegistry,
    DEFAULT_REGISTRY,
)
from .collector import PredictionIndex, FilesByProjectGraphCollector
from .executor import PredictionExecutor, collect_predictions
from .changed_projects import PredictionChangedProjectsProvider, get_affected_projects, list_affected_projects

__all__ = [
    "PredictionReporter",
    "ProjectPredictor",
    "ProjectGraphPredictor",
    "ProjectFileAndImportsPredictor",
    "CompileItemsPredictor",
    "ContentItemsPredictor",
    "NoneItemsPredictor",
    "EmbeddedResourceItemsPredictor",
    "AdditionalFilesPredictor",
    "OutDirOrOutputPathPredictor",
    "ProjectFileAndImportsGraphPredictor",
    "ALL_PROJECT_PREDICTORS",
    "ALL_GRAPH_PREDICTORS",
    "PredictorRegistry",
    "DEFAULT_REGISTRY",
    "PredictionIndex",
    "FilesByProjectGraphCollector",
    "PredictionExecutor",
    "collect_predictions",
    "PredictionChangedProjectsProvider",
    "get_affected_projects",
    "list_affected_projects",
]
