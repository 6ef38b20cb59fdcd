from .context import (
    AnalysisMode,
    OpaqueMaterial,
    SpectralDataRecord,
    Construction,
    OpticalProperties,
    Zone,
    Surface,
    SimulationContext,
    WindowGeometry
)
from .sandbox import CatalogSandbox, SimulationSnapshot
from .property_database import PropertyDatabase, nearest_thickness_key
from .report_shelf import ReportShelf
