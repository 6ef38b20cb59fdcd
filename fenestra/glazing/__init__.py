from .gases import Gas, GasProperties, GAS_PROPERTIES
from .layers import (
    GlazingLayer,
    GapLayer,
    Layer,
    ConstructionAssembly,
    FrameDividerSpec
)
from .conditions import (
    EnvironmentalCondition,
    PerformanceTargets,
    WINTER,
    SUMMER
)
