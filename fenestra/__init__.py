"""
Synthesis of fenestration constructions whose simulated U-factor, SHGC and
visible transmittance match a set of target values.
"""
import pint

UNITS = pint.UnitRegistry()
Quantity = UNITS.Quantity

unit_definitions = [
    'fraction = [] = frac',
    'percent = 1e-2 frac = % = pct'
]
for ud in unit_definitions:
    UNITS.define(ud)

pint.set_application_registry(UNITS)

__version__ = '0.1.0'
