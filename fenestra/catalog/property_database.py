"""
Read-only database with the physical properties needed to synthesize a window
construction: glazing optical and thermal properties, frame conductances,
spacer edge-of-glass coefficients, and default dimensions of fenestration
types used for rating calculations.

The database consists of CSV tables in the directory `PropertyDatabase.path`.
By default, the tables shipped with the package are used.
"""
from __future__ import annotations
import bisect
from pathlib import Path
from typing import Sequence
import pandas as pd
from fenestra.logging import ModuleLogger
from fenestra.exceptions import PropertyDatabaseError, PropertyLookupError

logger = ModuleLogger.get_logger(__name__)


def normalize_key(key: str) -> str:
    """Turns e.g. 'Horizontal slider' into 'HORIZONTAL_SLIDER'."""
    return '_'.join(key.strip().upper().replace('-', ' ').split())


def nearest_thickness_key(keys: Sequence[float], thickness: float) -> float:
    """
    Returns the key in `keys` nearest to `thickness`.

    A thickness below the smallest key or above the largest key is clamped to
    that key. A thickness exactly halfway between two keys resolves to the
    larger key.
    """
    if not keys:
        raise PropertyLookupError("no thickness keys to choose from")
    keys = sorted(keys)
    if thickness <= keys[0]:
        return keys[0]
    if thickness >= keys[-1]:
        return keys[-1]
    i = bisect.bisect_left(keys, thickness)
    lower, upper = keys[i - 1], keys[i]
    if thickness - lower < upper - thickness:
        return lower
    return upper


class PropertyDatabase:
    path: Path = Path(__file__).parent / 'data'

    TABLES = {
        'glazing': 'glazing.csv',
        'frames': 'frames.csv',
        'fenestration_types': 'fenestration_types.csv',
        'spacers': 'spacers.csv'
    }

    def __init__(self, tables: dict[str, pd.DataFrame]) -> None:
        self.glazing_table = tables['glazing']
        self.frame_table = tables['frames']
        self.fenestration_table = tables['fenestration_types']
        self.spacer_table = tables['spacers']

    @classmethod
    def load(cls, path: Path | str | None = None) -> PropertyDatabase:
        """
        Loads the property tables from directory `path` (or from the class
        attribute `path` if `path` is None).

        Raises
        ------
        PropertyDatabaseError
            If a table is missing or cannot be read.
        """
        dir_path = Path(path) if path is not None else Path(cls.path)
        tables = {}
        for name, file_name in cls.TABLES.items():
            file_path = dir_path / file_name
            try:
                df = pd.read_csv(file_path)
            except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as err:
                message = f"property table '{file_path}' could not be read: {err}"
                logger.error(message)
                raise PropertyDatabaseError(message) from err
            for column in df.columns:
                if pd.api.types.is_string_dtype(df[column]):
                    df[column] = df[column].map(normalize_key)
            tables[name] = df
        logger.debug(f"Property database loaded from '{dir_path}'")
        return cls(tables)

    def glazing(
        self,
        thickness: float,
        coating: str = 'NONE',
        tint: str = 'CLEAR'
    ) -> dict[str, float]:
        """
        Returns the optical and thermal properties of the glass with the given
        coating and tint whose thickness is nearest to `thickness` [m].
        The returned dictionary also holds the resolved thickness [m] under
        key 'thickness'.
        """
        coating, tint = normalize_key(coating), normalize_key(tint)
        df = self.glazing_table
        rows = df[(df['coating'] == coating) & (df['tint'] == tint)]
        if rows.empty:
            raise PropertyLookupError(
                f"no glazing with coating '{coating}' and tint '{tint}'"
            )
        thickness_mm = thickness * 1e3
        key = nearest_thickness_key(
            rows['thickness_mm'].unique().tolist(),
            thickness_mm
        )
        row = rows[rows['thickness_mm'] == key].iloc[0]
        props = {
            c: float(row[c]) for c in rows.columns
            if c not in ('thickness_mm', 'coating', 'tint')
        }
        props['thickness'] = key * 1e-3
        return props

    def frame(self, frame_material: str, number_of_panes: int) -> dict[str, float]:
        """Returns conductance [W/(m².K)], solar and visible absorptance and
        emissivity of the frame material for the given number of panes."""
        frame_material = normalize_key(frame_material)
        df = self.frame_table
        rows = df[
            (df['frame_material'] == frame_material)
            & (df['number_of_panes'] == number_of_panes)
        ]
        if rows.empty:
            raise PropertyLookupError(
                f"no frame data for '{frame_material}' with "
                f"{number_of_panes} pane(s)"
            )
        row = rows.iloc[0]
        return {
            'conductance': float(row['conductance']),
            'solar_absorptance': float(row['solar_absorptance']),
            'visible_absorptance': float(row['visible_absorptance']),
            'emissivity': float(row['emissivity'])
        }

    def fenestration_type(self, fenestration_type: str) -> tuple[float, float, float]:
        """Returns the rating width [m], height [m] and tilt [deg] of the
        fenestration type."""
        fenestration_type = normalize_key(fenestration_type)
        df = self.fenestration_table
        rows = df[df['fenestration_type'] == fenestration_type]
        if rows.empty:
            raise PropertyLookupError(
                f"fenestration type '{fenestration_type}' not found"
            )
        row = rows.iloc[0]
        return float(row['width']), float(row['height']), float(row['tilt'])

    def spacer(
        self,
        spacer_type: str,
        number_of_panes: int
    ) -> tuple[float, float, float]:
        """Returns the coefficients (a, b, c) of the edge-of-glass correlation
        U_edge = a + b * U_center + c * U_center ** 2."""
        spacer_type = normalize_key(spacer_type)
        df = self.spacer_table
        rows = df[
            (df['spacer_type'] == spacer_type)
            & (df['number_of_panes'] == number_of_panes)
        ]
        if rows.empty:
            raise PropertyLookupError(
                f"no spacer data for '{spacer_type}' with "
                f"{number_of_panes} panes"
            )
        row = rows.iloc[0]
        return float(row['a']), float(row['b']), float(row['c'])

    @property
    def fenestration_types(self) -> list[str]:
        return self.fenestration_table['fenestration_type'].tolist()
