"""
Tests for the property database
"""
import pytest

from fenestra.catalog import PropertyDatabase, nearest_thickness_key
from fenestra.catalog.property_database import normalize_key
from fenestra.exceptions import PropertyDatabaseError, PropertyLookupError


class TestNearestThickness:

    def test_tie_resolves_to_larger_key(self):
        assert nearest_thickness_key([3.0, 6.0], 4.5) == 6.0

    def test_unsorted_keys(self):
        assert nearest_thickness_key([12.0, 3.0, 6.0], 4.5) == 6.0

    @pytest.mark.parametrize("thickness, expected", [
        (1.0, 3.0),
        (3.0, 3.0),
        (4.4, 3.0),
        (4.6, 6.0),
        (6.0, 6.0),
        (8.0, 6.0),
        (9.0, 12.0),
        (25.0, 12.0),
    ])
    def test_nearest_and_clamped(self, thickness, expected):
        assert nearest_thickness_key([3.0, 6.0, 12.0], thickness) == expected

    def test_no_keys(self):
        with pytest.raises(PropertyLookupError):
            nearest_thickness_key([], 3.0)


class TestLookups:

    def test_normalize_key(self):
        assert normalize_key(' Horizontal slider ') == 'HORIZONTAL_SLIDER'
        assert normalize_key('low-e') == 'LOW_E'

    def test_glazing(self, database):
        props = database.glazing(0.003, 'none', 'clear')
        assert props['thickness'] == pytest.approx(0.003)
        assert props['solar_transmittance'] == pytest.approx(0.837)
        assert props['ir_emissivity_front'] == pytest.approx(0.84)
        assert props['conductivity'] == pytest.approx(0.9)

    def test_glazing_tie_break(self, database):
        props = database.glazing(0.0045)
        assert props['thickness'] == pytest.approx(0.006)

    def test_glazing_not_found(self, database):
        with pytest.raises(PropertyLookupError):
            database.glazing(0.003, 'NONE', 'BLUE')

    def test_fenestration_type(self, database):
        assert database.fenestration_type('Horizontal slider') == (1.5, 1.2, 90.0)
        assert 'SKYLIGHT' in database.fenestration_types

    def test_fenestration_type_not_found(self, database):
        with pytest.raises(PropertyLookupError):
            database.fenestration_type('PORTHOLE')

    def test_frame(self, database):
        frame = database.frame('aluminum', 2)
        assert set(frame) == {
            'conductance', 'solar_absorptance',
            'visible_absorptance', 'emissivity'
        }
        with pytest.raises(PropertyLookupError):
            database.frame('ALUMINUM', 5)

    def test_spacer(self, database):
        a, b, c = database.spacer('ALUMINUM', 2)
        assert (a, b, c) == (1.0, 0.8, 0.01)
        with pytest.raises(PropertyLookupError):
            database.spacer('ALUMINUM', 1)


class TestLoading:

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PropertyDatabaseError):
            PropertyDatabase.load(tmp_path / 'does-not-exist')

    def test_empty_table(self, tmp_path):
        for file_name in PropertyDatabase.TABLES.values():
            (tmp_path / file_name).write_text('')
        with pytest.raises(PropertyDatabaseError):
            PropertyDatabase.load(tmp_path)

    def test_lookup_error_is_database_error(self):
        assert issubclass(PropertyLookupError, PropertyDatabaseError)
