"""
Thermophysical properties of the fill gases of a glazing gap.

Conductivity, dynamic viscosity and specific heat are given as quadratic
functions of absolute temperature T [K]: a + b * T + c * T ** 2.
"""
from dataclasses import dataclass
from enum import Enum

R_UNIVERSAL = 8314.462618  # J / (kmol.K)
P_ATM = 101325.0  # Pa


class Gas(Enum):
    AIR = 'AIR'
    ARGON = 'ARGON'
    KRYPTON = 'KRYPTON'
    XENON = 'XENON'

    @property
    def properties(self) -> 'GasProperties':
        return GAS_PROPERTIES[self]


@dataclass(frozen=True)
class GasProperties:
    """
    Attributes
    ----------
    k_coeffs:
        Coefficients of the conductivity [W / (m.K)].
    mu_coeffs:
        Coefficients of the dynamic viscosity [Pa.s].
    cp_coeffs:
        Coefficients of the specific heat at constant pressure [J / (kg.K)].
    molar_weight:
        Molar mass [kg / kmol].
    specific_heat_ratio:
        Ratio of specific heats cp / cv [-].
    """
    k_coeffs: tuple[float, float, float]
    mu_coeffs: tuple[float, float, float]
    cp_coeffs: tuple[float, float, float]
    molar_weight: float
    specific_heat_ratio: float

    @staticmethod
    def _eval(coeffs: tuple[float, float, float], T: float) -> float:
        a, b, c = coeffs
        return a + b * T + c * T ** 2

    def k(self, T: float) -> float:
        return self._eval(self.k_coeffs, T)

    def mu(self, T: float) -> float:
        return self._eval(self.mu_coeffs, T)

    def cp(self, T: float) -> float:
        return self._eval(self.cp_coeffs, T)

    def rho(self, T: float, P: float = P_ATM) -> float:
        """Mass density of the gas as an ideal gas [kg / m ** 3]."""
        return P * self.molar_weight / (R_UNIVERSAL * T)


GAS_PROPERTIES: dict[Gas, GasProperties] = {
    Gas.AIR: GasProperties(
        k_coeffs=(2.873e-3, 7.760e-5, 0.0),
        mu_coeffs=(3.723e-6, 4.940e-8, 0.0),
        cp_coeffs=(1002.737, 1.2324e-2, 0.0),
        molar_weight=28.97,
        specific_heat_ratio=1.40
    ),
    Gas.ARGON: GasProperties(
        k_coeffs=(2.285e-3, 5.149e-5, 0.0),
        mu_coeffs=(3.379e-6, 6.451e-8, 0.0),
        cp_coeffs=(521.929, 0.0, 0.0),
        molar_weight=39.948,
        specific_heat_ratio=1.67
    ),
    Gas.KRYPTON: GasProperties(
        k_coeffs=(9.443e-4, 2.826e-5, 0.0),
        mu_coeffs=(2.213e-6, 7.777e-8, 0.0),
        cp_coeffs=(248.091, 0.0, 0.0),
        molar_weight=83.8,
        specific_heat_ratio=1.68
    ),
    Gas.XENON: GasProperties(
        k_coeffs=(4.538e-4, 1.723e-5, 0.0),
        mu_coeffs=(1.069e-6, 7.414e-8, 0.0),
        cp_coeffs=(158.340, 0.0, 0.0),
        molar_weight=131.3,
        specific_heat_ratio=1.66
    )
}
