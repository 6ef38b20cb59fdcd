from dataclasses import dataclass
from fenestra import Quantity

Q_ = Quantity


@dataclass(frozen=True)
class EnvironmentalCondition:
    """
    Steady-state boundary conditions of a window rating calculation.

    Attributes
    ----------
    name:
        Name of the condition.
    T_in:
        Indoor air temperature.
    T_out:
        Outdoor air temperature.
    wind_speed:
        Outdoor wind speed.
    I_solar:
        Total solar irradiance incident on the window.
    """
    name: str
    T_in: Quantity
    T_out: Quantity
    wind_speed: Quantity
    I_solar: Quantity

    @property
    def magnitudes(self) -> tuple[float, float, float, float]:
        """Returns T_in [°C], T_out [°C], wind speed [m/s] and solar
        irradiance [W/m²] as floats.
        """
        return (
            self.T_in.to('degC').m,
            self.T_out.to('degC').m,
            self.wind_speed.to('m / s').m,
            self.I_solar.to('W / m ** 2').m
        )


# Standard rating condition for the U-factor.
WINTER = EnvironmentalCondition(
    name='winter',
    T_in=Q_(21.0, 'degC'),
    T_out=Q_(-18.0, 'degC'),
    wind_speed=Q_(5.5, 'm / s'),
    I_solar=Q_(0.0, 'W / m ** 2')
)

# Standard rating condition for the SHGC.
SUMMER = EnvironmentalCondition(
    name='summer',
    T_in=Q_(24.0, 'degC'),
    T_out=Q_(32.0, 'degC'),
    wind_speed=Q_(2.75, 'm / s'),
    I_solar=Q_(783.0, 'W / m ** 2')
)


@dataclass(frozen=True)
class PerformanceTargets:
    """
    Target performance of the window. Each target may be left unset (None),
    which means that no convergence check is done for that metric.

    Attributes
    ----------
    U:
        Target U-factor of the entire window.
    SHGC:
        Target solar heat gain coefficient of the entire window.
    VT:
        Target visible transmittance of the entire window.
    """
    U: Quantity | None = None
    SHGC: float | None = None
    VT: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.U is None and self.SHGC is None and self.VT is None
