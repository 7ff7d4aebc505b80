"""
Shared fixtures for the bigleafsim tests.
"""
import numpy as np
import pytest
from attrs import define, field

from bigleafsim.climate import ClimateModule, DailyMetForcing, HalfHourlyMet
from bigleafsim.plant import PlantParams, PlantState
from bigleafsim.control import ControlOptions


@define
class WindowSite(ClimateModule):
    """Site with the sun above the horizon only in the half hours of a fixed window"""
    sunlit_hods: frozenset = field(factory=frozenset, converter=frozenset)
    sun_cos_zenith: float = field(default=0.7)

    def solar_geometry(self, doy, hod, num_hlf_hrs=48):
        cos_zenith = self.sun_cos_zenith if hod in self.sunlit_hods else -0.5
        return (cos_zenith, float(np.arcsin(cos_zenith)))


def _window_forcing(doy=15, window=range(20, 31), num_hlf_hrs=48, par=900.0, sw_rad=400.0, **overrides):
    par_arr = np.zeros(num_hlf_hrs)
    sw_arr = np.zeros(num_hlf_hrs)
    for hod in window:
        par_arr[hod] = par
        sw_arr[hod] = sw_rad
    values = dict(
        tair=np.full(num_hlf_hrs, 25.0),
        vpd=np.full(num_hlf_hrs, 1500.0),
        Ca=np.full(num_hlf_hrs, 400.0),
        press=np.full(num_hlf_hrs, 101325.0),
        sw_rad=sw_arr,
        par=par_arr,
        wind=2.0,
        rain=0.0,
        tsoil=np.full(num_hlf_hrs, 18.0),
    )
    values.update(overrides)
    return DailyMetForcing(doy=doy, **values)


@pytest.fixture
def window_site():
    """Factory for a site whose sun is up only in the given half hours"""
    return lambda sunlit_hods: WindowSite(sunlit_hods=sunlit_hods)


@pytest.fixture
def window_forcing():
    """Factory for one day of constant forcing, with PAR and shortwave radiation only in a window of half hours"""
    return _window_forcing


@pytest.fixture
def met():
    """A sunny half hour"""
    return HalfHourlyMet(tair=25.0, vpd=1500.0, Ca=400.0, press=101325.0, sw_rad=500.0, par=1100.0, wind=2.0)


@pytest.fixture
def params():
    return PlantParams()


@pytest.fixture
def state():
    return PlantState()


@pytest.fixture
def control():
    return ControlOptions()
