"""
Climate class: Includes site details, thermodynamic constants, solar calculations and the half-hourly meteorological forcing types
"""

from datetime import date, timedelta
import numpy as np
from attrs import define, field, frozen
from bigleafsim.climate_funcs import spitters_diffuse_fraction

MET_VARIABLES = ("tair", "vpd", "Ca", "press", "sw_rad", "par", "wind", "rain", "tsoil")


@frozen
class HalfHourlyMet:
    """
    Meteorological record for one half hour. Read-only.
    """
    tair: float     ## air temperature (degrees Celsius)
    vpd: float      ## vapour pressure deficit (Pa)
    Ca: float       ## ambient CO2 concentration (umol mol-1)
    press: float    ## atmospheric pressure (Pa)
    sw_rad: float   ## incident shortwave radiation (W m-2)
    par: float      ## incident photosynthetically active radiation (umol m-2 s-1)
    wind: float = 2.0   ## wind speed at canopy top (m s-1)
    rain: float = 0.0   ## rainfall over the half hour (mm)
    tsoil: float = 15.0     ## soil temperature (degrees Celsius)


def _as_float_array(x):
    return np.atleast_1d(np.asarray(x, dtype=float))


@define
class DailyMetForcing:
    """
    One day of half-hourly forcing, stored as equal-length arrays (one element per half hour).
    """
    doy: float  ## ordinal day of year
    tair: np.ndarray = field(converter=_as_float_array)
    vpd: np.ndarray = field(converter=_as_float_array)
    Ca: np.ndarray = field(converter=_as_float_array)
    press: np.ndarray = field(converter=_as_float_array)
    sw_rad: np.ndarray = field(converter=_as_float_array)
    par: np.ndarray = field(converter=_as_float_array)
    wind: np.ndarray = field(converter=_as_float_array, default=2.0)
    rain: np.ndarray = field(converter=_as_float_array, default=0.0)
    tsoil: np.ndarray = field(converter=_as_float_array, default=15.0)

    def __attrs_post_init__(self):
        n = self.tair.size
        for name in MET_VARIABLES:
            values = getattr(self, name)
            if values.size == 1 and n > 1:
                ## broadcast scalar forcing (e.g. constant wind) over the day
                setattr(self, name, np.full(n, values[0]))
            elif values.size != n:
                raise ValueError(f"Forcing '{name}' has {values.size} half hours but 'tair' has {n}. All forcing arrays must have the same length.")

    @property
    def num_hlf_hrs(self):
        return self.tair.size

    def unpack(self, hod):
        """
        Meteorological record for the given half hour of the day.

        Parameters
        ----------
        hod: int
            Half-hour index within the day (0 is the half hour starting at midnight)

        Returns
        -------
        met: HalfHourlyMet
        """
        return HalfHourlyMet(**{name: float(getattr(self, name)[hod]) for name in MET_VARIABLES})


@define
class ClimateModule:
    """
    Climate (location specs, thermodynamic constants, solar) module
    """

    ## Location/site details
    CLatDeg: float = field(
        default=-33.715
    )  ## latitude of site (degrees)
    CLonDeg: float = field(
        default=150.75
    )  ## longitude of site (degrees)
    timezone: float = field(
        default=10
        ) ## Time zone in hours relative to UTC (positive to the East). Must be Local Standard Time – Daylight Savings Time is not used.
    year: int = field(
        default=2001
        ) ## Calendar year of the forcing, sets the Julian day used in the solar calculations

    ## Unit conversion factors
    T_K0: float = 273.15 ## conversion factor for degrees Celsius to Kelvin

    ## Constants
    CP: float = 1010.0  ## specific heat of dry air at constant pressure (J kg-1 K-1)
    MASS_AIR: float = 29.0e-3  ## molecular mass of dry air (kg mol-1)
    MASS_H2O: float = 18.0e-3  ## molecular mass of water (kg mol-1)
    H2OLV0: float = 2.501e6  ## latent heat of vaporisation of water at 0 degrees Celsius (J kg-1)
    RGAS: float = 8.314  ## universal gas constant (J mol-1 K-1)
    StefanBoltzmannConstant: float = 5.6704e-8  ## Stefan-Boltzmann constant (W m-2 K-4)
    S0_Wm2: float = 1370  ## Solar constant (W m-2), incoming solar radiation at the top of Earth's atmosphere

    def compute_sat_vapor_pressure(self,T):
        """
        Computes the saturation vapor pressure using Tetens' formula

        T = air temperature (degC)
        e_s = saturation vapor pressure of water (Pa)
        """
        e_s = 1000 * 0.61078 * np.exp( (17.269*T) / (237.3+T) )
        return e_s

    def compute_actual_vapor_pressure_from_vpd(self,T,VPD):
        """
        Computes the actual vapor pressure from the vapor pressure deficit.

        Parameters
        ----------
        T : scalar or ndarray
            Air temperature (degC)
        VPD : scalar or ndarray
            Vapor pressure deficit (Pa)

        Returns
        -------
        e_a : scalar or ndarray
            Actual vapor pressure (Pa)
        """
        return self.compute_sat_vapor_pressure(T) - VPD

    def compute_slope_sat_vapor_press_curve(self,T):
        """
        Computes the slope of the relationship between the saturation vapor pressure and temperature.

        Parameters
        ----------
        T: float
            air temperature, degrees Celsius

        Returns
        -------
        Delta: float
            slope of saturation vapor pressure curve, Pa K-1

        References
        ----------
        Allen et al. (1998) FAO Irrigation and Drainage Paper No. 56
        """
        e_s = self.compute_sat_vapor_pressure(T)
        Delta = (4098 * e_s) / (T + 237.3)**2
        return Delta

    def compute_latent_heat_vaporisation(self,T):
        """
        Latent heat of vaporisation of water (J mol-1)

        T = air temperature (degC)
        """
        return (self.H2OLV0 - 2.365e3 * T) * self.MASS_H2O

    def compute_psychometric_constant(self,P,T):
        """
        Computes the psychometric constant, the ratio of the molar heat capacity of air to the
        latent heat of vaporisation, scaled by pressure.

        Parameters
        ----------
        P: float
            atmospheric pressure, Pa
        T: float
            air temperature, degrees Celsius

        Returns
        -------
        gamma: float
            psychometric constant, Pa K-1
        """
        return self.CP * self.MASS_AIR * P / self.compute_latent_heat_vaporisation(T)

    def half_hour_to_local_time(self,hod,num_hlf_hrs=48):
        """Local standard time (24 hour time) at the mid-point of the half-hour time step hod"""
        return (hod + 0.5) * 24.0 / num_hlf_hrs

    def solar_geometry(self,doy,hod,num_hlf_hrs=48):
        """
        Solar position for one half-hour time step.

        Parameters
        ----------
        doy: float
            Ordinal day of year
        hod: int
            Half-hour index within the day
        num_hlf_hrs: int
            Number of time steps per day

        Returns
        -------
        (cos_zenith, elevation): tuple of floats
            Cosine of the solar zenith angle (-) and the solar elevation angle (radians), which is
            negative when the sun is below the horizon.
        """
        fractional_doy = int(doy) + self.half_hour_to_local_time(hod,num_hlf_hrs)/24
        (eqtime, houranglesunrise, theta) = self.solar_calcs(self.year,fractional_doy)
        cos_zenith = float(np.cos(np.deg2rad(theta)))
        elevation = np.pi/2 - np.deg2rad(theta)
        return (cos_zenith, float(elevation))

    def solar_calcs(self,year,doy,return_declination=False):
        """
        Solar position based on equations from NOAA: http://www.srrb.noaa.gov/highlights/sunrise/calcdetails.html
        Also see Python code implementation code at: https://michelanders.blogspot.com/2010/12/calulating-sunrise-and-sunset-in-python.html

        Parameters
        ----------
        year: int
            Year in format YYYY

        doy: float
            Ordinal day of year plus fractional day (e.g. midday on Jan 1 = 1.5; 6am on Feb 1 = 32.25), in Local Standard Time

        Returns
        -------
        (eqtime, houranglesunrise, theta): tuple of floats
            Equation of time (minutes), hour angle at sunrise (degrees) and solar zenith angle (degrees).
            The solar declination (degrees) is appended when return_declination is True. houranglesunrise
            is nan during polar day and polar night.
        """
        xdate = date(int(year),1,1) + timedelta(days=int(doy)-1)

        time = doy % 1  # percentage past midnight, i.e. noon  is 0.5
        dt = xdate - date(1900,1,1)
        day = dt.days + 1  # daynumber 1=1/1/1900

        Jday = day + 2415018.5 + time - self.timezone / 24  # Julian day
        Jcent = (Jday - 2451545) / 36525    # Julian century

        Manom = 357.52911 + Jcent * (35999.05029 - 0.0001537 * Jcent)
        Mlong = 280.46646 + Jcent * (36000.76983 + Jcent * 0.0003032) % 360
        Eccent = 0.016708634 - Jcent * (0.000042037 + 0.0001537 * Jcent)
        Mobliq = 23 + (26 + ((21.448 - Jcent * (46.815 + Jcent * \
                       (0.00059 - Jcent * 0.001813)))) / 60) / 60
        obliq = Mobliq + 0.00256 * np.cos(np.deg2rad(125.04 - 1934.136 * Jcent))
        vary = np.tan(np.deg2rad(obliq / 2)) * np.tan(np.deg2rad(obliq / 2))
        Seqcent = np.sin(np.deg2rad(Manom)) * (1.914602 - Jcent * (0.004817 + 0.000014 * Jcent)) + \
            np.sin(np.deg2rad(2 * Manom)) * (0.019993 - 0.000101 * Jcent) + np.sin(np.deg2rad(3 * Manom)) * 0.000289
        Struelong = Mlong + Seqcent
        Sapplong = Struelong - 0.00569 - 0.00478 * \
            np.sin(np.deg2rad(125.04 - 1934.136 * Jcent))
        declination = np.rad2deg(np.arcsin(np.sin(np.deg2rad(obliq)) * np.sin(np.deg2rad(Sapplong))))

        eqtime = 4 * np.rad2deg(vary * np.sin(2 * np.deg2rad(Mlong)) - 2 * Eccent * np.sin(np.deg2rad(Manom)) + 4 * Eccent * vary * np.sin(np.deg2rad(Manom))
                         * np.cos(2 * np.deg2rad(Mlong)) - 0.5 * vary * vary * np.sin(4 * np.deg2rad(Mlong)) - 1.25 * Eccent * Eccent * np.sin(2 * np.deg2rad(Manom)))

        # hour angle sunrise, outside [-1, 1] the sun does not rise or does not set
        cos_houranglesunrise = (np.cos(np.deg2rad(90.833)) /
                                (np.cos(np.deg2rad(self.CLatDeg)) * np.cos(np.deg2rad(declination))) -
                                np.tan(np.deg2rad(self.CLatDeg)) * np.tan(np.deg2rad(declination)))
        houranglesunrise = np.rad2deg(np.arccos(cos_houranglesunrise)) if abs(cos_houranglesunrise) <= 1 else np.nan

        truesolartime = (time*1440+eqtime+4*self.CLonDeg-60*self.timezone) % 1440

        hourangle = (truesolartime / 4 + 180) if (truesolartime / 4 < 0) else (truesolartime / 4 - 180)

        cos_theta = np.sin(np.deg2rad(self.CLatDeg))*np.sin(np.deg2rad(declination))+np.cos(np.deg2rad(self.CLatDeg))*np.cos(np.deg2rad(declination))*np.cos(np.deg2rad(hourangle))
        theta = np.rad2deg(np.arccos(np.clip(cos_theta,-1.0,1.0)))  # solar zenith angle

        if return_declination:
            return (eqtime, houranglesunrise, theta, declination)
        else:
            return (eqtime, houranglesunrise, theta)

    def diffuse_fraction(self,doy,sw_rad,cos_zenith):
        """
        Diffuse fraction of incident shortwave radiation (-). See climate_funcs.spitters_diffuse_fraction.
        """
        return spitters_diffuse_fraction(doy,sw_rad,cos_zenith,solar_constant=self.S0_Wm2)
