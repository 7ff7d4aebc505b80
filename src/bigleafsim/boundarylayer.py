"""
Boundary layer class: Includes module parameters and calculations to determine leaf boundary layer conductances and leaf transpiration.
"""

from collections import namedtuple
import numpy as np
from attrs import define, field

LeafConductances = namedtuple(
    "LeafConductances",
    ["transpiration", "LE", "gbc", "gh", "gv", "omega"],
)
LeafConductances.__doc__ = """\
Leaf transpiration (mol H2O m-2 s-1), latent heat flux (W m-2), boundary layer conductance to CO2 (mol m-2 s-1),
total conductance to heat (mol m-2 s-1), total conductance to water vapour (mol m-2 s-1) and the
decoupling coefficient (-).
"""


@define
class BoundaryLayerModule:
    """
    Boundary layer module
    """

    ## Class parameters
    DHEAT: float = field(default=21.5e-6)  ## molecular diffusivity of heat in air (m2 s-1)
    GBVGBH: float = field(default=1.075)  ## ratio of boundary layer conductance for water vapour to that for heat (-)
    GSVGSC: float = field(default=1.57)  ## ratio of stomatal conductance for water vapour to that for CO2 (-)
    GBHGBC: float = field(default=1.32)  ## ratio of boundary layer conductance for heat to that for CO2 (-)
    forced_coef: float = field(default=0.003)  ## empirical coefficient of the forced convection boundary layer conductance (m s-0.5)
    Gr_coef: float = field(default=1.6e8)  ## coefficient of the Grashof number, g/(T nu^2) at typical air temperatures (m-3 K-1)
    gcond_min: float = field(default=1e-9)  ## vapour conductance (mol m-2 s-1) below which the leaf is treated as fully coupled and not transpiring
    wind_min: float = field(default=0.1)  ## wind speed floor (m s-1)

    def calculate_molar_density_air(self, tair, press, Site):
        """
        Molar density of air, the conversion factor from conductance in m s-1 to mol m-2 s-1

        Parameters
        ----------
        tair: float
            air temperature (degrees Celsius)
        press: float
            atmospheric pressure (Pa)
        Site: ClimateModule
            Site and constants

        Returns
        -------
        cmolar: float
            molar density of air (mol m-3)
        """
        return press / (Site.RGAS * (tair + Site.T_K0))

    def calculate_gb_forced(self, tair, wind, width, press, Site):
        """
        Leaf boundary layer conductance to heat for forced convection (mol m-2 s-1).

        References
        ----------
        Leuning et al. (1995) Plant, Cell and Environment, 18, p. 1183-1200, Appendix E.
        """
        cmolar = self.calculate_molar_density_air(tair, press, Site)
        wind = max(wind, self.wind_min)
        return self.forced_coef * np.sqrt(wind / width) * cmolar

    def calculate_gb_free(self, tair, tleaf, width, press, Site):
        """
        Leaf boundary layer conductance to heat for free convection, driven by the leaf-to-air
        temperature difference (mol m-2 s-1). Zero when the leaf is at air temperature.

        References
        ----------
        Leuning et al. (1995) Plant, Cell and Environment, 18, p. 1183-1200, Appendix E.
        """
        cmolar = self.calculate_molar_density_air(tair, press, Site)
        Gr = self.Gr_coef * np.fabs(tleaf - tair) * width**3  ## Grashof number
        if Gr <= 0.0:
            return 0.0
        return 0.5 * self.DHEAT * Gr**0.25 / width * cmolar

    def calculate_radiation_conductance(self, tair, Site):
        """
        Radiation conductance (mol m-2 s-1), the linearised long-wave exchange expressed as a conductance.

        References
        ----------
        Wang and Leuning (1998) Agricultural and Forest Meteorology, 91, p. 89-111.
        """
        tk = tair + Site.T_K0
        return 4.0 * Site.StefanBoltzmannConstant * tk**3 / (Site.CP * Site.MASS_AIR)

    def penman_leaf(
        self,
        met,    ## HalfHourlyMet
        params, ## PlantParams
        tleaf,  ## leaf temperature (degrees Celsius)
        rnet,   ## isothermal net radiation (W m-2)
        gsc,    ## stomatal conductance to CO2 (mol m-2 s-1)
        Site,   ## ClimateModule
    ):
        """
        Calculates leaf transpiration and the conductances of the leaf boundary layer using the
        Penman-Monteith equation for an isothermal leaf, after Leuning et al. (1995) Appendix E.

        Returns
        -------
        LeafConductances named tuple (transpiration, LE, gbc, gh, gv, omega)
        """
        lambda_ = Site.compute_latent_heat_vaporisation(met.tair)
        gamma = Site.compute_psychometric_constant(met.press, met.tair)
        slope = Site.compute_slope_sat_vapor_press_curve(met.tair)

        gradn = self.calculate_radiation_conductance(met.tair, Site)
        gbhu = self.calculate_gb_forced(met.tair, met.wind, params.leaf_width, met.press, Site)
        gbhf = self.calculate_gb_free(met.tair, tleaf, params.leaf_width, met.press, Site)

        gbh = gbhu + gbhf   ## boundary layer conductance to heat, one side of the leaf
        gh = 2.0 * (gbh + gradn)  ## total conductance to heat, both sides of the leaf
        gbv = self.GBVGBH * gbh
        gsv = self.GSVGSC * gsc
        gbc = gbh / self.GBHGBC

        if gbv + gsv > 0.0:
            gv = (gbv * gsv) / (gbv + gsv)
        else:
            gv = 0.0

        if gv > self.gcond_min:
            LE = (slope * rnet + met.vpd * gh * Site.CP * Site.MASS_AIR) / (slope + gamma * gh / gv)
            epsilon = slope / gamma
            omega = (1.0 + epsilon) / (1.0 + epsilon + gbv / gsv)
        else:
            LE = 0.0
            omega = 0.0

        transpiration = LE / lambda_
        return LeafConductances(transpiration, LE, gbc, gh, gv, omega)
