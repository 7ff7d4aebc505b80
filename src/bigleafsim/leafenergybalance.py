"""
Leaf energy balance class: Includes the isothermal net radiation of a big leaf and the update of leaf temperature, leaf surface CO2 and leaf surface vapour pressure deficit from the leaf energy balance
"""

from collections import namedtuple
import numpy as np
from attrs import define, field
from bigleafsim.climate import ClimateModule
from bigleafsim.boundarylayer import BoundaryLayerModule

PAR_2_SW = 1.0 / 2.3  ## PAR (umol m-2 s-1) to shortwave radiation (W m-2)
TDIFF_DAMPING = 4.0  ## divisor on the leaf-to-air temperature difference when updating leaf temperature

LeafEnergyBalanceResult = namedtuple(
    "LeafEnergyBalanceResult",
    ["tleaf_new", "Cs", "dleaf", "transpiration", "omega", "rnet"],
)


@define
class LeafEnergyBalance:
    """
    Leaf energy balance of one big leaf
    """

    Site: ClimateModule = field(factory=ClimateModule)
    BoundaryLayer: BoundaryLayerModule = field(factory=BoundaryLayerModule)

    def isothermal_net_radiation(self, leaf_abs, lai, tair, vpd, sw_rad, kd=0.8):
        """
        Net radiation of a leaf at air temperature.

        Parameters
        ----------
        leaf_abs: float
            Leaf absorptance of shortwave radiation (-)
        lai: float
            Canopy leaf area index (m2 m-2)
        tair: float
            Air temperature (degrees Celsius)
        vpd: float
            Vapour pressure deficit (Pa)
        sw_rad: float
            Shortwave radiation absorbed by the leaf class (W m-2)
        kd: float
            Extinction coefficient for diffuse radiation and black leaves (m2 ground m-2 leaf)

        Returns
        -------
        rnet: float
            Isothermal net radiation (W m-2)

        Notes
        -----
        The apparent emissivity of the atmosphere follows Brutsaert (1975) with vapour pressure in Pa,
        and the net long-wave loss is attenuated through the canopy with the diffuse extinction
        coefficient kd.

        References
        ----------
        Leuning et al. (1995) Plant, Cell and Environment, 18, p. 1183-1200.
        """
        tk = tair + self.Site.T_K0
        ea = max(0.0, self.Site.compute_actual_vapor_pressure_from_vpd(tair, vpd))
        emissivity_atm = 0.642 * (ea / tk)**(1.0 / 7.0)
        net_lw = (1.0 - emissivity_atm) * self.Site.StefanBoltzmannConstant * tk**4
        return leaf_abs * sw_rad - net_lw * kd * np.exp(-kd * lai)

    def resolve_leaf_state(
        self,
        met,    ## HalfHourlyMet
        params, ## PlantParams
        lai,    ## Canopy leaf area index (m2 m-2)
        tleaf,  ## Current leaf temperature (degrees Celsius)
        apar,   ## PAR absorbed by the leaf class (umol m-2 s-1)
        gsc,    ## Stomatal conductance to CO2 (mol m-2 s-1)
        an,     ## Net assimilation rate (umol m-2 s-1)
    ):
        """
        Solves the leaf energy balance at the current leaf temperature for a candidate leaf temperature,
        and the leaf surface CO2 and vapour pressure deficit consistent with the leaf fluxes.

        Returns
        -------
        LeafEnergyBalanceResult named tuple (tleaf_new, Cs, dleaf, transpiration, omega, rnet)
        """
        sw_rad = apar * PAR_2_SW
        rnet = self.isothermal_net_radiation(params.leaf_abs, lai, met.tair, met.vpd, sw_rad, kd=params.kd_black)

        c = self.BoundaryLayer.penman_leaf(met, params, tleaf, rnet, gsc, self.Site)

        Tdiff = (rnet - c.LE) / (self.Site.CP * self.Site.MASS_AIR * c.gh)
        tleaf_new = met.tair + Tdiff / TDIFF_DAMPING

        Cs = met.Ca - an / c.gbc
        if c.gv > 0.0:
            dleaf = c.transpiration * met.press / c.gv
        else:
            dleaf = met.vpd

        return LeafEnergyBalanceResult(tleaf_new, Cs, dleaf, c.transpiration, c.omega, rnet)
