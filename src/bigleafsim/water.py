"""
Water class: Includes module parameters and calculations involving the soil water balance under the canopy.
"""

import logging
import numpy as np
from attrs import define
from bigleafsim.canopyfluxes import SEC_2_HLFHR

logger = logging.getLogger(__name__)

J_TO_MJ = 1e-6  ## J to MJ


@define
class WaterModule:
    """
    Calculator, parameters and methods for the half-hourly two-bucket soil water balance
    """

    def calculate_water_balance(
        self,
        f,      ## DayFluxes
        met,    ## HalfHourlyMet
        params, ## PlantParams
        state,  ## PlantState
        trans_canopy,   ## Canopy transpiration (mol H2O m-2 s-1)
        omega_canopy,   ## Canopy decoupling coefficient (-)
        rnet_canopy,    ## Canopy isothermal net radiation (W m-2)
        Site,   ## ClimateModule
    ):
        """
        Updates the plant available water of the topsoil and root zone buckets for one half hour, and
        adds the half-hourly water fluxes to the daily totals.

        Rain infiltrates the topsoil first, then the root zone, and anything that does not fit is runoff.
        Transpiration is drawn from the root zone, then from the topsoil once the root zone is empty.
        Soil evaporation is equilibrium evaporation from the net radiation reaching the soil surface,
        scaled by the topsoil stress factor and limited to the water left in the topsoil.

        Returns
        -------
        (transpiration, soil_evap, runoff): tuple of floats
            Water fluxes over the half hour (mm)
        """
        ## Infiltration and runoff
        space_topsoil = max(0.0, params.wcapac_topsoil - state.pawater_topsoil)
        to_topsoil = min(met.rain, space_topsoil)
        state.pawater_topsoil += to_topsoil
        space_root = max(0.0, params.wcapac_root - state.pawater_root)
        to_root = min(met.rain - to_topsoil, space_root)
        state.pawater_root += to_root
        runoff = met.rain - to_topsoil - to_root

        ## Transpiration, kg m-2 is mm
        demand = max(0.0, trans_canopy) * Site.MASS_H2O * SEC_2_HLFHR
        from_root = min(demand, state.pawater_root)
        state.pawater_root -= from_root
        from_topsoil = min(demand - from_root, state.pawater_topsoil)
        state.pawater_topsoil -= from_topsoil
        transpiration = from_root + from_topsoil

        ## Soil evaporation
        soil_evap = self.calculate_soil_evaporation(met, params, state, Site)
        soil_evap = min(soil_evap, state.pawater_topsoil)
        state.pawater_topsoil -= soil_evap

        f.transpiration += transpiration
        f.soil_evap += soil_evap
        f.et += transpiration + soil_evap
        f.runoff += runoff
        f.omega += omega_canopy
        f.rnet_canopy += rnet_canopy * SEC_2_HLFHR * J_TO_MJ

        return (transpiration, soil_evap, runoff)

    def calculate_soil_evaporation(self, met, params, state, Site):
        """
        Potential soil evaporation over one half hour (mm), equilibrium evaporation from the net
        shortwave radiation reaching the soil surface, reduced by topsoil dryness.

        References
        ----------
        Ritchie (1972) Water Resources Research, 8, p. 1204-1213.
        """
        rn_soil = met.sw_rad * (1.0 - params.soil_albedo) * np.exp(-params.kd_black * state.lai)
        if rn_soil <= 0.0:
            return 0.0

        lambda_ = Site.compute_latent_heat_vaporisation(met.tair)
        gamma = Site.compute_psychometric_constant(met.press, met.tair)
        slope = Site.compute_slope_sat_vapor_press_curve(met.tair)

        E = (slope / (slope + gamma)) * rn_soil / lambda_   ## mol H2O m-2 s-1
        return E * Site.MASS_H2O * SEC_2_HLFHR * state.wtfac_topsoil

    def calc_soil_water_potential(self, params, state):
        """
        Soil water potential of the topsoil and root zone buckets (MPa), after Campbell (1974).
        Updates psi_s_topsoil and psi_s_root in the state.

        Returns
        -------
        (psi_s_topsoil, psi_s_root): tuple of floats
        """
        theta_topsoil = params.theta_wp + state.pawater_topsoil / params.topsoil_depth
        theta_root = params.theta_wp + state.pawater_root / params.rooting_depth

        state.psi_s_topsoil = self.soil_water_potential(theta_topsoil, params)
        state.psi_s_root = self.soil_water_potential(theta_root, params)
        logger.debug("Pre-dawn soil water potential topsoil=%.3f root=%.3f MPa", state.psi_s_topsoil, state.psi_s_root)
        return (state.psi_s_topsoil, state.psi_s_root)

    def soil_water_potential(self, theta, params):
        """
        Campbell (1974) soil water retention curve.

        Parameters
        ----------
        theta: float
            Volumetric soil water content (m3 m-3)
        params: PlantParams
            Provides the saturated water content, air-entry potential and retention curve exponent

        Returns
        -------
        Psi_s: float
            Soil water potential (MPa)
        """
        theta = min(max(theta, 1e-6), params.theta_sat)
        return params.Psi_e * (theta / params.theta_sat)**(-params.b_soil)

    def calculate_soil_water_fac(self, params, state):
        """
        Relative water availability factors [0,1] of the topsoil and root zone.

        The factor is the plant available water as a fraction of the available water holding capacity,
        (theta - theta_wp)/(theta_fc - theta_wp). The root zone factor is raised to the exponent qs.

        References
        ----------
        Landsberg and Waring (1997) Forest Ecology and Management, 95, p. 209-228.

        Returns
        -------
        (wtfac_topsoil, wtfac_root): tuple of floats
        """
        smc_topsoil = np.clip(state.pawater_topsoil / params.wcapac_topsoil, 0.0, 1.0)
        smc_root = np.clip(state.pawater_root / params.wcapac_root, 0.0, 1.0)

        wtfac_topsoil = float(smc_topsoil)
        wtfac_root = float(smc_root**params.qs)
        return (wtfac_topsoil, wtfac_root)
