"""
Canopy gas exchange model class: Includes the leaf temperature solver of the two big leaves and the half-hourly daily canopy driver
"""

import enum
import logging
from collections import namedtuple
from typing import Callable
from attrs import define, field
from bigleafsim.utils import LeafClass, FatalModelError, NonConvergenceError, UnimplementedPathwayError
from bigleafsim.control import ControlOptions
from bigleafsim.climate import ClimateModule
from bigleafsim.plant import PlantParams
from bigleafsim.canopyradiation import CanopyRadiation
from bigleafsim.leafgasexchange import LeafGasExchangeModule
from bigleafsim.leafenergybalance import LeafEnergyBalance
from bigleafsim.water import WaterModule
from bigleafsim.canopyfluxes import (
    CanopyWorkspace,
    DayFluxes,
    zero_day_carbon_fluxes,
    zero_day_water_fluxes,
    zero_hour_leaf_fluxes,
    scale_to_canopy,
    accumulate_daily_carbon,
    top_of_canopy_leaf_n,
)

logger = logging.getLogger(__name__)


class LeafSolveState(enum.Enum):
    ITERATING = "iterating"
    CONVERGED = "converged"
    NON_PHOTOSYNTHESIZING = "non-photosynthesizing"


LeafSolveOutcome = namedtuple("LeafSolveOutcome", ["state", "iteration"])


@define
class LeafTemperatureSolver:
    """
    Fixed-point iteration between leaf photosynthesis and the leaf energy balance for one big leaf
    """

    ## Module dependencies
    Leaf: Callable = field(factory=LeafGasExchangeModule)    ## Photosynthesis and stomatal conductance of a leaf class
    EnergyBalance: Callable = field(factory=LeafEnergyBalance)    ## Leaf energy balance

    def solve(
        self,
        cw,     ## CanopyWorkspace
        met,    ## HalfHourlyMet
        params, ## PlantParams
        state,  ## PlantState
        leaf,   ## LeafClass
        iteration,  ## Iteration counter of the current half hour, shared by the leaf classes
        control,    ## ControlOptions
    ):
        """
        Iterates leaf temperature, leaf surface CO2 and leaf surface vapour pressure deficit until the
        leaf temperature changes by less than the tolerance between iterations.

        The iteration counter is passed in and handed back, so the leaf classes solved within one half
        hour share a single budget of control.itermax iterations.

        Returns
        -------
        LeafSolveOutcome named tuple (state, iteration)

        Raises
        ------
        NonConvergenceError
            when the iteration counter reaches control.itermax before the leaf temperature converges
        UnimplementedPathwayError
            when control.ps_pathway is not "C3"
        """
        ## leaf surface starts at ambient conditions
        cw.tleaf = met.tair
        cw.Cs = met.Ca
        cw.dleaf = met.vpd

        solve_state = LeafSolveState.ITERATING
        while solve_state is LeafSolveState.ITERATING:
            self.Leaf.calculate(cw, params, state, leaf, ps_pathway=control.ps_pathway)

            if cw.an_leaf[leaf] <= control.an_threshold:
                solve_state = LeafSolveState.NON_PHOTOSYNTHESIZING
                break

            result = self.EnergyBalance.resolve_leaf_state(
                met, params, state.lai, cw.tleaf, cw.apar_leaf[leaf], cw.gsc_leaf[leaf], cw.an_leaf[leaf],
            )
            cw.tleaf_new = result.tleaf_new
            cw.Cs = result.Cs
            cw.dleaf = result.dleaf
            cw.trans_leaf[leaf] = result.transpiration
            cw.omega_leaf[leaf] = result.omega
            cw.rnet_leaf[leaf] = result.rnet

            if iteration >= control.itermax:
                raise NonConvergenceError(
                    "No convergence in the leaf temperature loop",
                    leaf=leaf.name, iteration=iteration, tleaf=cw.tleaf, tleaf_new=cw.tleaf_new,
                )
            elif abs(cw.tleaf - cw.tleaf_new) < control.tleaf_tolerance:
                solve_state = LeafSolveState.CONVERGED
            else:
                cw.tleaf = cw.tleaf_new
                iteration += 1

        logger.debug("%s leaf %s after %d iterations (Tleaf=%.2f, An=%.3f)", leaf.name, solve_state.value, iteration, cw.tleaf, cw.an_leaf[leaf])
        return LeafSolveOutcome(solve_state, iteration)


@define
class CanopyGasExchange:
    """
    Daily canopy driver: steps through the half hours of one day, solves the two big leaves whenever
    the sun is up, and accumulates the canopy carbon and water fluxes of the day.
    """

    ## Module dependencies
    Site: Callable = field(factory=ClimateModule)    ## Site location, constants, solar geometry and diffuse fraction
    Radiation: Callable = field(factory=CanopyRadiation)    ## Absorbed PAR of the sunlit and shaded leaves
    Water: Callable = field(factory=WaterModule)    ## Soil water balance, soil water potential and stress factors
    Solver: Callable = field()    ## Leaf temperature solver, by default using this Site for the leaf energy balance
    params: PlantParams = field(factory=PlantParams)
    control: ControlOptions = field(factory=ControlOptions)

    @Solver.default
    def _default_solver(self):
        return LeafTemperatureSolver(EnergyBalance=LeafEnergyBalance(Site=self.Site))

    def calculate(
        self,
        met_day,    ## DailyMetForcing
        state,      ## PlantState, soil water potential and stress factors are updated in place
        fluxes=None,    ## DayFluxes to accumulate into, a new accumulator is created if None
    ):
        """
        Canopy carbon and water fluxes for one day of half-hourly forcing.

        Returns
        -------
        fluxes: DayFluxes
            Daily totals. omega is the mean over the sunlit half hours and tsoil the mean over all half hours.

        Raises
        ------
        UnimplementedPathwayError
            when control.ps_pathway is not "C3", before any flux or soil water state is updated
        NonConvergenceError
            when a leaf temperature does not converge, with doy and hod added to the error context
        """
        f = DayFluxes() if fluxes is None else fluxes
        cw = CanopyWorkspace()
        params = self.params
        control = self.control
        doy = met_day.doy

        if met_day.num_hlf_hrs != control.num_hlf_hrs:
            raise ValueError(f"Forcing for day {doy} has {met_day.num_hlf_hrs} half hours, expected {control.num_hlf_hrs}")

        ## no fluxes or soil water are touched for a pathway that cannot be simulated
        if control.ps_pathway != "C3":
            raise UnimplementedPathwayError(f"{control.ps_pathway} photosynthesis not implemented", pathway=control.ps_pathway, doy=doy)

        zero_day_carbon_fluxes(f)
        zero_day_water_fluxes(f)

        for hod in range(control.num_hlf_hrs):
            met = met_day.unpack(hod)
            f.tsoil += met.tsoil

            zero_hour_leaf_fluxes(cw)

            cw.cos_zenith, cw.elevation = self.Site.solar_geometry(doy, hod, control.num_hlf_hrs)
            cw.diffuse_frac = self.Site.diffuse_fraction(doy, met.sw_rad, cw.cos_zenith)
            cw.direct_frac = 1.0 - cw.diffuse_frac

            if cw.elevation > 0.0 and met.par > control.par_threshold:
                self.Radiation.calculate(cw, params, state, met.par)
                cw.N0 = top_of_canopy_leaf_n(params.sla, params.cfracts, state.shootnc, state.lai, kn=params.kn)

                iteration = 0
                for leaf in LeafClass:
                    try:
                        outcome = self.Solver.solve(cw, met, params, state, leaf, iteration, control)
                    except FatalModelError as e:
                        e.context.update(doy=doy, hod=hod)
                        raise
                    iteration = outcome.iteration
                f.sunlight_hrs += 1
            elif hod == control.predawn_hlf_hr:
                self.Water.calc_soil_water_potential(params, state)

            scale_to_canopy(cw)
            accumulate_daily_carbon(cw, f, params.cue)
            self.Water.calculate_water_balance(f, met, params, state, cw.trans_canopy, cw.omega_canopy, cw.rnet_canopy, self.Site)
            f.num_hlf_hrs += 1

        if f.sunlight_hrs > 0:
            f.omega /= f.sunlight_hrs
        else:
            logger.warning("No sunlit half hours on day %s, daily omega set to 0", doy)
            f.omega = 0.0

        f.tsoil /= f.num_hlf_hrs

        if control.water_stress:
            (state.wtfac_topsoil, state.wtfac_root) = self.Water.calculate_soil_water_fac(params, state)
        else:
            logger.debug("Water stress disabled, soil moisture stress factors held at 1")
            state.wtfac_topsoil = 1.0
            state.wtfac_root = 1.0

        logger.debug("Day %s: GPP=%.4f t C ha-1, ET=%.3f mm, %d sunlit half hours", doy, f.gpp, f.et, f.sunlight_hrs)
        return f
