"""
Simulation class: Runs the daily canopy driver over a sequence of days and collects the daily totals
"""

import logging
import numpy as np
from typing import Callable
from attrs import define, field
from bigleafsim.plant import PlantState
from bigleafsim.canopyfluxes import DayFluxes
from bigleafsim.canopygasexchange import CanopyGasExchange
from bigleafsim.utils import FatalModelError

logger = logging.getLogger(__name__)

OUTPUT_VARIABLES = ("doy", "gpp", "npp", "auto_resp", "apar", "gs", "transpiration", "soil_evap", "et", "runoff", "omega", "sunlight_hrs", "wtfac_topsoil", "wtfac_root")


@define
class CanopyFluxSimulation:
    """
    Multi-day run of the canopy flux calculations
    """

    ## Module dependencies
    Canopy: Callable = field(factory=CanopyGasExchange)    ## Daily canopy driver
    state: PlantState = field(factory=PlantState)    ## Plant and soil state carried from one day to the next

    def run(self, forcing):
        """
        Runs the daily canopy driver for each day of forcing, in order.

        Parameters
        ----------
        forcing: iterable of DailyMetForcing
            Half-hourly forcing, one element per day

        Returns
        -------
        output: dict of ndarray
            Daily time series of the variables in OUTPUT_VARIABLES, one element per day

        Raises
        ------
        FatalModelError
            logged at CRITICAL and re-raised, the run stops at the first unrecoverable error
        """
        rows = {name: [] for name in OUTPUT_VARIABLES}
        for met_day in forcing:
            f = DayFluxes()
            try:
                self.Canopy.calculate(met_day, self.state, f)
            except FatalModelError as e:
                logger.critical("Simulation stopped on day %s: %s", met_day.doy, e)
                raise

            rows["doy"].append(met_day.doy)
            rows["gpp"].append(f.gpp)
            rows["npp"].append(f.npp)
            rows["auto_resp"].append(f.auto_resp)
            rows["apar"].append(f.apar)
            rows["gs"].append(f.gs_mol_m2_sec)
            rows["transpiration"].append(f.transpiration)
            rows["soil_evap"].append(f.soil_evap)
            rows["et"].append(f.et)
            rows["runoff"].append(f.runoff)
            rows["omega"].append(f.omega)
            rows["sunlight_hrs"].append(f.sunlight_hrs)
            rows["wtfac_topsoil"].append(self.state.wtfac_topsoil)
            rows["wtfac_root"].append(self.state.wtfac_root)
            logger.info("Day %s done: GPP=%.4f t C ha-1, ET=%.3f mm", met_day.doy, f.gpp, f.et)

        return {name: np.array(values) for name, values in rows.items()}
