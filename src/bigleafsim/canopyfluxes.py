"""
Canopy fluxes: Includes the canopy workspace, the daily flux accumulator and the operations that reset, scale and accumulate two-leaf fluxes
"""

import numpy as np
from attrs import define, field
from bigleafsim.utils import LeafClass, NUM_LEAVES

## Unit conversions
UMOL_TO_MOL = 1e-6  ## umol to mol
MOL_C_TO_GRAMS_C = 12.0  ## mol C to g C
SEC_2_HLFHR = 1800.0  ## seconds in one half-hour time step
GRAM_C_2_TONNES_HA = 0.01  ## g C m-2 to t C ha-1
KG_AS_G = 1000.0  ## kg to g


def _leaf_array():
    return np.zeros(NUM_LEAVES)


@define
class CanopyWorkspace:
    """
    Working state of the two-leaf canopy for one simulated day. Per-leaf arrays are indexed by LeafClass.
    """

    ## Radiation
    elevation: float = field(default=0.0)  ## Solar elevation angle (radians)
    cos_zenith: float = field(default=0.0)  ## Cosine of the solar zenith angle (-)
    diffuse_frac: float = field(default=1.0)  ## Diffuse fraction of incident radiation (-)
    direct_frac: float = field(default=0.0)  ## Direct beam fraction of incident radiation (-)

    ## Per-leaf fluxes
    apar_leaf: np.ndarray = field(factory=_leaf_array)  ## Absorbed PAR (umol m-2 s-1)
    an_leaf: np.ndarray = field(factory=_leaf_array)  ## Net assimilation rate (umol m-2 s-1)
    gsc_leaf: np.ndarray = field(factory=_leaf_array)  ## Stomatal conductance to CO2 (mol m-2 s-1)
    rnet_leaf: np.ndarray = field(factory=_leaf_array)  ## Isothermal net radiation (W m-2)
    trans_leaf: np.ndarray = field(factory=_leaf_array)  ## Transpiration (mol H2O m-2 s-1)
    omega_leaf: np.ndarray = field(factory=_leaf_array)  ## Decoupling coefficient (-)
    lai_leaf: np.ndarray = field(factory=_leaf_array)  ## Leaf area index of each leaf class (m2 m-2)
    cscalar: np.ndarray = field(factory=_leaf_array)  ## Leaf-to-canopy scaling of top-of-canopy leaf nitrogen (m2 m-2)

    ## Leaf surface working values for the leaf currently being solved
    tleaf: float = field(default=0.0)  ## Current leaf temperature (degrees Celsius)
    tleaf_new: float = field(default=0.0)  ## Candidate leaf temperature (degrees Celsius)
    Cs: float = field(default=0.0)  ## Leaf surface CO2 concentration (umol mol-1)
    dleaf: float = field(default=0.0)  ## Leaf surface vapour pressure deficit (Pa)
    N0: float = field(default=0.0)  ## Top-of-canopy leaf nitrogen (g N m-2)

    ## Canopy totals for the current half hour
    an_canopy: float = field(default=0.0)
    gsc_canopy: float = field(default=0.0)
    apar_canopy: float = field(default=0.0)
    trans_canopy: float = field(default=0.0)
    omega_canopy: float = field(default=0.0)
    rnet_canopy: float = field(default=0.0)


@define
class DayFluxes:
    """
    Daily flux accumulator, owned by the enclosing simulation
    """

    ## Carbon
    gpp_gCm2: float = field(default=0.0)  ## Gross primary production (g C m-2 d-1)
    npp_gCm2: float = field(default=0.0)  ## Net primary production (g C m-2 d-1)
    gpp: float = field(default=0.0)  ## Gross primary production (t C ha-1 d-1)
    npp: float = field(default=0.0)  ## Net primary production (t C ha-1 d-1)
    auto_resp: float = field(default=0.0)  ## Autotrophic respiration (t C ha-1 d-1)
    apar: float = field(default=0.0)  ## Sum of half-hourly canopy APAR (umol m-2 s-1)
    gs_mol_m2_sec: float = field(default=0.0)  ## Sum of half-hourly canopy stomatal conductance to CO2 (mol m-2 s-1)

    ## Water
    transpiration: float = field(default=0.0)  ## Canopy transpiration (mm d-1)
    soil_evap: float = field(default=0.0)  ## Soil evaporation (mm d-1)
    et: float = field(default=0.0)  ## Evapotranspiration (mm d-1)
    runoff: float = field(default=0.0)  ## Runoff (mm d-1)
    omega: float = field(default=0.0)  ## Decoupling coefficient, summed over the day and averaged over sunlit half hours at day end (-)
    rnet_canopy: float = field(default=0.0)  ## Canopy isothermal net radiation (MJ m-2 d-1)

    ## Day diagnostics
    tsoil: float = field(default=0.0)  ## Soil temperature, summed over the day and averaged at day end (degrees Celsius)
    sunlight_hrs: int = field(default=0)  ## Number of half hours with the sun up
    num_hlf_hrs: int = field(default=0)  ## Number of half hours simulated


def zero_day_carbon_fluxes(f):
    """Resets the daily carbon accumulators at the start of a day"""
    f.gpp_gCm2 = 0.0
    f.npp_gCm2 = 0.0
    f.gpp = 0.0
    f.npp = 0.0
    f.auto_resp = 0.0
    f.apar = 0.0
    f.gs_mol_m2_sec = 0.0


def zero_day_water_fluxes(f):
    """Resets the daily water accumulators and day diagnostics at the start of a day"""
    f.transpiration = 0.0
    f.soil_evap = 0.0
    f.et = 0.0
    f.runoff = 0.0
    f.omega = 0.0
    f.rnet_canopy = 0.0
    f.tsoil = 0.0
    f.sunlight_hrs = 0
    f.num_hlf_hrs = 0


def zero_hour_leaf_fluxes(cw):
    """Resets every per-leaf flux to zero, e.g. when the sun is down"""
    for leaf in LeafClass:
        cw.an_leaf[leaf] = 0.0
        cw.gsc_leaf[leaf] = 0.0
        cw.trans_leaf[leaf] = 0.0
        cw.rnet_leaf[leaf] = 0.0
        cw.apar_leaf[leaf] = 0.0
        cw.omega_leaf[leaf] = 0.0


def scale_to_canopy(cw):
    """
    Canopy totals from the two big leaves: sums for the fluxes, arithmetic mean for the decoupling coefficient.
    """
    cw.an_canopy = cw.an_leaf[LeafClass.SUNLIT] + cw.an_leaf[LeafClass.SHADED]
    cw.gsc_canopy = cw.gsc_leaf[LeafClass.SUNLIT] + cw.gsc_leaf[LeafClass.SHADED]
    cw.apar_canopy = cw.apar_leaf[LeafClass.SUNLIT] + cw.apar_leaf[LeafClass.SHADED]
    cw.trans_canopy = cw.trans_leaf[LeafClass.SUNLIT] + cw.trans_leaf[LeafClass.SHADED]
    cw.omega_canopy = (cw.omega_leaf[LeafClass.SUNLIT] + cw.omega_leaf[LeafClass.SHADED]) / 2.0
    cw.rnet_canopy = cw.rnet_leaf[LeafClass.SUNLIT] + cw.rnet_leaf[LeafClass.SHADED]


def half_hour_carbon_gain(an_canopy):
    """Converts canopy net assimilation (umol m-2 s-1) to carbon gained over one half hour (g C m-2)"""
    return an_canopy * UMOL_TO_MOL * MOL_C_TO_GRAMS_C * SEC_2_HLFHR


def accumulate_daily_carbon(cw, f, cue):
    """
    Adds the half-hourly canopy carbon fluxes to the daily totals.

    Parameters
    ----------
    cw: CanopyWorkspace
        Workspace holding this half hour's canopy totals
    f: DayFluxes
        Daily accumulator
    cue: float
        Carbon use efficiency (-)
    """
    f.gpp_gCm2 += half_hour_carbon_gain(cw.an_canopy)
    f.npp_gCm2 = f.gpp_gCm2 * cue
    f.gpp = f.gpp_gCm2 * GRAM_C_2_TONNES_HA
    f.npp = f.npp_gCm2 * GRAM_C_2_TONNES_HA
    f.auto_resp = f.gpp - f.npp
    f.apar += cw.apar_canopy
    f.gs_mol_m2_sec += cw.gsc_canopy


def top_of_canopy_leaf_n(sla, cfracts, shootnc, lai, kn=0.3):
    """
    Leaf nitrogen at the top of the canopy, assuming nitrogen declines exponentially with cumulative
    leaf area from the canopy top.

    Parameters
    ----------
    sla: float
        Specific leaf area (m2 leaf kg-1 DM)
    cfracts: float
        Carbon fraction of dry matter (-)
    shootnc: float
        Leaf N:C ratio (g N g-1 C)
    lai: float
        Canopy leaf area index (m2 m-2)
    kn: float
        Extinction coefficient for nitrogen (-)

    Returns
    -------
    N0: float
        Top-of-canopy leaf nitrogen (g N m-2 leaf). Zero when there is no canopy.

    References
    ----------
    Chen et al. (1993) Oecologia, 93, p. 63-69.
    """
    if lai <= 0.0:
        return 0.0

    LMA = 1.0 / sla * cfracts * KG_AS_G  ## leaf mass per area (g C m-2 leaf)
    Ntot = shootnc * LMA * lai  ## total canopy nitrogen (g N m-2 ground)
    return Ntot * kn / (1.0 - np.exp(-kn * lai))
