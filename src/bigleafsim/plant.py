"""
Plant class: Includes the plant and soil parameters read by the canopy flux calculations, and the plant/soil state they update
"""

from attrs import define, field, validators


def _positive(instance, attribute, value):
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


@define
class PlantParams:
    """
    Parameters of the canopy, leaf physiology and soil water buckets
    """

    ## Leaf structure and carbon
    sla: float = field(default=5.0, validator=_positive)  ## Specific leaf area (m2 leaf kg-1 DM)
    cfracts: float = field(default=0.5, validator=validators.and_(validators.ge(0.0), validators.le(1.0)))  ## Carbon fraction of dry matter (g C g-1 DM)
    cue: float = field(default=0.5, validator=validators.and_(validators.ge(0.0), validators.le(1.0)))  ## Carbon use efficiency, the fixed ratio of NPP to GPP (-)
    leaf_abs: float = field(default=0.5)  ## Leaf absorptance of shortwave radiation (-)
    leaf_width: float = field(default=0.02, validator=_positive)  ## Leaf dimension in the direction of the wind, used for the leaf boundary layer conductance (m)

    ## Canopy radiation
    kd_black: float = field(default=0.8)  ## Extinction coefficient for diffuse radiation and black leaves (m2 ground m-2 leaf)
    leaf_scatter: float = field(default=0.15)  ## Leaf scattering coefficient for PAR (-), sum of leaf reflectance and transmittance
    kd_scatter: float = field(default=0.719)  ## Extinction coefficient for scattered diffuse PAR (m2 ground m-2 leaf), see De Pury and Farquhar (1997) Table A1
    rho_cd: float = field(default=0.036)  ## Canopy reflection coefficient for diffuse PAR (-)
    kn: float = field(default=0.3)  ## Extinction coefficient for leaf nitrogen within the canopy (-)

    ## C3 photosynthesis
    vcmaxna: float = field(default=31.0)  ## Slope of Vcmax25 on leaf nitrogen (umol CO2 g-1 N s-1)
    vcmaxnb: float = field(default=0.0)   ## Intercept of Vcmax25 on leaf nitrogen (umol CO2 m-2 s-1)
    jmaxna: float = field(default=62.0)   ## Slope of Jmax25 on leaf nitrogen (umol e- g-1 N s-1)
    jmaxnb: float = field(default=0.0)    ## Intercept of Jmax25 on leaf nitrogen (umol e- m-2 s-1)
    eav: float = field(default=51.56)     ## Activation energy of Vcmax (kJ mol-1)
    edv: float = field(default=200.0)     ## Deactivation energy of Vcmax (kJ mol-1)
    delsv: float = field(default=0.62926)  ## Entropy factor of Vcmax (kJ mol-1 K-1)
    eaj: float = field(default=43.79)     ## Activation energy of Jmax (kJ mol-1)
    edj: float = field(default=200.0)     ## Deactivation energy of Jmax (kJ mol-1)
    delsj: float = field(default=0.6443)  ## Entropy factor of Jmax (kJ mol-1 K-1)
    theta_j: float = field(default=0.7)   ## Curvature of the light response of electron transport (-)
    alpha_j: float = field(default=0.26)  ## Quantum yield of electron transport (mol e- mol-1 photon)
    rd_vcmax: float = field(default=0.015)  ## Ratio of leaf respiration in the light to Vcmax (-)
    g0: float = field(default=0.0)   ## Residual stomatal conductance to CO2 (mol m-2 s-1)
    g1: float = field(default=3.8)   ## Slope of the Medlyn et al. (2011) stomatal model (kPa^0.5)

    ## Soil water buckets
    topsoil_depth: float = field(default=300.0, validator=_positive)  ## Depth of the topsoil bucket (mm)
    rooting_depth: float = field(default=1500.0, validator=_positive)  ## Depth of the root zone bucket below the topsoil (mm)
    theta_sat: float = field(default=0.45)  ## Volumetric soil water content at saturation (m3 m-3)
    theta_fc: float = field(default=0.30)   ## Volumetric soil water content at field capacity (m3 m-3)
    theta_wp: float = field(default=0.10)   ## Volumetric soil water content at wilting point (m3 m-3)
    b_soil: float = field(default=5.0)      ## Empirical exponent of the soil water retention curve (-)
    Psi_e: float = field(default=-0.05)     ## Air-entry soil water potential (MPa)
    qs: float = field(default=1.0)          ## Exponent on the root zone water availability factor (-), 1 gives a linear response
    soil_albedo: float = field(default=0.15)  ## Albedo of the soil surface (-)

    @property
    def wcapac_topsoil(self):
        """Plant available water holding capacity of the topsoil (mm)"""
        return (self.theta_fc - self.theta_wp) * self.topsoil_depth

    @property
    def wcapac_root(self):
        """Plant available water holding capacity of the root zone (mm)"""
        return (self.theta_fc - self.theta_wp) * self.rooting_depth


@define
class PlantState:
    """
    State of the canopy and soil that the canopy flux calculations read, and that the soil water routines update
    """
    lai: float = field(default=3.0, validator=validators.ge(0.0))  ## Canopy leaf area index (m2 m-2)
    shootnc: float = field(default=0.03)  ## Leaf nitrogen content, N:C ratio of foliage (g N g-1 C)
    pawater_topsoil: float = field(default=45.0)  ## Plant available water in the topsoil (mm)
    pawater_root: float = field(default=225.0)    ## Plant available water in the root zone (mm)
    psi_s_topsoil: float = field(default=-0.05)   ## Soil water potential of the topsoil (MPa)
    psi_s_root: float = field(default=-0.05)      ## Soil water potential of the root zone (MPa)
    wtfac_topsoil: float = field(default=1.0)     ## Soil moisture stress factor of the topsoil (-)
    wtfac_root: float = field(default=1.0)        ## Soil moisture stress factor of the root zone (-)
