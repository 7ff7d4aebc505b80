"""
Canopy radiative transfer model class: Includes equations, calculators, and parameters
"""

import logging
import numpy as np
from attrs import define, field
from bigleafsim.utils import LeafClass

logger = logging.getLogger(__name__)


@define
class CanopyRadiation:
    """
    Calculator of the PAR absorbed by the sunlit and shaded big leaves of the canopy

    References
    ----------
    De Pury and Farquhar (1997) Plant, Cell and Environment, 20, p. 537-557.
    Wang and Leuning (1998) Agricultural and Forest Meteorology, 91, p. 89-111.
    """

    # Class parameters
    G_theta: float = field(default=0.5)  ## Projected leaf area in the direction of the sun per unit leaf area (-), 0.5 for a spherical leaf angle distribution
    cos_zenith_min: float = field(default=1e-3)  ## Lower limit on the cosine of the solar zenith angle, keeps the beam extinction coefficient finite near the horizon

    def calculate(
        self,
        cw,     ## CanopyWorkspace, holds the solar geometry and receives the per-leaf results
        params, ## PlantParams
        state,  ## PlantState
        par,    ## Incident PAR above the canopy, umol m-2 s-1
    ):
        """
        Partitions incident PAR into the amounts absorbed by the sunlit and shaded leaves, and sets the
        leaf area and nitrogen scaling of each leaf class. Writes apar_leaf, lai_leaf and cscalar in
        the workspace.
        """
        L = state.lai
        if L <= 0.0:
            for leaf in LeafClass:
                cw.apar_leaf[leaf] = 0.0
                cw.lai_leaf[leaf] = 0.0
                cw.cscalar[leaf] = 0.0
            return

        kb = self.beam_extinction_coefficient(cw.cos_zenith)
        sigma = params.leaf_scatter
        kb_scat = kb * np.sqrt(1.0 - sigma)   ## beam and scattered beam extinction coefficient
        kd_scat = params.kd_scatter
        rho_cb = self.canopy_beam_reflection(kb, sigma)

        Ib = par * cw.direct_frac
        Id = par * cw.diffuse_frac

        ## Total absorbed by the canopy
        Ic = ((1.0 - rho_cb) * Ib * (1.0 - np.exp(-kb_scat * L)) +
              (1.0 - params.rho_cd) * Id * (1.0 - np.exp(-kd_scat * L)))

        ## Absorbed by the sunlit leaves: direct beam, diffuse and scattered beam
        Isun_beam = Ib * (1.0 - sigma) * (1.0 - np.exp(-kb * L))
        Isun_diffuse = (Id * (1.0 - params.rho_cd) * (1.0 - np.exp(-(kd_scat + kb) * L)) *
                        kd_scat / (kd_scat + kb))
        Isun_scattered = Ib * ((1.0 - rho_cb) * (1.0 - np.exp(-(kb_scat + kb) * L)) *
                               kb_scat / (kb_scat + kb) -
                               (1.0 - sigma) * (1.0 - np.exp(-2.0 * kb * L)) / 2.0)
        Isun = Isun_beam + Isun_diffuse + Isun_scattered

        cw.apar_leaf[LeafClass.SUNLIT] = max(0.0, Isun)
        cw.apar_leaf[LeafClass.SHADED] = max(0.0, Ic - Isun)

        lai_sun = (1.0 - np.exp(-kb * L)) / kb
        cw.lai_leaf[LeafClass.SUNLIT] = lai_sun
        cw.lai_leaf[LeafClass.SHADED] = L - lai_sun

        cscalar_sun, cscalar_sha = self.leaf_to_canopy_scalar(L, kb, params.kn)
        cw.cscalar[LeafClass.SUNLIT] = cscalar_sun
        cw.cscalar[LeafClass.SHADED] = cscalar_sha

        logger.debug("APAR sunlit=%.2f shaded=%.2f (PAR=%.2f, kb=%.3f)", cw.apar_leaf[LeafClass.SUNLIT], cw.apar_leaf[LeafClass.SHADED], par, kb)

    def beam_extinction_coefficient(self, cos_zenith):
        """
        Extinction coefficient for direct beam radiation and black leaves (-).
        """
        return self.G_theta / max(cos_zenith, self.cos_zenith_min)

    def canopy_beam_reflection(self, kb, sigma):
        """
        Canopy reflection coefficient for beam PAR (-), De Pury and Farquhar (1997) Eq. A19 and A20.
        """
        rho_h = (1.0 - np.sqrt(1.0 - sigma)) / (1.0 + np.sqrt(1.0 - sigma))
        return 1.0 - np.exp(-2.0 * rho_h * kb / (1.0 + kb))

    def leaf_to_canopy_scalar(self, L, kb, kn):
        """
        Scaling from top-of-canopy leaf nitrogen to the sunlit and shaded leaf totals,
        assuming nitrogen declines exponentially through the canopy.

        Parameters
        ----------
        L: float
            Canopy leaf area index (m2 m-2)
        kb: float
            Beam extinction coefficient (-)
        kn: float
            Nitrogen extinction coefficient (-)

        Returns
        -------
        (cscalar_sun, cscalar_sha): tuple of floats

        References
        ----------
        Wang and Leuning (1998), Appendix C.
        """
        cscalar_sun = (1.0 - np.exp(-(kn + kb) * L)) / (kn + kb)
        cscalar_canopy = (1.0 - np.exp(-kn * L)) / kn
        return (cscalar_sun, cscalar_canopy - cscalar_sun)
