"""
Leaf gas exchange model class: Includes equations, calculators, and parameters
"""

import logging
import numpy as np
from attrs import define, field
from bigleafsim.biophysics_funcs import fT_arrhenius, fT_arrheniuspeaked
from bigleafsim.utils import UnimplementedPathwayError

logger = logging.getLogger(__name__)


@define
class LeafGasExchangeModule:
    """
    Calculator of C3 leaf photosynthesis and stomatal conductance for one big leaf
    """

    ## Biochemical constants at 25oC and their activation energies (Bernacchi et al., 2001)
    Kc_25: float = field(default=404.9)   ## Michaelis-Menten constant for CO2, umol mol-1
    Ko_25: float = field(default=278.4)   ## Michaelis-Menten constant for O2, mmol mol-1
    gamma_star_25: float = field(default=42.75)  ## CO2 compensation point in the absence of Rd, umol mol-1
    Kc_Ea: float = field(default=79.43)   ## activation energy of Kc, kJ mol-1
    Ko_Ea: float = field(default=36.38)   ## activation energy of Ko, kJ mol-1
    gamma_star_Ea: float = field(default=37.83)  ## activation energy of gamma_star, kJ mol-1
    Oi: float = field(default=210.0)      ## intercellular O2 concentration, mmol mol-1

    atheta: float = field(default=1-1e-04)  ## Empirical smoothing parameter for the co-limitation of Ac and Aj
    VPDmin: float = field(default=0.05)  ## Below VPDmin (kPa), VPD=VPDmin, to avoid very high gs, see Duursma (2015, doi: 10.1371/journal.pone.0143346)

    def calculate(
        self,
        cw,     ## CanopyWorkspace, provides tleaf, Cs, dleaf, N0 and the per-leaf radiation
        params, ## PlantParams
        state,  ## PlantState, provides the root zone soil moisture stress factor
        leaf,   ## LeafClass being solved
        ps_pathway="C3",    ## Photosynthetic pathway
    ):
        """
        Net assimilation and stomatal conductance to CO2 of one leaf class at the current leaf
        temperature, leaf surface CO2 and leaf surface vapour pressure deficit. Writes an_leaf
        (umol m-2 s-1) and gsc_leaf (mol m-2 s-1) in the workspace.
        """
        if ps_pathway != "C3":
            raise UnimplementedPathwayError(f"{ps_pathway} photosynthesis not implemented", pathway=ps_pathway, leaf=leaf.name)

        Q = cw.apar_leaf[leaf]
        cscalar = cw.cscalar[leaf]
        if Q <= 0.0 or cscalar <= 0.0:
            cw.an_leaf[leaf] = 0.0
            cw.gsc_leaf[leaf] = 0.0
            return

        T = cw.tleaf
        Cs = max(cw.Cs, 1.0)

        # Photosynthetic capacity of the leaf class from top-of-canopy leaf N
        Vcmax25 = (params.vcmaxna * cw.N0 + params.vcmaxnb) * cscalar
        Jmax25 = (params.jmaxna * cw.N0 + params.jmaxnb) * cscalar
        Vcmax = fT_arrheniuspeaked(Vcmax25,T,E_a=params.eav,H_d=params.edv,DeltaS=params.delsv)
        Jmax = fT_arrheniuspeaked(Jmax25,T,E_a=params.eaj,H_d=params.edj,DeltaS=params.delsj)
        Rd = params.rd_vcmax * Vcmax

        Kc = fT_arrhenius(self.Kc_25,T,E_a=self.Kc_Ea)
        Ko = fT_arrhenius(self.Ko_25,T,E_a=self.Ko_Ea)
        Km = Kc*(1+self.Oi/Ko)
        Gamma_star = fT_arrhenius(self.gamma_star_25,T,E_a=self.gamma_star_Ea)

        VPD = max(cw.dleaf*1e-3, self.VPDmin)   ## leaf surface VPD, kPa
        g1 = params.g1 * state.wtfac_root
        GsDIVA = (1 + g1/np.sqrt(VPD))/Cs

        J = self.Jfun(Q,Jmax,params.alpha_j,params.theta_j)
        Vj = J/4

        # Solve for Ci under both limiting rate conditions
        Ci_c = self.getCi_c(Vj,GsDIVA,Q,Cs,Rd,Vcmax,Km,Gamma_star,params.g0)
        Ci_j = self.getCi_j(Vj,GsDIVA,Q,Cs,Rd,Vcmax,Km,Gamma_star,params.g0)

        Ac = Vcmax*(Ci_c - Gamma_star)/(Ci_c + Km)
        Aj = Vj*(Ci_j - Gamma_star)/(Ci_j + 2*Gamma_star)

        ## When below the light-compensation point, assume Ci=Cs
        Aj = self.adjust_for_lcp(Aj,Rd,Cs,Gamma_star,Vj)

        ## Hyperbolic minimum of Ac and Aj
        Am = self.hyperbolic_min_Ac_Aj(Ac, Aj)

        An = Am - Rd
        gsc = max(params.g0, params.g0 + GsDIVA*An)

        cw.an_leaf[leaf] = An
        cw.gsc_leaf[leaf] = gsc

    def Jfun(self, Q, Jmax, alpha, theta):
        """
        Electron transport rate from non-rectangular hyperbola

        References
        ----------
        von Caemmerer, 2000, S. Biochemical models of leaf photosynthesis. CSIRO Publishing, Australia
        """
        J = (alpha*Q + Jmax - np.sqrt((alpha*Q + Jmax)**2 - 4*alpha*theta*Q*Jmax))/(2*theta)
        return J

    def getCi_c(self,Vj,GsDIVA,Q,Ca,Rd,Vcmax,Km,Gamma_star,g0):
        """Ci when Rubisco activity is limiting, the larger root of the combined photosynthesis and stomatal conductance equations"""
        if (Vj == 0) or (Q == 0):
            return Ca

        a = g0 + GsDIVA * (Vcmax - Rd)
        b = (1 - Ca*GsDIVA) * (Vcmax - Rd) + g0*(Km - Ca) - GsDIVA*(Vcmax*Gamma_star + Km*Rd)
        c = -(1 - Ca*GsDIVA) * (Vcmax*Gamma_star + Km*Rd) - g0*Km*Ca
        return self.quadp(a,b,c)

    def getCi_j(self,Vj,GsDIVA,Q,Ca,Rd,Vcmax,Km,Gamma_star,g0):
        """Ci when electron transport is limiting, the larger root of the combined photosynthesis and stomatal conductance equations"""
        if (Vj == 0) or (Q == 0):
            return Ca

        a = g0 + GsDIVA * (Vj - Rd)
        b = (1 - Ca*GsDIVA) * (Vj - Rd) + g0 * (2.*Gamma_star - Ca) - GsDIVA * (Vj*Gamma_star + 2.*Gamma_star*Rd)
        c = -(1 - Ca*GsDIVA) * Gamma_star * (Vj + 2*Rd) - g0*2*Gamma_star*Ca
        return self.quadp(a,b,c)

    def adjust_for_lcp(self, Aj, Rd, Cs, Gamma_star, Vj):
        """
        Electron transport limited photosynthetic rate at Ci=Cs when below the light-compensation point.

        References
        ----------
        Duursma, 2015, doi: 10.1371/journal.pone.0143346
        """
        if Aj <= Rd + 1e-09:
            Aj = max(0, Vj * (Cs - Gamma_star) / (Cs + 2 * Gamma_star))
        return Aj

    def hyperbolic_min_Ac_Aj(self, Ac, Aj):
        """Hyperbolic minimum between Ac and Aj"""
        return -self.quadp(self.atheta, Ac+Aj, Ac*Aj)

    def quadp(self, a, b, c):
        """
        Returns the larger root of the quadratic equation ax^2 + bx + c = 0.
        If the roots are imaginary, logs a warning and returns 0.
        Handles cases when a or b are zero.
        """
        discriminant = b**2 - 4*a*c
        if discriminant < 0:
            logger.warning("Imaginary roots in quadratic (a=%g, b=%g, c=%g)", a, b, c)
            return 0

        if a == 0:
            if b == 0:
                return 0
            else:
                return -c / b
        else:
            return (-b + np.sqrt(discriminant)) / (2 * a)

