"""
Tests for the leaf temperature convergence solver, using stub photosynthesis and energy balance collaborators.
"""
import attrs
import pytest

from bigleafsim.utils import LeafClass, NonConvergenceError, UnimplementedPathwayError
from bigleafsim.canopyfluxes import CanopyWorkspace
from bigleafsim.canopygasexchange import LeafTemperatureSolver, LeafSolveState
from bigleafsim.leafenergybalance import LeafEnergyBalance, LeafEnergyBalanceResult


class StubLeaf:
    """Photosynthesis with a fixed net assimilation rate"""

    def __init__(self, an=10.0, gsc=0.2):
        self.an = an
        self.gsc = gsc
        self.calls = 0

    def calculate(self, cw, params, state, leaf, ps_pathway="C3"):
        if ps_pathway != "C3":
            raise UnimplementedPathwayError("not implemented", pathway=ps_pathway)
        self.calls += 1
        cw.an_leaf[leaf] = self.an
        cw.gsc_leaf[leaf] = self.gsc


class FlippingLeaf(StubLeaf):
    """Photosynthesis that jumps between two states on alternate calls, as across the light-compensation switch"""

    def calculate(self, cw, params, state, leaf, ps_pathway="C3"):
        self.an, self.gsc = (2.84, 0.08) if self.calls % 2 else (0.10, 0.01)
        super().calculate(cw, params, state, leaf, ps_pathway)


class HalvingEnergyBalance:
    """Candidate leaf temperature halfway between the current leaf temperature and tair + 2"""

    def __init__(self):
        self.calls = 0

    def resolve_leaf_state(self, met, params, lai, tleaf, apar, gsc, an):
        self.calls += 1
        target = met.tair + 2.0
        tleaf_new = tleaf + (target - tleaf) / 2.0
        return LeafEnergyBalanceResult(tleaf_new, met.Ca - 20.0, 900.0, 0.003, 0.4, 150.0)


class OscillatingEnergyBalance:
    """Candidate leaf temperature alternating one degree either side of tair, never settling"""

    def __init__(self):
        self.calls = 0

    def resolve_leaf_state(self, met, params, lai, tleaf, apar, gsc, an):
        self.calls += 1
        tleaf_new = met.tair - 1.0 if tleaf >= met.tair else met.tair + 1.0
        return LeafEnergyBalanceResult(tleaf_new, met.Ca - 20.0, 900.0, 0.003, 0.4, 150.0)


class TestLeafTemperatureSolver:
    """Convergence, non-photosynthesizing exit and the iteration ceiling"""

    @pytest.fixture
    def cw(self):
        cw = CanopyWorkspace()
        cw.apar_leaf[:] = [800.0, 200.0]
        return cw

    def test_converges(self, cw, met, params, state, control):
        eb = HalvingEnergyBalance()
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=eb)
        outcome = solver.solve(cw, met, params, state, LeafClass.SUNLIT, 0, control)

        ## |tleaf - tleaf_new| is 1, 0.5, ... and drops below 0.02 on the seventh energy balance
        assert outcome.state is LeafSolveState.CONVERGED
        assert outcome.iteration == 6
        assert eb.calls == 7
        assert cw.tleaf == pytest.approx(met.tair + 2.0 - 2.0**-5)
        assert cw.trans_leaf[LeafClass.SUNLIT] == 0.003
        assert cw.omega_leaf[LeafClass.SUNLIT] == 0.4
        assert cw.rnet_leaf[LeafClass.SUNLIT] == 150.0
        assert cw.Cs == met.Ca - 20.0
        assert cw.dleaf == 900.0

    def test_seeds_leaf_surface_from_air(self, cw, met, params, state, control):
        cw.tleaf, cw.Cs, cw.dleaf = 40.0, 100.0, 5.0
        solver = LeafTemperatureSolver(Leaf=StubLeaf(an=0.0), EnergyBalance=HalvingEnergyBalance())
        solver.solve(cw, met, params, state, LeafClass.SHADED, 0, control)
        assert cw.tleaf == met.tair
        assert cw.Cs == met.Ca
        assert cw.dleaf == met.vpd

    @pytest.mark.parametrize("an", [0.0, -1.5, 1e-4])
    def test_non_photosynthesizing_leaf_exits_without_energy_balance(self, cw, met, params, state, control, an):
        eb = HalvingEnergyBalance()
        solver = LeafTemperatureSolver(Leaf=StubLeaf(an=an), EnergyBalance=eb)
        outcome = solver.solve(cw, met, params, state, LeafClass.SHADED, 3, control)
        assert outcome.state is LeafSolveState.NON_PHOTOSYNTHESIZING
        assert outcome.iteration == 3
        assert eb.calls == 0
        assert cw.trans_leaf[LeafClass.SHADED] == 0.0

    def test_fails_at_exactly_the_ceiling(self, cw, met, params, state, control):
        eb = OscillatingEnergyBalance()
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=eb)
        with pytest.raises(NonConvergenceError) as excinfo:
            solver.solve(cw, met, params, state, LeafClass.SUNLIT, 0, control)

        assert excinfo.value.context["iteration"] == control.itermax == 100
        assert excinfo.value.context["leaf"] == "SUNLIT"
        ## iterations 0..100 each solve the energy balance once, never beyond
        assert eb.calls == control.itermax + 1

    def test_alternating_assimilation_never_converges(self, cw, met, params, state, control):
        ## a leaf flipping between two photosynthetic states drives the real energy balance into a two-cycle
        solver = LeafTemperatureSolver(Leaf=FlippingLeaf(), EnergyBalance=LeafEnergyBalance())
        with pytest.raises(NonConvergenceError) as excinfo:
            solver.solve(cw, met, params, state, LeafClass.SHADED, 0, control)

        context = excinfo.value.context
        assert context["iteration"] == 100
        assert context["leaf"] == "SHADED"
        assert abs(context["tleaf"] - context["tleaf_new"]) > control.tleaf_tolerance

    def test_ceiling_checked_before_convergence(self, cw, met, params, state, control):
        ## a leaf that would converge straight away still fails when no iterations are left
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=HalvingEnergyBalance())
        converging_at_once = attrs.evolve(control, tleaf_tolerance=10.0)
        with pytest.raises(NonConvergenceError):
            solver.solve(cw, met, params, state, LeafClass.SHADED, 100, converging_at_once)

    def test_counter_shared_between_leaf_classes(self, cw, met, params, state, control):
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=HalvingEnergyBalance())
        sunlit = solver.solve(cw, met, params, state, LeafClass.SUNLIT, 0, control)
        shaded = solver.solve(cw, met, params, state, LeafClass.SHADED, sunlit.iteration, control)
        assert sunlit.iteration == 6
        assert shaded.iteration == 12

    def test_shaded_leaf_inherits_exhausted_budget(self, cw, met, params, state, control):
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=HalvingEnergyBalance())
        small_budget = attrs.evolve(control, itermax=10)
        sunlit = solver.solve(cw, met, params, state, LeafClass.SUNLIT, 0, small_budget)
        assert sunlit.state is LeafSolveState.CONVERGED
        with pytest.raises(NonConvergenceError) as excinfo:
            solver.solve(cw, met, params, state, LeafClass.SHADED, sunlit.iteration, small_budget)
        assert excinfo.value.context["iteration"] == 10

    def test_unimplemented_pathway(self, cw, met, params, state, control):
        solver = LeafTemperatureSolver(Leaf=StubLeaf(), EnergyBalance=HalvingEnergyBalance())
        with pytest.raises(UnimplementedPathwayError):
            solver.solve(cw, met, params, state, LeafClass.SUNLIT, 0, attrs.evolve(control, ps_pathway="C4"))
