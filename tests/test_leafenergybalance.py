"""
Tests for the leaf energy balance and the Penman leaf conductance solver.
"""
import attrs
import numpy as np
import pytest

from bigleafsim.climate import ClimateModule
from bigleafsim.boundarylayer import BoundaryLayerModule
from bigleafsim.leafenergybalance import LeafEnergyBalance, PAR_2_SW


class TestIsothermalNetRadiation:
    """Net radiation of a leaf at air temperature"""

    @pytest.fixture
    def eb(self):
        return LeafEnergyBalance()

    def test_deterministic(self, eb):
        r1 = eb.isothermal_net_radiation(0.5, 3.0, 22.0, 1200.0, 350.0)
        r2 = eb.isothermal_net_radiation(0.5, 3.0, 22.0, 1200.0, 350.0)
        assert r1 == r2

    def test_decreasing_in_vpd(self, eb):
        vpds = np.linspace(0.0, 2500.0, 26)
        rnet = [eb.isothermal_net_radiation(0.5, 3.0, 25.0, vpd, 300.0) for vpd in vpds]
        assert np.all(np.diff(rnet) < 0.0)

    def test_increasing_in_shortwave(self, eb):
        sws = np.linspace(0.0, 1000.0, 21)
        rnet = [eb.isothermal_net_radiation(0.5, 3.0, 25.0, 1500.0, sw) for sw in sws]
        assert np.all(np.diff(rnet) > 0.0)

    def test_value(self, eb):
        site = ClimateModule()
        tair, vpd, lai = 20.0, 1000.0, 2.0
        tk = tair + 273.15
        ea = site.compute_sat_vapor_pressure(tair) - vpd
        emissivity = 0.642 * (ea / tk)**(1.0 / 7.0)
        net_lw = (1.0 - emissivity) * 5.6704e-8 * tk**4
        expected = 0.5 * 400.0 - net_lw * 0.8 * np.exp(-0.8 * lai)
        assert eb.isothermal_net_radiation(0.5, lai, tair, vpd, 400.0) == pytest.approx(expected, rel=1e-12)

    def test_longwave_loss_shrinks_with_lai(self, eb):
        ## at night only the long-wave loss remains, and a denser canopy shields the leaf from the sky
        sparse = eb.isothermal_net_radiation(0.5, 0.5, 15.0, 800.0, 0.0)
        dense = eb.isothermal_net_radiation(0.5, 5.0, 15.0, 800.0, 0.0)
        assert sparse < dense < 0.0

    def test_dry_air_beyond_saturation_stays_finite(self, eb):
        ## a vapour pressure deficit above saturation gives zero vapour pressure and the driest sky emissivity
        rnet = eb.isothermal_net_radiation(0.5, 3.0, 10.0, 5000.0, 200.0)
        assert np.isfinite(rnet)
        assert rnet == pytest.approx(100.0 - 5.6704e-8 * 283.15**4 * 0.8 * np.exp(-2.4), rel=1e-9)

    def test_extinction_coefficient(self, eb):
        default = eb.isothermal_net_radiation(0.5, 3.0, 20.0, 1000.0, 0.0)
        assert eb.isothermal_net_radiation(0.5, 3.0, 20.0, 1000.0, 0.0, kd=0.8) == default
        assert eb.isothermal_net_radiation(0.5, 3.0, 20.0, 1000.0, 0.0, kd=0.5) != pytest.approx(default)


class TestResolveLeafState:
    """Candidate leaf temperature, surface CO2 and surface VPD from the leaf energy balance"""

    @pytest.fixture
    def eb(self):
        return LeafEnergyBalance()

    def test_damped_temperature_update(self, eb, met, params):
        tleaf, apar, gsc, an = 26.0, 800.0, 0.25, 15.0
        result = eb.resolve_leaf_state(met, params, 3.0, tleaf, apar, gsc, an)

        rnet = eb.isothermal_net_radiation(params.leaf_abs, 3.0, met.tair, met.vpd, apar * PAR_2_SW)
        c = eb.BoundaryLayer.penman_leaf(met, params, tleaf, rnet, gsc, eb.Site)
        Tdiff = (rnet - c.LE) / (eb.Site.CP * eb.Site.MASS_AIR * c.gh)

        assert result.rnet == pytest.approx(rnet, rel=1e-12)
        assert result.tleaf_new == pytest.approx(met.tair + Tdiff / 4.0, rel=1e-12)
        assert result.Cs == pytest.approx(met.Ca - an / c.gbc, rel=1e-12)
        assert result.dleaf == pytest.approx(c.transpiration * met.press / c.gv, rel=1e-12)
        assert result.transpiration == c.transpiration
        assert result.omega == c.omega

    def test_net_radiation_uses_canopy_extinction_coefficient(self, eb, met, params):
        sparse_params = attrs.evolve(params, kd_black=0.5)
        result = eb.resolve_leaf_state(met, sparse_params, 3.0, met.tair, 800.0, 0.25, 15.0)
        expected = eb.isothermal_net_radiation(params.leaf_abs, 3.0, met.tair, met.vpd, 800.0 * PAR_2_SW, kd=0.5)
        assert result.rnet == pytest.approx(expected, rel=1e-12)
        assert result.rnet != pytest.approx(eb.resolve_leaf_state(met, params, 3.0, met.tair, 800.0, 0.25, 15.0).rnet)

    def test_uptake_draws_down_surface_co2(self, eb, met, params):
        result = eb.resolve_leaf_state(met, params, 3.0, met.tair, 800.0, 0.25, 15.0)
        assert result.Cs < met.Ca
        assert result.transpiration > 0.0
        assert 0.0 < result.omega < 1.0

    def test_closed_stomata(self, eb, met, params):
        result = eb.resolve_leaf_state(met, params, 3.0, met.tair, 800.0, 0.0, 0.0)
        assert result.transpiration == 0.0
        assert result.omega == 0.0
        assert result.Cs == met.Ca
        assert result.dleaf == met.vpd
        ## without latent cooling the absorbed radiation warms the leaf
        assert result.tleaf_new > met.tair


class TestPenmanLeaf:
    """Leaf boundary layer conductances and Penman-Monteith transpiration"""

    @pytest.fixture
    def bl(self):
        return BoundaryLayerModule()

    def test_free_convection_needs_temperature_difference(self, bl):
        site = ClimateModule()
        assert bl.calculate_gb_free(25.0, 25.0, 0.02, 101325.0, site) == 0.0
        assert bl.calculate_gb_free(25.0, 27.0, 0.02, 101325.0, site) > 0.0

    def test_forced_convection_increases_with_wind(self, bl):
        site = ClimateModule()
        calm = bl.calculate_gb_forced(25.0, 0.5, 0.02, 101325.0, site)
        windy = bl.calculate_gb_forced(25.0, 5.0, 0.02, 101325.0, site)
        assert windy == pytest.approx(calm * np.sqrt(10.0), rel=1e-12)

    def test_conductance_ratios(self, bl, met, params):
        site = ClimateModule()
        c = bl.penman_leaf(met, params, met.tair, 200.0, 0.2, site)
        gbh = bl.calculate_gb_forced(met.tair, met.wind, params.leaf_width, met.press, site)
        gradn = bl.calculate_radiation_conductance(met.tair, site)
        gbv = 1.075 * gbh
        gsv = 1.57 * 0.2
        assert c.gbc == pytest.approx(gbh / 1.32, rel=1e-12)
        assert c.gh == pytest.approx(2.0 * (gbh + gradn), rel=1e-12)
        assert c.gv == pytest.approx(gbv * gsv / (gbv + gsv), rel=1e-12)
        assert c.transpiration == pytest.approx(c.LE / site.compute_latent_heat_vaporisation(met.tair), rel=1e-12)

    def test_wider_leaves_are_more_decoupled(self, bl, met, params):
        site = ClimateModule()
        narrow = bl.penman_leaf(met, params, met.tair, 200.0, 0.2, site)
        wide = bl.penman_leaf(met, attrs.evolve(params, leaf_width=0.2), met.tair, 200.0, 0.2, site)
        assert wide.omega > narrow.omega
