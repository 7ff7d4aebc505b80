"""
Control class: Includes the run options of the daily canopy calculations
"""

from attrs import define, field, validators


@define
class ControlOptions:
    """
    Run options for the half-hourly canopy flux calculations
    """
    ps_pathway: str = field(default="C3")  ## Photosynthetic pathway. Only "C3" is implemented, anything else stops the run.
    water_stress: bool = field(default=True)  ## Whether soil moisture stress factors are calculated. When False both factors are held at 1 (debugging only).
    num_hlf_hrs: int = field(default=48, validator=validators.gt(0))  ## Number of half-hour time steps per day
    predawn_hlf_hr: int = field(default=10)  ## Half-hour index (10 = 05:00) at which the pre-dawn soil water potential is calculated
    itermax: int = field(default=100, validator=validators.gt(0))  ## Ceiling on the leaf temperature iterations within one half hour
    tleaf_tolerance: float = field(default=0.02)  ## Leaf temperature change below which the leaf temperature iteration has converged (degrees Celsius)
    an_threshold: float = field(default=1e-04)  ## Net assimilation (umol m-2 s-1) at or below which a leaf is treated as not photosynthesising
    par_threshold: float = field(default=20.0)  ## Incident PAR (umol m-2 s-1) at or below which the sun is treated as down
