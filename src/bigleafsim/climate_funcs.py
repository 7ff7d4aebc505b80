"""
Helper functions for the climate module
"""

import numpy as np


def spitters_diffuse_fraction(doy, sw_rad, cos_zenith, solar_constant=1370.0):
    """
    Fraction of incident shortwave radiation that is diffuse, for sub-daily time steps.

    Parameters
    ----------
    doy: float
        Ordinal day of year

    sw_rad: float
        Incident shortwave radiation on a horizontal surface (W m-2)

    cos_zenith: float
        Cosine of the solar zenith angle (-)

    solar_constant: float
        Solar constant (W m-2)

    Returns
    -------
    diffuse_frac: float
        Diffuse fraction of the incident shortwave radiation (-), between 0 and 1

    Notes
    -----
    When the sun is below the horizon all radiation is treated as diffuse.

    References
    ----------
    Spitters et al. (1986) Agricultural and Forest Meteorology, 38, p. 217-229, Eq. 20.
    """
    if cos_zenith <= 0.0:
        return 1.0

    # extra-terrestrial radiation on a horizontal surface
    sw_top = solar_constant * (1.0 + 0.033 * np.cos(2.0 * np.pi * doy / 365.0)) * cos_zenith
    tau = sw_rad / sw_top   # atmospheric transmissivity

    R = 0.847 - 1.61 * cos_zenith + 1.04 * cos_zenith**2
    K = (1.47 - R) / 1.66
    if tau <= 0.22:
        diffuse_frac = 1.0
    elif tau <= 0.35:
        diffuse_frac = 1.0 - 6.4 * (tau - 0.22)**2
    elif tau <= K:
        diffuse_frac = 1.47 - 1.66 * tau
    else:
        diffuse_frac = R

    return float(min(max(diffuse_frac, 0.0), 1.0))
