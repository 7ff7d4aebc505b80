"""
Biophysics helper functions used across more than one bigleafsim module
"""

import numpy as np

R_GAS = 8.314      # universal gas constant J mol-1 K-1
T_REF = 298.15     # reference temperature for rate constants, K

def fT_arrheniuspeaked(k_25, T, E_a=70.0, H_d=200, DeltaS=0.650):
    """
    Applies a peaked Arrhenius-type temperature scaling function to the given parameter.

    Parameters
    ----------
    k_25: float
        Rate constant at 25oC

    T: float
        Temperature, degrees Celsius

    E_a: float
        Activation energy, kJ mol-1. Describes the rate of exponential increase of the function below the optimum

    H_d: float
        Deactivation energy, kJ mol-1. Describes the rate of decrease of the function above the optimum

    DeltaS: float
        Entropy of the process, kJ mol-1 K-1.

    Returns
    -------
    Temperature adjusted rate constant at the given temperature.

    References
    ----------
    Medlyn et al. (2002, doi: 10.1046/j.1365-3040.2002.00891.x) Equation 17.
    """
    T_k = T + 273.15
    E_a = E_a * 1e3  # convert kJ mol-1 to J mol-1
    H_d = H_d * 1e3  # convert kJ mol-1 to J mol-1
    DeltaS = DeltaS * 1e3  # convert kJ mol-1 K-1 to J mol-1 K-1

    arg1 = np.exp((E_a*(T_k - T_REF))/(T_REF*R_GAS*T_k))
    arg2 = 1.0 + np.exp((T_REF*DeltaS - H_d)/(T_REF*R_GAS))
    arg3 = 1.0 + np.exp((T_k*DeltaS - H_d)/(T_k*R_GAS))

    return k_25*arg1*arg2/arg3

def fT_arrhenius(k_25, T, E_a=70.0):
    """
    Applies an Arrhenius-type temperature scaling function to the given parameter.

    Parameters
    ----------
    k_25: float
        Rate constant at 25oC

    T: float
        Temperature, degrees Celsius

    E_a: float
        Activation energy, kJ mol-1, gives the rate of exponential increase of the function

    Returns
    -------
    Temperature adjusted rate constant at the given temperature.

    References
    ----------
    Medlyn et al. (2002) Equation 16
    """
    T_k = T + 273.15
    E_a = E_a * 1e3  # convert kJ mol-1 to J mol-1
    return k_25*np.exp((E_a*(T_k - T_REF))/(T_REF*R_GAS*T_k))

