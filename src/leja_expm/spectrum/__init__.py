"""
Spectral estimation for Leja interpolation.

- SpectralEstimate: box [SR, LR] x [SI, LI] containing the eigenvalues
- estimate_spectrum: Bendixson/Gershgorin estimate from row sums
"""

from leja_expm.spectrum.gershgorin import SpectralEstimate, estimate_spectrum

__all__ = [
    "SpectralEstimate",
    "estimate_spectrum",
]
