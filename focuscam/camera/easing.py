"""
Curvas de suavizado para las transiciones de la cámara de foco.

La cámara usa una única curva (smoothstep cúbico) para paneo y zoom, de modo
que ambos arrancan y se detienen con velocidad cero.
"""

import numpy as np
from typing import Union

Number = Union[float, np.floating]


def smooth_step(x: Number) -> np.float32:
    """
    Cubic ease-in-out evaluated in single precision.

    smooth_step(0) == 0, smooth_step(1) == 1, non-decreasing on [0, 1] and
    with zero slope at both ends. Inputs outside [0, 1] are clamped.
    """
    t = np.float32(min(max(np.float32(x), np.float32(0.0)), np.float32(1.0)))
    return t * t * (np.float32(3.0) - np.float32(2.0) * t)


def lerp(start, end, t):
    # works for scalars and numpy arrays alike, result keeps the operands' dtype
    return start + (end - start) * t
