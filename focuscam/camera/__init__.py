"""
Módulo de Cámara de Foco para seguimiento de la ventana activa.
Incluye la curva de suavizado, la lógica de re-encuadre y el recorte de imagen.
"""

from .easing import smooth_step, lerp
from .focus_camera import FocusCamera, ScreenRegion, WindowSnapshot
from .crop_renderer import CropRenderer

__all__ = ['smooth_step', 'lerp', 'FocusCamera', 'ScreenRegion', 'WindowSnapshot', 'CropRenderer']
