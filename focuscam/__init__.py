"""
Focus Camera
Cámara virtual que sigue la ventana con foco dentro de una región de pantalla.
"""

__version__ = '1.0.0'
