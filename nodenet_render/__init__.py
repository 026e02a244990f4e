"""
Node network rendering package.

This package provides:
- Input adapter mapping pointer/touch/resize events into simulation space
- Renderer drawing simulation state onto pygame surfaces
- Frame scheduler, event dispatcher and engine loop
- An interactive pygame window host (`nodenet_render.runner.window`)
"""

from .input_adapter import InputAdapter
from .renderer import Renderer, node_radius, node_shading, pulse_factor
