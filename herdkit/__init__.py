"""Scene graph, walk mesh, audio mixing, camera and gameplay helpers for a 3D herding game."""

__version__ = "0.1.0"