"""Fractal algorithms and the complex-number helpers they are built on."""
