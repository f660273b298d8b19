"""Color model and coloring techniques."""
