"""Equation plotter plugin."""

manifest = {
    "title": "Equation Plotter",
    "summary": "Sample equations with units over linear or logarithmic ranges, build 3-D grids, and rescale plotted series between units.",
    "blueprint": "equation_plotter",
    "category": "Scientific Tools",
}


__all__ = ["manifest"]
