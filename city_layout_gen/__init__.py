"""
Procedural city layout: districts, a labelled raster partition, a traced
street graph, L-system side streets and buildable lots.
"""

__version__ = "0.1.0"
