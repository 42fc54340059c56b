"""
Visualization package - Plotting tools for sweep results.
"""

from .heatmap import DeliveryHeatmap

__all__ = [
    'DeliveryHeatmap'
]
