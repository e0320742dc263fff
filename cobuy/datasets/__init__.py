"""
cobuy.datasets: synthetic order histories with known co-purchase patterns.
"""

from .retail import generate_retail_orders, generate_retail_frame

__all__ = [
    "generate_retail_orders",
    "generate_retail_frame",
]
