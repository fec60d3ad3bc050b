"""
heatflow: annual heat-transfer comparison of building envelopes
"""

__version__ = "1.0.0"
