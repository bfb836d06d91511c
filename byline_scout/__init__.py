"""
Byline Scout: discover journalists at a named news outlet and build enriched profiles.
"""

__version__ = "0.1.0"
