"""
ELC client

A client for the WSDOT Enterprise Location Control (ELC) REST service that
converts state route and milepost descriptions into map locations.

Features:
- Route identifier validation
- Find route locations by ARM or SRMP
- Find the nearest route locations to a set of points
- Per-year LRS route catalog
"""

__version__ = "2.0.0"
__author__ = "ELC Client Development Team"
__description__ = "WSDOT ELC linear referencing client"
