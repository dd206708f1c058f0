"""
ESST maintenance forms: proxy service, form flows and record views.
"""

__version__ = "0.1.0"
