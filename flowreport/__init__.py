"""
Flow validation report service.
Validates captured protocol message flows and renders the results as an HTML report.
"""

__version__ = "1.0.0"
