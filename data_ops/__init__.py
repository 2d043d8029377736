"""
Data operations package for the chart recipes.

Provides built-in sample tables, an in-memory table store, relational
reshaping helpers, and statistical data sources (fits, coefficients,
densities) that recipes layer onto charts.
"""
