"""Exports: growth-record CSV, Markdown performance report, chart series.

- writers.py: CSV emitter with a fixed column schema
- reports.py: performance.md generator
- series.py: time-ordered points for growth/FCR/SGR/biomass charts
"""
