"""Simulation of informative versus random censoring in Kaplan-Meier estimation."""

__version__ = "0.1.0"
