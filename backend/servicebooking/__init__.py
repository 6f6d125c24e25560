"""Availability and booking lifecycle engine for independent service providers."""

__version__ = "0.1.0"
