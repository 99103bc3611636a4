"""
SpiderScout package initializer.
Defines the package version; the CLI lives in :mod:`spider_scout.cli`.
"""
__version__ = "0.1.0"
