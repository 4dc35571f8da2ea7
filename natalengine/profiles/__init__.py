"""Packaged data profiles for :mod:`natalengine`."""
