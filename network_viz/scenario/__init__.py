"""Scenarios for network simulation.

This module provides loading of JSON scenario files, the built-in demo
topology, and playback of timed packet injections.
"""
