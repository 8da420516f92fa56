"""Core components for network simulation.

This module contains the fundamental classes for network simulation,
including Packet, Link, Node, Transmission and NetworkSimulator classes.
"""
