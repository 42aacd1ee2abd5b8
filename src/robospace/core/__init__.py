""" Core robospace module.

This module contains the robot and scene handles that states are checked against, along with joint space math utilities.
It makes extensive use of the Pinocchio library but adds planning-specific abstractions over its implementation.
"""
