"""
Tests Package.

This package contains test suites for the node network, including unit tests
for colors, themes, configuration, the force model and the connection
lifecycle, plus engine scenarios, rendering checks on offscreen pygame
surfaces, and CLI smoke tests.
"""

# Tests Package
