"""Core signal logic: indicators, detectors and the ensemble decision.

This package contains pure business logic with no I/O dependencies
(no network, database or clock access beyond an injected time source).
"""
