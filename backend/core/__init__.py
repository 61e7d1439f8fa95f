"""Core analysis logic: models, indicators, scoring and reports.

This package contains pure business logic with no I/O dependencies
(no network, no disk). The app/ layer fetches klines and hands them
to the analyzer here.
"""
