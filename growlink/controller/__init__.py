"""Caller-side actuator state and polling."""

from .controller import DashboardController

__all__ = ["DashboardController"]
