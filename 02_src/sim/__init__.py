"""SIM module."""

from .sim import ISim, Sim, make_request_trace

__all__ = ["ISim", "Sim", "make_request_trace"]
