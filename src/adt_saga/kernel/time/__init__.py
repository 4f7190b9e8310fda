"""Kernel time – Clock port + implementations."""
from adt_saga.kernel.time.clock import Clock, FrozenClock, SystemClock

__all__ = ["Clock", "FrozenClock", "SystemClock"]
