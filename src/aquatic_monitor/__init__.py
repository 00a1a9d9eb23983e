"""
Aquatic Monitor
===============

Energy-aware control software for a solar-powered floating platform that
collects waste from a body of water and passively monitors marine life.

The core is the control loop: it turns solar income into battery charge
and admits every power-consuming activity (environmental sampling,
detection, waste collection) only when the battery can afford it.

Components:
    - power: Solar panel and battery models
    - actuation: Waste collection conveyor
    - detection: Cyclic dataset replay, dataset providers, image store
    - control: The tick loop and its policy
    - observability: Timestamped operator event log

Example:
    from aquatic_monitor.main import main

    # Runs for the configured duration, then exits
    raise SystemExit(main())
"""

__version__ = "0.1.0"
__author__ = "Aquatic Monitor Project"

__all__ = [
    "__version__",
]
