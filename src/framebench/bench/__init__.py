"""Benchmarking subsystem for framebench.

Runs workload simulations for a fixed number of counted, timed iterations,
keeps the previous run of every benchmark, and renders a comparison report.
"""
