from flowpatch.simulation.profiles import LATENCY_MS, generator_for, merge_shapes, shape_of
from flowpatch.simulation.simulator import SimulationReport, Simulator

__all__ = [
    "LATENCY_MS",
    "SimulationReport",
    "Simulator",
    "generator_for",
    "merge_shapes",
    "shape_of",
]
