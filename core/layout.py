"""
Factory Floor Layout

Five machines with three monitored pieces of equipment each. Every
equipment identifier has a status marker at a fixed position in the
3D factory scene.
"""

from typing import Dict, List, Tuple


MACHINE_COUNT = 5
EQUIPMENT_PER_MACHINE = 3

# Marker coordinates (x, y, z) in scene units
MARKER_POSITIONS: Dict[str, Tuple[float, float, float]] = {
    "Machine_1_Equipment_1": (-30.0, 5.0, -8.0),
    "Machine_1_Equipment_2": (-30.0, 5.0, -5.0),
    "Machine_1_Equipment_3": (-32.5, 7.0, -6.0),
    "Machine_2_Equipment_1": (-26.0, 5.0, -10.0),
    "Machine_2_Equipment_2": (-22.5, 5.0, -9.0),
    "Machine_2_Equipment_3": (-15.5, 6.0, -9.0),
    "Machine_3_Equipment_1": (-4.5, 4.0, -7.0),
    "Machine_3_Equipment_2": (-1.0, 3.0, -7.0),
    "Machine_3_Equipment_3": (1.0, 4.0, -7.0),
    "Machine_4_Equipment_1": (12.0, 18.0, -12.0),
    "Machine_4_Equipment_2": (15.0, 18.0, -12.0),
    "Machine_4_Equipment_3": (13.0, 12.0, -12.0),
    "Machine_5_Equipment_1": (27.0, 10.0, -4.0),
    "Machine_5_Equipment_2": (27.0, 10.0, -8.0),
    "Machine_5_Equipment_3": (34.0, 5.0, -8.0),
}


def machine_names() -> List[str]:
    """Machine names in floor order: Machine_1 .. Machine_5."""
    return [f"Machine_{i}" for i in range(1, MACHINE_COUNT + 1)]


def equipment_ids() -> List[str]:
    """All equipment identifiers known to the scene, in floor order."""
    return [
        f"Machine_{i}_Equipment_{j}"
        for i in range(1, MACHINE_COUNT + 1)
        for j in range(1, EQUIPMENT_PER_MACHINE + 1)
    ]


def marker_position(equipment_id: str) -> Tuple[float, float, float]:
    """Position of an equipment marker; unknown ids sit at the origin."""
    return MARKER_POSITIONS.get(equipment_id, (0.0, 0.0, 0.0))
