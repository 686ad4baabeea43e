from __future__ import annotations

from typing import Iterable, Tuple

from .config import DEFAULT_CONFIG, YardConfig
from .models import BAYS, ROWS, Cell

Vec3 = Tuple[float, float, float]


def cell_origin(bay: int, row: int, config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    """Ground-level centre of a slot; bays run along x, rows along z."""
    return ((bay - 1) * config.bay_pitch, 0.0, (row - 1) * config.row_pitch)


def tier_center_y(tier: int, config: YardConfig = DEFAULT_CONFIG) -> float:
    # plate top + half a box + whole tiers below
    return config.plate_thickness + config.container_half_height + (tier - 1) * config.tier_height


def cell_center(cell: Cell, config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    x, _, z = cell_origin(cell.bay, cell.row, config)
    return (x, tier_center_y(cell.tier, config), z)


def cells_center(cells: Iterable[Cell], config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    centers = [cell_center(cell, config) for cell in cells]
    if not centers:
        raise ValueError("cells_center needs at least one cell")
    n = len(centers)
    return (
        sum(c[0] for c in centers) / n,
        sum(c[1] for c in centers) / n,
        sum(c[2] for c in centers) / n,
    )


def at_travel_height(point: Vec3, config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    return (point[0], config.travel_height, point[2])


def yard_extent(config: YardConfig = DEFAULT_CONFIG) -> Tuple[float, float, float, float]:
    """Return ``(min_x, max_x, min_z, max_z)`` of the plate edges."""
    min_x = -config.bay_pitch / 2
    min_z = -config.row_pitch / 2
    return (
        min_x,
        min_x + BAYS * config.bay_pitch,
        min_z,
        min_z + ROWS * config.row_pitch,
    )


def bridge_home(config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    min_x, max_x, _, _ = yard_extent(config)
    return ((min_x + max_x) / 2, config.travel_height, config.crane_z)


def hook_home(config: YardConfig = DEFAULT_CONFIG) -> Vec3:
    min_x, _, _, _ = yard_extent(config)
    return (min_x, config.travel_height - 0.5, config.crane_z)
