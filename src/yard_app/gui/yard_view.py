from __future__ import annotations

from typing import Dict, Tuple

from yard_core.config import YardConfig
from yard_core.geometry import cell_origin, yard_extent
from yard_core.models import BAY_LETTERS, BAYS, ROWS, Container, SizeClass
from yard_core.snapshot import YardSnapshot
from yard_core.yard import Yard

CONTAINER_COLOR = "#d7bde2"
ACTIVE_COLOR = "#f5b041"
BRIDGE_COLOR = "#4682b4"
HOOK_COLOR = "#333333"
PLATE_COLOR = "#eeeeee"


def container_extent(container: Container, config: YardConfig) -> Tuple[float, float, float]:
    """Box size ``(dx, dy, dz)`` in world axes; 40' boxes run along the rows."""
    span = 2 if container.size_class is SizeClass.TWO_UNIT else 1
    return (
        config.bay_pitch * 0.95,
        config.container_height,
        span * config.row_pitch - config.row_pitch * 0.05,
    )


def _draw_plate(ax, config: YardConfig) -> None:
    min_x, max_x, min_z, max_z = yard_extent(config)
    ax.bar3d(
        min_x,
        min_z,
        0.0,
        max_x - min_x,
        max_z - min_z,
        config.plate_thickness,
        color=PLATE_COLOR,
        alpha=0.5,
        shade=False,
    )
    lift = config.plate_thickness + 0.03
    for b in range(BAYS + 1):
        x = min_x + b * config.bay_pitch
        ax.plot([x, x], [min_z, max_z], [lift, lift], color="#aaaaaa", lw=0.8)
    for r in range(ROWS + 1):
        z = min_z + r * config.row_pitch
        ax.plot([min_x, max_x], [z, z], [lift, lift], color="#aaaaaa", lw=0.8)
    for bay in range(1, BAYS + 1):
        x, _, z = cell_origin(bay, 1, config)
        ax.text(x, z - config.row_pitch / 2 - 0.9, lift, BAY_LETTERS[bay - 1], ha="center")
    for row in range(1, ROWS + 1):
        x, _, z = cell_origin(1, row, config)
        ax.text(x - config.bay_pitch / 2 - 0.9, z, lift, str(row), ha="center")


def _draw_crane(ax, yard: Yard) -> None:
    config = yard.config
    min_x, max_x, _, _ = yard_extent(config)
    bx, by, bz = yard.bridge.point()
    half = (max_x - min_x) / 2 + 0.6
    ax.plot(
        [bx - half, bx + half], [bz, bz], [by, by], color=BRIDGE_COLOR, lw=4, solid_capstyle="butt"
    )
    hx, hy, hz = yard.hook.point()
    ax.plot([hx, hx], [hz, hz], [config.travel_height, hy], color=HOOK_COLOR, lw=1)
    ax.scatter([hx], [hz], [hy], color=HOOK_COLOR, s=12)


def _draw_containers(ax, yard: Yard) -> None:
    config = yard.config
    for container in yard.containers:
        x, y, z = yard.bodies[container.id].point()
        dx, dy, dz = container_extent(container, config)
        color = ACTIVE_COLOR if container.id == yard.active_id else CONTAINER_COLOR
        # world y is up, matplotlib's third axis is up
        ax.bar3d(
            x - dx / 2,
            z - dz / 2,
            y - dy / 2,
            dx,
            dz,
            dy,
            color=color,
            edgecolor="#7d3c98",
            alpha=0.9,
            shade=True,
        )
        ax.text(x, z, y + dy / 2 + 0.2, container.id, ha="center", fontsize=8)


def draw_yard(ax, yard: Yard) -> None:
    config = yard.config
    ax.cla()
    _draw_plate(ax, config)
    _draw_containers(ax, yard)
    _draw_crane(ax, yard)

    gate_z = [yard.bodies[c.id].point()[2] for c in yard.containers]
    min_x, max_x, min_z, max_z = yard_extent(config)
    ax.set_xlim(min(config.gate_x - 1.5, min_x), max_x + 1.0)
    ax.set_ylim(min(config.crane_z - 1.0, min_z), max([max_z, *gate_z]) + 1.0)
    ax.set_zlim(0, config.travel_height + 1.0)
    ax.set_xlabel("Bay")
    ax.set_ylabel("Row")
    ax.set_zlabel("Height [m]")


def draw_heat_map(ax, snapshot: YardSnapshot) -> None:
    grid = snapshot.heat_map()
    ax.cla()
    ax.imshow(grid, cmap="Blues", vmin=0, vmax=2, origin="upper")
    ax.set_xticks(range(BAYS))
    ax.set_xticklabels(BAY_LETTERS)
    ax.set_yticks(range(ROWS))
    ax.set_yticklabels([str(r) for r in range(1, ROWS + 1)])
    ax.set_title("Occupied tiers")
    labels: Dict[Tuple[int, int], str] = {}
    for cell, container_id in snapshot.cells.items():
        key = (cell.row - 1, cell.bay - 1)
        labels[key] = "\n".join(filter(None, [labels.get(key), f"{container_id}@{cell.tier}"]))
    for (row, bay), text in labels.items():
        ax.text(bay, row, text, ha="center", va="center", fontsize=7)
