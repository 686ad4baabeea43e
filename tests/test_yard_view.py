import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from yard_app.gui.yard_view import container_extent, draw_heat_map, draw_yard
from yard_core.models import SizeClass
from yard_core.yard import Yard


def test_container_extent_spans_rows_for_long_boxes():
    yard = Yard()
    short = yard.add_container(SizeClass.ONE_UNIT)
    long_box = yard.add_container(SizeClass.TWO_UNIT)
    _, short_dy, short_dz = container_extent(short, yard.config)
    _, long_dy, long_dz = container_extent(long_box, yard.config)
    assert short_dy == pytest.approx(yard.config.container_height)
    assert long_dy == short_dy
    assert long_dz > short_dz * 2 - 0.5


def test_draw_yard_and_heat_map():
    yard = Yard()
    yard.add_container(SizeClass.ONE_UNIT)
    yard.add_container(SizeClass.TWO_UNIT)
    fig = plt.figure()
    try:
        scene = fig.add_subplot(1, 2, 1, projection="3d")
        heat = fig.add_subplot(1, 2, 2)
        draw_yard(scene, yard)
        draw_heat_map(heat, yard.snapshot())
        assert scene.get_zlim()[1] == pytest.approx(yard.config.travel_height + 1.0)
        assert heat.get_title() == "Occupied tiers"
        assert len(heat.images) == 1
    finally:
        plt.close(fig)
