from __future__ import annotations

import logging
import tkinter as tk
from concurrent.futures import Future
from tkinter import ttk

from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from yard_app.core.hud import describe_error, staged_summary
from yard_app.gui.tick_driver import TickDriver
from yard_app.gui.yard_view import draw_heat_map, draw_yard
from yard_core.errors import YardError
from yard_core.leg_plan import MovePlan
from yard_core.models import SizeClass
from yard_core.slot_address import format_slot
from yard_core.snapshot import OccupancyDelta, YardSnapshot
from yard_core.yard import Yard

logger = logging.getLogger(__name__)


class TabYard(ttk.Frame):
    def __init__(self, parent, yard: Yard):
        super().__init__(parent)
        self.yard = yard
        self.slot_var = tk.StringVar(value="A1")
        self.container_var = tk.StringVar(value="")
        self.status_var = tk.StringVar(value="")
        self.gate_var = tk.StringVar(value="Gate: empty")
        self.driver = TickDriver(
            schedule=lambda callback: self.after(self.yard.config.tick_interval_ms, callback),
            cancel=self.after_cancel,
            tick=self.yard.tick,
            is_active=lambda: self.yard.choreographer.in_flight,
            on_frame=self.redraw,
        )

        self.build_ui()
        self.yard.on_plan(self._on_plan)
        self.yard.on_delta(self._on_delta)
        self.yard.on_snapshot(self._on_snapshot)
        self._on_snapshot(self.yard.snapshot())
        self.redraw()

    def build_ui(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)

        self.figure = Figure(figsize=(8, 6))
        self.scene_ax = self.figure.add_axes([0.0, 0.0, 0.72, 1.0], projection="3d")
        self.heat_ax = self.figure.add_axes([0.76, 0.55, 0.22, 0.35])
        self.canvas = FigureCanvasTkAgg(self.figure, master=self)
        self.canvas.get_tk_widget().grid(row=0, column=0, sticky="nsew", padx=(10, 5), pady=10)

        sidebar = ttk.Frame(self)
        sidebar.grid(row=0, column=1, sticky="ns", padx=(5, 10), pady=10)

        ttk.Label(sidebar, text="Mini yard (A-C x 1-3)", font=("TkDefaultFont", 12, "bold")).grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 8)
        )

        add_frame = ttk.LabelFrame(sidebar, text="Gate")
        add_frame.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(0, 8))
        ttk.Button(add_frame, text="Add 20'", command=lambda: self.add_container(SizeClass.ONE_UNIT)).grid(
            row=0, column=0, padx=4, pady=4
        )
        ttk.Button(add_frame, text="Add 40'", command=lambda: self.add_container(SizeClass.TWO_UNIT)).grid(
            row=0, column=1, padx=4, pady=4
        )
        ttk.Label(add_frame, textvariable=self.gate_var, wraplength=240).grid(
            row=1, column=0, columnspan=2, sticky="w", padx=4, pady=(0, 4)
        )

        ttk.Label(sidebar, text="Container:").grid(row=2, column=0, sticky="e", padx=4, pady=4)
        self.container_combo = ttk.Combobox(
            sidebar, textvariable=self.container_var, values=[], state="readonly", width=10
        )
        self.container_combo.grid(row=2, column=1, sticky="w", padx=4, pady=4)
        self.container_combo.bind("<<ComboboxSelected>>", self._on_container_selected)

        ttk.Label(sidebar, text="Target slot:").grid(row=3, column=0, sticky="e", padx=4, pady=4)
        ttk.Entry(sidebar, textvariable=self.slot_var, width=6).grid(
            row=3, column=1, sticky="w", padx=4, pady=4
        )

        self.place_button = ttk.Button(sidebar, text="Move to slot", command=self.place)
        self.place_button.grid(row=4, column=0, columnspan=2, sticky="ew", padx=4, pady=(8, 2))
        self.remove_button = ttk.Button(sidebar, text="Back to gate", command=self.remove)
        self.remove_button.grid(row=5, column=0, columnspan=2, sticky="ew", padx=4, pady=2)
        ttk.Button(sidebar, text="Stop crane", command=self.cancel_move).grid(
            row=6, column=0, columnspan=2, sticky="ew", padx=4, pady=2
        )
        ttk.Button(sidebar, text="Park crane", command=self.park).grid(
            row=7, column=0, columnspan=2, sticky="ew", padx=4, pady=2
        )

        ttk.Label(sidebar, textvariable=self.status_var, wraplength=260, justify="left").grid(
            row=8, column=0, columnspan=2, sticky="w", padx=4, pady=(10, 4)
        )
        ttk.Label(
            sidebar,
            text=(
                "Bays A-C, rows 1-3, two tiers.\n"
                "40' boxes take the target row and the next one.\n"
                "Drag the 3D view to rotate it."
            ),
            foreground="#555555",
            justify="left",
        ).grid(row=9, column=0, columnspan=2, sticky="w", padx=4, pady=4)

    # ----- actions -----

    def add_container(self, size_class: SizeClass) -> None:
        container = self.yard.add_container(size_class)
        self.yard.select(container.id)
        self._refresh_container_choices()
        self.status_var.set(f"{container.id} ({size_class.value}) waits at the gate")
        self.redraw()

    def place(self) -> None:
        self._submit(lambda: self.yard.request_placement(self.container_var.get(), self.slot_var.get()))

    def remove(self) -> None:
        self._submit(lambda: self.yard.request_removal(self.container_var.get()))

    def cancel_move(self) -> None:
        if not self.yard.choreographer.cancel("stopped by operator"):
            self.status_var.set("Crane is idle")

    def park(self) -> None:
        try:
            self.yard.park_crane()
        except YardError as e:
            self.status_var.set(describe_error(e))
            return
        self.driver.ensure_running()

    def _submit(self, request) -> None:
        try:
            future = request()
        except YardError as e:
            self.status_var.set(describe_error(e))
            return
        except Exception:
            logger.exception("Crane request failed")
            self.status_var.set("Unexpected error, see log")
            return
        self._set_busy(True)
        future.add_done_callback(self._on_sequence_done)
        self.driver.ensure_running()

    # ----- yard callbacks -----

    def _on_plan(self, container_id: str, plan: MovePlan) -> None:
        self.status_var.set(f"Crane working: {plan.name} (~{plan.duration_ms / 1000:.1f} s)")

    def _on_delta(self, delta: OccupancyDelta) -> None:
        if delta.added:
            target = format_slot(delta.added[0].slot)
            self.status_var.set(f"{delta.container_id} set down at {target}, tier {delta.added[0].tier}")
        else:
            self.status_var.set(f"{delta.container_id} is back at the gate")

    def _on_snapshot(self, snapshot: YardSnapshot) -> None:
        self.gate_var.set(staged_summary(snapshot))
        draw_heat_map(self.heat_ax, snapshot)

    def _on_sequence_done(self, future: Future) -> None:
        self._set_busy(False)
        error = future.exception()
        if error is not None:
            self.status_var.set(describe_error(error))

    def _on_container_selected(self, _event=None) -> None:
        try:
            self.yard.select(self.container_var.get())
        except YardError as e:
            self.status_var.set(describe_error(e))
        self.redraw()

    # ----- drawing -----

    def _set_busy(self, busy: bool) -> None:
        state = "disabled" if busy else "normal"
        self.place_button.configure(state=state)
        self.remove_button.configure(state=state)

    def _refresh_container_choices(self) -> None:
        ids = [container.id for container in self.yard.containers]
        self.container_combo.configure(values=ids)
        if self.yard.active_id:
            self.container_var.set(self.yard.active_id)

    def redraw(self) -> None:
        draw_yard(self.scene_ax, self.yard)
        self.canvas.draw_idle()
