from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable

from .calibration import ANCHOR_KEYS
from .export import format_number


class CalibrationPanel:
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_reset: Callable[[], None],
    ) -> None:
        self.owner = owner
        frame = ttk.LabelFrame(parent, text="Calibration", padding=8)
        self.frame = frame
        owner._calibration_frame = frame
        frame.pack(side="top", fill="x")

        grid = ttk.Frame(frame)
        grid.pack(fill="x")
        for col in range(4):
            grid.columnconfigure(col, weight=1)

        owner.cal_value_vars = {}
        owner.cal_px_vars = {}
        for i, key in enumerate(ANCHOR_KEYS):
            row, col = divmod(i, 2)
            var = tk.StringVar(value=format_number(owner.state.calibration.values[key]))
            owner.cal_value_vars[key] = var
            ttk.Label(grid, text=f"{key.upper()} value").grid(row=row * 2, column=col * 2, sticky="w", pady=(6, 0))
            ttk.Entry(grid, textvariable=var, width=10).grid(row=row * 2, column=col * 2 + 1, sticky="w", pady=(6, 0))
            px_var = tk.StringVar(value="(not set)")
            owner.cal_px_vars[key] = px_var
            ttk.Label(grid, textvariable=px_var, foreground="#666").grid(
                row=row * 2 + 1, column=col * 2, columnspan=2, sticky="w"
            )

        owner.cal_status = tk.StringVar(value="")
        owner.lbl_cal_status = ttk.Label(frame, textvariable=owner.cal_status, wraplength=300, justify="left")
        owner.lbl_cal_status.pack(fill="x", pady=(6, 0))

        ttk.Button(frame, text="Reset calibration", command=on_reset).pack(side="left", pady=(6, 0))


class Calibrator:
    def __init__(self, owner) -> None:
        object.__setattr__(self, "owner", owner)

    def __getattr__(self, name):
        return getattr(self.owner, name)

    def __setattr__(self, name, value) -> None:
        if name == "owner":
            object.__setattr__(self, name, value)
            return
        setattr(self.owner, name, value)

    def _bind_value_traces(self) -> None:
        for key, var in self.cal_value_vars.items():
            var.trace_add("write", lambda *_a, k=key: self._on_value_change(k))


    def _on_value_change(self, key: str) -> None:
        # Unparseable text counts as 0 but stays in the entry so the user can fix it.
        self.state.calibration.set_value(key, self.cal_value_vars[key].get())
        self._update_status()


    def _update_status(self) -> None:
        cal = self.state.calibration
        for key in ANCHOR_KEYS:
            p = cal.points[key]
            if p is None:
                self.cal_px_vars[key].set("(not set)")
            else:
                self.cal_px_vars[key].set(f"px ({int(p.pixel_x)}, {int(p.pixel_y)})")
        self.cal_status.set(cal.status_message())
        ready = cal.is_calibrated() and not cal.is_degenerate()
        self.lbl_cal_status.configure(foreground=("#15803d" if ready else "#b45309"))


    def _reset_calibration(self) -> None:
        self.state.calibration.reset()
        for key, var in self.cal_value_vars.items():
            var.set(format_number(self.state.calibration.values[key]))
        self.var_anchor.set(ANCHOR_KEYS[0])
        self._update_status()
        self.owner.canvas_actor._update_tip()
        self.owner.canvas_actor._redraw_overlay()
