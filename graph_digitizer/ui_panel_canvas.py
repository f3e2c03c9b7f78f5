from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Optional, Tuple

from PIL import Image, ImageTk

from .calibration import ANCHOR_KEYS
from .export import format_number
from .region import Rect
from .render import render_overlay


class CanvasPanel:
    def __init__(self, owner, parent: tk.Widget, *, actor) -> None:
        self.owner = owner
        self.actor = actor

        frame = ttk.Frame(parent)
        self.frame = frame
        frame.pack(side="top", fill="both", expand=True)

        owner.tip_var = tk.StringVar(value="")
        owner.tip_label = ttk.Label(frame, textvariable=owner.tip_var, wraplength=900, justify="left")
        owner.tip_label.pack(side="top", fill="x", pady=(8, 0))

        owner.canvas = tk.Canvas(frame, background="#111", highlightthickness=1, highlightbackground="#333")
        owner.canvas.pack(side="bottom", fill="both", expand=True, pady=(8, 0))
        owner.canvas.bind("<Configure>", actor._on_canvas_configure)
        owner.canvas.bind("<Button-1>", actor._on_click)
        owner.canvas.bind("<B1-Motion>", actor._on_drag)
        owner.canvas.bind("<ButtonRelease-1>", actor._on_release)
        owner.canvas.bind("<Motion>", actor._on_motion)


class CanvasActor:
    def __init__(self, owner) -> None:
        object.__setattr__(self, "owner", owner)

    def __getattr__(self, name):
        return getattr(self.owner, name)

    def __setattr__(self, name, value) -> None:
        if name == "owner":
            object.__setattr__(self, name, value)
            return
        setattr(self.owner, name, value)

    def _on_canvas_configure(self, _evt=None):
        # Avoid thrashing when resizing: schedule a single re-render
        if getattr(self, "_render_after_id", None) is not None:
            try:
                self.after_cancel(self._render_after_id)
            except tk.TclError:
                pass
        self._render_after_id = self.after(30, self._render_image)


    def _render_image(self):
        self._render_after_id = None
        self.canvas.delete("all")
        self.canvas.update_idletasks()
        cw = max(10, self.canvas.winfo_width())
        ch = max(10, self.canvas.winfo_height())

        self._scale = min(cw / self._iw, ch / self._ih)
        disp_w = max(1, int(self._iw * self._scale))
        disp_h = max(1, int(self._ih * self._scale))

        self._offx = (cw - disp_w)//2
        self._offy = (ch - disp_h)//2

        st = self.state
        rgb = render_overlay(
            st.buffer,
            calibration=st.calibration,
            region=st.region,
            points=st.store.points,
            highlight=self._highlight,
        )
        disp = Image.fromarray(rgb).resize((disp_w, disp_h), Image.NEAREST)
        self._photo = ImageTk.PhotoImage(disp)
        self.canvas.create_image(self._offx, self._offy, image=self._photo, anchor="nw", tags=("img",))


    def _redraw_overlay(self):
        self._render_image()


    def _to_canvas(self, xpx: float, ypx: float) -> Tuple[int,int]:
        cx = int(self._offx + xpx * self._scale)
        cy = int(self._offy + ypx * self._scale)
        return cx, cy


    def _to_image_px(self, cx: float, cy: float) -> Tuple[int,int]:
        x = int(round((cx - self._offx) / self._scale))
        y = int(round((cy - self._offy) / self._scale))
        x = max(0, min(self._iw-1, x))
        y = max(0, min(self._ih-1, y))
        return x, y


    def _update_tip(self, pos: Optional[Tuple[int, int]] = None) -> None:
        mode = self.tool_mode.get()
        if mode == "calibrate":
            tip = f"Click the chart to place anchor {self.var_anchor.get().upper()}. {self.state.status_message()}"
        elif mode == "roi":
            tip = "Drag a rectangle around the region to scan."
        elif mode == "exclude":
            tip = "Drag rectangles over legends, labels or gridlines to skip them."
        elif mode == "pickcolor":
            tip = "Click a pixel of the series to use its color."
        else:
            tip = "Click to add a point by hand."
        if pos is not None:
            x, y = pos
            dx, dy = self.state.calibration.pixel_to_data(x, y) if not self.state.calibration.is_degenerate() else (x, y)
            tip += f"   px=({x}, {y})  data=({format_number(round(dx, 6))}, {format_number(round(dy, 6))})"
        self.tip_var.set(tip)


    def _on_motion(self, event):
        self._update_tip(self._to_image_px(event.x, event.y))


    def _on_click(self, event):
        x, y = self._to_image_px(event.x, event.y)
        mode = self.tool_mode.get()

        if mode == "pickcolor":
            color = self.state.buffer.color_at(x, y)
            if color is not None:
                self.owner.extractor._set_target_color(color)
            self.tool_mode.set(self._tool_before_pick or "calibrate")
            self._update_tip()
            return

        if mode == "addpoint":
            if not self.state.calibration.is_calibrated():
                self._show_info("Add point", "Please complete axis calibration first.")
                return
            if self.state.calibration.is_degenerate():
                self._show_error("Add point", self.state.status_message())
                return
            self.state.store.add_manual_point(x, y, self.state.calibration)
            self.owner.data_actor._refresh_table()
            self._redraw_overlay()
            return

        if mode in ("roi", "exclude"):
            self._drag_start = (x, y)
            return

        # calibrate
        key = self.var_anchor.get()
        self.state.calibration.set_point(key, x, y)
        nxt = ANCHOR_KEYS.index(key) + 1
        if nxt < len(ANCHOR_KEYS) and self.state.calibration.points[ANCHOR_KEYS[nxt]] is None:
            self.var_anchor.set(ANCHOR_KEYS[nxt])
        self.owner.calibrator._update_status()
        self._update_tip()
        self._redraw_overlay()


    def _on_drag(self, event):
        if self._drag_start is None:
            return
        x, y = self._to_image_px(event.x, event.y)
        ax, ay = self._to_canvas(*self._drag_start)
        bx, by = self._to_canvas(x, y)
        color = "#22c55e" if self.tool_mode.get() == "roi" else "#dc2626"
        self.canvas.delete("rubberband")
        self.canvas.create_rectangle(ax, ay, bx, by, outline=color, dash=(4, 2), width=2, tags=("rubberband",))


    def _on_release(self, event):
        if self._drag_start is None:
            return
        x0, y0 = self._drag_start
        self._drag_start = None
        self.canvas.delete("rubberband")
        x1, y1 = self._to_image_px(event.x, event.y)
        rect = Rect(x0, y0, x1, y1)
        if not rect.is_large_enough(self.settings.min_region_px):
            n = self.settings.min_region_px
            self.tip_var.set(f"Rectangle ignored: it must be at least {n}x{n} pixels.")
            return
        if self.tool_mode.get() == "roi":
            self.state.region.set_roi(rect)
        else:
            self.state.region.add_exclude(rect)
        self._highlight = None
        self.owner.extractor._update_region_label()
        self._redraw_overlay()
