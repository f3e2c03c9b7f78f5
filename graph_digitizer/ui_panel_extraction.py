from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk
from typing import Callable, Tuple

logger = logging.getLogger(__name__)


class ExtractionPanel:
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_pick_color: Callable[[], None],
        on_preview: Callable[[], None],
        on_extract: Callable[[], None],
        on_clear_roi: Callable[[], None],
        on_clear_excludes: Callable[[], None],
    ) -> None:
        self.owner = owner
        frame = ttk.LabelFrame(parent, text="Extraction", padding=8)
        self.frame = frame
        owner._extraction_frame = frame
        frame.pack(side="top", fill="x", pady=(8, 0))

        color_row = ttk.Frame(frame)
        color_row.pack(fill="x")
        ttk.Label(color_row, text="Color:").pack(side="left")
        ttk.Entry(color_row, textvariable=owner.var_color, width=9).pack(side="left", padx=(6, 0))
        owner.color_swatch = tk.Label(color_row, width=3, background=owner.state.matcher.target_hex, relief="sunken")
        owner.color_swatch.pack(side="left", padx=(6, 0))
        ttk.Button(color_row, text="Pick", command=on_pick_color).pack(side="left", padx=(6, 0))

        row = ttk.Frame(frame)
        row.pack(fill="x", pady=(6, 0))
        ttk.Label(row, text="Color tol:").pack(side="left")
        ttk.Spinbox(row, from_=0, to=442, textvariable=owner.var_tol, width=5).pack(side="left", padx=(6, 0))
        ttk.Label(row, text="Min size:").pack(side="left", padx=(10, 0))
        ttk.Spinbox(row, from_=1, to=1000, textvariable=owner.var_min_size, width=5).pack(side="left", padx=(6, 0))

        region_row = ttk.Frame(frame)
        region_row.pack(fill="x", pady=(6, 0))
        owner.region_label = tk.StringVar(value="")
        ttk.Label(region_row, textvariable=owner.region_label).pack(side="left")
        ttk.Button(region_row, text="Clear excludes", command=on_clear_excludes).pack(side="right")
        ttk.Button(region_row, text="Clear region", command=on_clear_roi).pack(side="right", padx=(0, 6))

        run_row = ttk.Frame(frame)
        run_row.pack(fill="x", pady=(6, 0))
        ttk.Button(run_row, text="Preview", command=on_preview).pack(side="left")
        owner.btn_extract = ttk.Button(run_row, text="Extract", command=on_extract)
        owner.btn_extract.pack(side="left", padx=(8, 0))
        owner.preview_label = tk.StringVar(value="")
        ttk.Label(run_row, textvariable=owner.preview_label).pack(side="left", padx=(8, 0))


class Extractor:
    def __init__(self, owner) -> None:
        object.__setattr__(self, "owner", owner)

    def __getattr__(self, name):
        return getattr(self.owner, name)

    def __setattr__(self, name, value) -> None:
        if name == "owner":
            object.__setattr__(self, name, value)
            return
        setattr(self.owner, name, value)

    def _bind_setting_traces(self) -> None:
        self.var_color.trace_add("write", lambda *_: self._on_color_entry())
        self.var_tol.trace_add("write", lambda *_: self._on_extraction_setting_change())
        self.var_min_size.trace_add("write", lambda *_: self._on_extraction_setting_change())


    def _set_target_color(self, rgb: Tuple[int, int, int]) -> None:
        self.state.matcher.set_target_color(*rgb)
        self.var_color.set(self.state.matcher.target_hex)


    def _on_color_entry(self) -> None:
        # half-typed hex leaves the current color alone
        if not self.state.matcher.set_target_color_hex(self.var_color.get()):
            return
        self.color_swatch.configure(background=self.state.matcher.target_hex)
        self.settings.target_hex = self.state.matcher.target_hex
        self._clear_preview()


    def _on_extraction_setting_change(self) -> None:
        try:
            tol = int(self.var_tol.get())
            min_size = int(self.var_min_size.get())
        except (tk.TclError, ValueError):
            return
        self.state.matcher.tolerance = tol
        self.state.params.min_point_size = max(1, min_size)
        self.settings.tolerance = self.state.matcher.tolerance
        self.settings.min_point_size = self.state.params.min_point_size
        self._clear_preview()


    def _start_color_pick(self) -> None:
        if self.tool_mode.get() != "pickcolor":
            self._tool_before_pick = self.tool_mode.get()
        self.tool_mode.set("pickcolor")
        self.owner.canvas_actor._update_tip()


    def _clear_preview(self) -> None:
        if self._highlight is None:
            return
        self._highlight = None
        self.preview_label.set("")
        self.owner.canvas_actor._redraw_overlay()


    def _preview(self) -> None:
        prev = self.state.matcher.preview(self.state.buffer, self.state.region)
        self._highlight = prev
        self.preview_label.set(f"{prev.count} matching pixels")
        self.owner.canvas_actor._redraw_overlay()


    def _extract(self) -> None:
        # one extraction at a time
        self.btn_extract.configure(state="disabled")
        try:
            result = self.state.run_extraction()
        except Exception as e:
            logger.exception("extraction failed")
            self._show_error("Extraction failed", str(e))
            return
        finally:
            self.btn_extract.configure(state="normal")

        if result.status == "not_calibrated":
            self._show_info("Extract", "Please complete axis calibration first.")
            return
        if not result.ok:
            self._show_error("Extract", result.message)
            return

        self._highlight = None
        self.preview_label.set(result.message)
        self.owner.data_actor._refresh_table()
        self.owner.canvas_actor._redraw_overlay()


    def _update_region_label(self) -> None:
        r = self.state.region
        roi = "whole image" if r.roi is None else f"ROI {int(r.roi.width)}x{int(r.roi.height)}"
        self.region_label.set(f"{roi}, {len(r.excludes)} excluded")


    def _clear_roi(self) -> None:
        self.state.region.clear_roi()
        self._highlight = None
        self._update_region_label()
        self.owner.canvas_actor._redraw_overlay()


    def _clear_excludes(self) -> None:
        self.state.region.clear_excludes()
        self._highlight = None
        self._update_region_label()
        self.owner.canvas_actor._redraw_overlay()
