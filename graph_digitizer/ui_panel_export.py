from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog
from typing import Callable

from .export import write_csv, write_spreadsheet_xml
from .render import render_overlay, save_overlay


class ExportPanel:
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_export_csv: Callable[[], None],
        on_export_excel: Callable[[], None],
        on_save_overlay: Callable[[], None],
        on_close: Callable[[], None],
    ) -> None:
        self.owner = owner
        frame = ttk.Frame(parent)
        self.frame = frame
        owner._export_frame = frame
        frame.pack(side="bottom", fill="x", pady=(8, 0))

        ttk.Button(frame, text="Export CSV...", command=on_export_csv).pack(side="left")
        ttk.Button(frame, text="Export Excel...", command=on_export_excel).pack(side="left", padx=(8, 0))
        ttk.Button(frame, text="Save overlay...", command=on_save_overlay).pack(side="left", padx=(8, 0))
        ttk.Button(frame, text="Close", command=on_close).pack(side="right")


class Exporter:
    def __init__(self, owner) -> None:
        object.__setattr__(self, "owner", owner)

    def __getattr__(self, name):
        return getattr(self.owner, name)

    def __setattr__(self, name, value) -> None:
        if name == "owner":
            object.__setattr__(self, name, value)
            return
        setattr(self.owner, name, value)

    def _export(self, title: str, ext: str, filetypes, writer) -> None:
        rows = self.state.store.to_rows()
        if not rows:
            self._show_info(title, "No data to export.")
            return

        path = filedialog.asksaveasfilename(
            parent=self.owner,
            defaultextension=ext,
            initialfile=f"graph_data{ext}",
            filetypes=filetypes,
        )
        if not path:
            return
        try:
            writer(path, rows)
        except (OSError, ValueError) as e:
            self._show_error(title, str(e))
            return
        self._show_info(title, f"Saved:\n{path}")


    def _export_csv(self):
        self._export("Export CSV", ".csv", [("CSV files", "*.csv"), ("All files", "*.*")], write_csv)


    def _export_excel(self):
        self._export(
            "Export Excel", ".xls", [("Excel 2003 XML", "*.xls"), ("All files", "*.*")], write_spreadsheet_xml
        )


    def _save_overlay(self):
        path = filedialog.asksaveasfilename(
            parent=self.owner,
            defaultextension=".png",
            initialfile="graph_overlay.png",
            filetypes=[("PNG images", "*.png"), ("All files", "*.*")],
        )
        if not path:
            return
        st = self.state
        try:
            rgb = render_overlay(st.buffer, calibration=st.calibration, region=st.region, points=st.store.points)
            save_overlay(path, rgb)
        except (OSError, ValueError, RuntimeError) as e:
            self._show_error("Save overlay", str(e))
            return
        self._show_info("Save overlay", f"Saved:\n{path}")
