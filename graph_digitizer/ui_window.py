from __future__ import annotations

import logging
import platform
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Optional, Tuple

from PIL import Image

from .calibration import ANCHOR_KEYS
from .color import MatchPreview
from .cv_utils import PixelBuffer
from .model import DigitizerState
from .settings import DigitizerSettings, save_settings
from .ui_panel_toolbar import ToolbarPanel
from .ui_panel_canvas import CanvasPanel, CanvasActor
from .ui_panel_calibration import CalibrationPanel, Calibrator
from .ui_panel_extraction import ExtractionPanel, Extractor
from .ui_panel_data import DataPanel, DataActor
from .ui_panel_export import ExportPanel, Exporter

logger = logging.getLogger(__name__)


class DigitizerWindow(tk.Toplevel):
    def __init__(self, parent: tk.Tk, *, image: Image.Image, settings: DigitizerSettings, title: str = ""):
        super().__init__(parent)
        self.title(f"Graph -> Data{(' - ' + title) if title else ''}")
        self.geometry("1180x760")
        self.resizable(True, True)
        if platform.system().lower() != "windows":
            self.transient(parent)  # modeless: no grab_set

        self._pil = image.convert("RGBA")
        self._iw, self._ih = self._pil.size
        self.settings = settings

        self.state = DigitizerState(PixelBuffer.from_pil(self._pil), params=settings.to_params())
        settings.apply_to(self.state.matcher)

        # Tool mode
        self.tool_mode = tk.StringVar(value="calibrate")  # calibrate|roi|exclude|pickcolor|addpoint
        self.var_anchor = tk.StringVar(value=ANCHOR_KEYS[0])

        self.var_color = tk.StringVar(value=self.state.matcher.target_hex)
        self.var_tol = tk.IntVar(value=self.state.matcher.tolerance)
        self.var_min_size = tk.IntVar(value=self.state.params.min_point_size)

        self.canvas_actor = CanvasActor(self)
        self.calibrator = Calibrator(self)
        self.extractor = Extractor(self)
        self.data_actor = DataActor(self)
        self.exporter = Exporter(self)

        # canvas geometry
        self._scale = 1.0
        self._offx = 0
        self._offy = 0
        self._render_after_id = None

        self._drag_start: Optional[Tuple[int, int]] = None
        self._tool_before_pick: Optional[str] = None
        self._highlight: Optional[MatchPreview] = None

        self._build_ui()
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.calibrator._update_status()
        self.extractor._update_region_label()
        self.canvas_actor._update_tip()

    # ---------- UI ----------
    def _build_ui(self):
        root = ttk.Frame(self, padding=8)
        root.pack(fill="both", expand=True)

        self._panes = ttk.Panedwindow(root, orient="horizontal")
        self._panes.pack(fill="both", expand=True)

        left = ttk.Frame(self._panes)
        right = ttk.Frame(self._panes, width=340)
        self._panes.add(left, weight=2)
        self._panes.add(right, weight=1)

        self.toolbar_panel = ToolbarPanel(self, left, on_tool_change=self._on_tool_change)
        self.canvas_panel = CanvasPanel(self, left, actor=self.canvas_actor)

        # Right panel: calibration / extraction / data / export
        self.calibration_panel = CalibrationPanel(self, right, on_reset=self.calibrator._reset_calibration)
        self.extraction_panel = ExtractionPanel(
            self,
            right,
            on_pick_color=self.extractor._start_color_pick,
            on_preview=self.extractor._preview,
            on_extract=self.extractor._extract,
            on_clear_roi=self.extractor._clear_roi,
            on_clear_excludes=self.extractor._clear_excludes,
        )
        self.export_panel = ExportPanel(
            self,
            right,
            on_export_csv=self.exporter._export_csv,
            on_export_excel=self.exporter._export_excel,
            on_save_overlay=self.exporter._save_overlay,
            on_close=self._on_close,
        )
        self.data_panel = DataPanel(
            self,
            right,
            on_delete=self.data_actor._delete_selected,
            on_undo=self.data_actor._undo,
            on_clear=self.data_actor._clear,
            on_sort=self.data_actor._sort,
            on_edit=self.data_actor._on_tree_double_click,
        )

        self.calibrator._bind_value_traces()
        self.extractor._bind_setting_traces()
        self.after(0, self._set_default_pane_ratio)

    def _set_default_pane_ratio(self):
        self._panes.update_idletasks()
        total = self._panes.winfo_width()
        if total <= 1:
            return
        # Left ~67%, right ~33% by default.
        self._panes.sashpos(0, int(total * 0.67))

    def _on_tool_change(self):
        self._drag_start = None
        self.canvas.delete("rubberband")
        self.canvas_actor._update_tip()

    def _on_close(self):
        try:
            save_settings(self.settings)
        except OSError as e:
            logger.warning("could not save settings: %s", e)
        self.destroy()

    def _show_info(self, title: str, message: str) -> None:
        messagebox.showinfo(title, message, parent=self)

    def _show_error(self, title: str, message: str) -> None:
        messagebox.showerror(title, message, parent=self)
