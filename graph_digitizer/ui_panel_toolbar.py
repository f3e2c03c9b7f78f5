from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable

from .calibration import ANCHOR_KEYS


class ToolbarPanel:
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_tool_change: Callable[[], None],
    ) -> None:
        self.owner = owner
        self.frame = ttk.Frame(parent)
        self.frame.pack(side="top", fill="x")

        ttk.Label(self.frame, text="Tool:").pack(side="left")
        for lbl, val in [
            ("Calibrate", "calibrate"),
            ("Set Region", "roi"),
            ("Exclude", "exclude"),
            ("Pick color", "pickcolor"),
            ("Add point", "addpoint"),
        ]:
            ttk.Radiobutton(
                self.frame,
                text=lbl,
                value=val,
                variable=owner.tool_mode,
                command=on_tool_change,
            ).pack(side="left", padx=(8, 0))

        ttk.Separator(self.frame, orient="vertical").pack(side="left", fill="y", padx=10)
        ttk.Label(self.frame, text="Anchor:").pack(side="left")
        for key in ANCHOR_KEYS:
            ttk.Radiobutton(
                self.frame,
                text=key.upper(),
                value=key,
                variable=owner.var_anchor,
                command=on_tool_change,
            ).pack(side="left", padx=(6, 0))
