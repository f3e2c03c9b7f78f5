from __future__ import annotations

import tkinter as tk
from tkinter import ttk, simpledialog
from typing import Callable

from .calibration import parse_value
from .export import format_number


class DataPanel:
    def __init__(
        self,
        owner,
        parent: tk.Widget,
        *,
        on_delete: Callable[[], None],
        on_undo: Callable[[], None],
        on_clear: Callable[[], None],
        on_sort: Callable[[], None],
        on_edit: Callable[[object], None],
    ) -> None:
        self.owner = owner
        frame = ttk.LabelFrame(parent, text="Data", padding=8)
        self.frame = frame
        owner._data_frame = frame
        frame.pack(side="top", fill="both", expand=True, pady=(8, 0))

        owner.tree = ttk.Treeview(
            frame,
            columns=("n", "x", "y"),
            show="headings",
            selectmode="browse",
            height=12,
        )
        owner.tree.heading("n", text="#")
        owner.tree.heading("x", text="X")
        owner.tree.heading("y", text="Y")
        owner.tree.column("n", width=44, anchor="e")
        owner.tree.column("x", width=120, anchor="e")
        owner.tree.column("y", width=120, anchor="e")

        btns = ttk.Frame(frame)
        btns.pack(side="bottom", fill="x", pady=(8, 0))
        ttk.Button(btns, text="Delete", command=on_delete).pack(side="left")
        ttk.Button(btns, text="Undo", command=on_undo).pack(side="left", padx=(8, 0))
        ttk.Button(btns, text="Clear", command=on_clear).pack(side="left", padx=(8, 0))
        ttk.Button(btns, text="Sort by X", command=on_sort).pack(side="left", padx=(8, 0))
        owner.point_count = tk.StringVar(value="0 points")
        ttk.Label(btns, textvariable=owner.point_count).pack(side="right")

        scroll = ttk.Scrollbar(frame, orient="vertical", command=owner.tree.yview)
        owner.tree.configure(yscrollcommand=scroll.set)
        scroll.pack(side="right", fill="y")
        owner.tree.pack(side="top", fill="both", expand=True)

        owner.tree.bind("<Double-1>", on_edit)
        owner.tree.bind("<Delete>", lambda _e: on_delete())


class DataActor:
    def __init__(self, owner) -> None:
        object.__setattr__(self, "owner", owner)

    def __getattr__(self, name):
        return getattr(self.owner, name)

    def __setattr__(self, name, value) -> None:
        if name == "owner":
            object.__setattr__(self, name, value)
            return
        setattr(self.owner, name, value)

    def _refresh_table(self) -> None:
        # rows are keyed by current index; rebuild after every store change
        for item in self.tree.get_children(""):
            self.tree.delete(item)
        rows = self.state.store.to_rows()
        for r in rows:
            self.tree.insert(
                "",
                "end",
                iid=str(r["index"]),
                values=(r["index"] + 1, format_number(r["x"]), format_number(r["y"])),
            )
        self.point_count.set(f"{len(rows)} points")


    def _selected_index(self):
        sel = self.tree.selection()
        if not sel:
            return None
        return int(sel[0])


    def _after_change(self) -> None:
        self._refresh_table()
        self.owner.canvas_actor._redraw_overlay()


    def _delete_selected(self) -> None:
        idx = self._selected_index()
        if idx is None:
            return
        if self.state.store.remove_at(idx):
            self._after_change()


    def _undo(self) -> None:
        if self.state.store.remove_last():
            self._after_change()


    def _clear(self) -> None:
        if not len(self.state.store):
            return
        self.state.store.clear()
        self._after_change()


    def _sort(self) -> None:
        self.state.store.sort_by_data_x()
        self._after_change()


    def _on_tree_double_click(self, event) -> None:
        region = self.tree.identify("region", event.x, event.y)
        if region != "cell":
            return
        row = self.tree.identify_row(event.y)
        col = self.tree.identify_column(event.x)
        if not row or col not in ("#2", "#3"):
            return
        idx = int(row)
        if idx >= len(self.state.store):
            return
        pt = self.state.store[idx]
        axis = "X" if col == "#2" else "Y"
        current = pt.data_x if axis == "X" else pt.data_y

        new = simpledialog.askstring(
            "Edit point", f"{axis} value for point {idx + 1}:", initialvalue=format_number(current), parent=self.owner
        )
        if new is None:
            return
        v = parse_value(new)
        if axis == "X":
            self.state.store.update_at(idx, v, pt.data_y)
        else:
            self.state.store.update_at(idx, pt.data_x, v)
        self._refresh_table()
