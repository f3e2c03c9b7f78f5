import logging
import sys
from pathlib import Path

import tkinter as tk
from tkinter import ttk, filedialog, messagebox

from PIL import Image, UnidentifiedImageError

from graph_digitizer.settings import load_settings
from graph_digitizer.ui_window import DigitizerWindow

logger = logging.getLogger("digitizer")

IMAGE_TYPES = [
    ("Images", "*.png *.jpg *.jpeg *.gif *.bmp *.tif *.tiff *.webp"),
    ("All files", "*.*"),
]


class GraphDigitizerApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("Graph Digitizer")
        self.geometry("420x140")
        self.settings = load_settings()
        self._windows: list[tk.Toplevel] = []
        self._build_ui()

    def _build_ui(self):
        frm = ttk.Frame(self, padding=12)
        frm.pack(fill="both", expand=True)

        ttk.Label(
            frm,
            text="Open a graph image, calibrate its axes, then extract data points by color.",
            wraplength=380,
            justify="left",
        ).pack(side="top", fill="x")

        btns = ttk.Frame(frm)
        btns.pack(side="top", fill="x", pady=(10, 0))
        ttk.Button(btns, text="Open image...", command=self.open_image).pack(side="left")
        ttk.Button(btns, text="Quit", command=self.destroy).pack(side="right")

        self.status = tk.StringVar(value="Ready.")
        ttk.Label(frm, textvariable=self.status).pack(side="bottom", fill="x", pady=(10, 0))

    def set_status(self, msg: str):
        self.status.set(msg)

    def register_dialog(self, win: tk.Toplevel) -> None:
        self._windows.append(win)

        def _forget(_evt=None, w=win):
            if _evt is not None and _evt.widget is not w:
                return
            if w in self._windows:
                self._windows.remove(w)

        win.bind("<Destroy>", _forget, add="+")

    def open_image(self, path: str = ""):
        if not path:
            path = filedialog.askopenfilename(parent=self, title="Open graph image", filetypes=IMAGE_TYPES)
        if not path:
            return
        try:
            with Image.open(path) as img:
                img.load()
                image = img.copy()
        except (OSError, UnidentifiedImageError) as e:
            messagebox.showerror("Open image", f"Could not open image:\n{e}", parent=self)
            return

        win = DigitizerWindow(self, image=image, settings=self.settings, title=Path(path).name)
        self.register_dialog(win)
        self.set_status(f"Loaded: {Path(path).name} ({image.width}x{image.height})")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = GraphDigitizerApp()
    if len(sys.argv) > 1:
        app.after(0, lambda: app.open_image(sys.argv[1]))
    app.mainloop()


if __name__ == "__main__":
    main()
