import logging
import os
import tkinter as tk
from importlib import metadata
from tkinter import messagebox, ttk

import matplotlib

LOG_LEVEL_ENV_VAR = "YARD_SIM_LOG_LEVEL"


def _get_app_version() -> str:
    for distribution in ("port-yard-sim", "yard_app"):
        try:
            return metadata.version(distribution)
        except metadata.PackageNotFoundError:
            continue
    return "dev"


def main() -> None:
    logging.basicConfig(
        level=os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    matplotlib.use("TkAgg")

    from yard_app.gui.tab_yard import TabYard
    from yard_core.config import load_config
    from yard_core.models import SizeClass
    from yard_core.yard import Yard

    app_version = _get_app_version()

    root = tk.Tk()
    root.title(f"Port yard crane v{app_version}")
    screen_w = root.winfo_screenwidth()
    screen_h = root.winfo_screenheight()
    width = min(int(screen_w * 0.9), 1600)
    height = min(int(screen_h * 0.9), 900)
    root.geometry(f"{width}x{height}")
    root.minsize(1000, 650)

    style = ttk.Style()
    style.configure("TLabel", padding=(2, 1))
    style.configure("TEntry", padding=(2, 1))
    style.configure("TButton", padding=(6, 3))

    try:
        config = load_config()
    except (OSError, ValueError) as e:
        logging.getLogger(__name__).exception("Failed to load yard config")
        messagebox.showerror("Config", str(e))
        root.destroy()
        return

    yard = Yard(config)
    tab = TabYard(root, yard)
    tab.pack(fill=tk.BOTH, expand=True)
    tab.add_container(SizeClass.ONE_UNIT)

    root.mainloop()


if __name__ == "__main__":
    main()
