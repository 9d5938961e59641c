"""
SnapStash - desktop front-end
A dark-themed window for importing a memories export and downloading it
"""

import asyncio
import logging
import threading
from datetime import datetime
from pathlib import Path
from tkinter import filedialog

import customtkinter as ctk

from .coordinator import AppState, Coordinator
from .logging_setup import CallbackHandler, setup_logging
from .settings import get_settings

logger = logging.getLogger(__name__)


# ============== Theme & Styling ==============

# Snapchat-inspired yellow with dark theme
COLORS = {
    "bg_dark": "#0D0D0D",
    "bg_card": "#1A1A1A",
    "bg_hover": "#252525",
    "accent": "#FFFC00",
    "accent_hover": "#E6E300",
    "text_primary": "#FFFFFF",
    "text_secondary": "#888888",
    "border": "#333333",
}


class ModernButton(ctk.CTkButton):
    """Pill-shaped button, primary (yellow) or secondary (outlined)"""

    def __init__(self, master, text, command=None, variant="primary", **kwargs):
        if variant == "primary":
            style = dict(
                fg_color=COLORS["accent"],
                hover_color=COLORS["accent_hover"],
                text_color="#000000",
                font=ctk.CTkFont(family="Segoe UI", size=14, weight="bold"),
            )
        else:
            style = dict(
                fg_color="transparent",
                hover_color=COLORS["bg_hover"],
                text_color=COLORS["text_primary"],
                border_color=COLORS["border"],
                border_width=2,
                font=ctk.CTkFont(family="Segoe UI", size=14),
            )
        super().__init__(master, text=text, command=command, corner_radius=25, height=45, **style, **kwargs)


class StatsCard(ctk.CTkFrame):
    def __init__(self, master, title: str, value: str = "0", **kwargs):
        super().__init__(master, fg_color=COLORS["bg_card"], corner_radius=16, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self.value_label = ctk.CTkLabel(
            self,
            text=value,
            font=ctk.CTkFont(family="Segoe UI", size=28, weight="bold"),
            text_color=COLORS["text_primary"],
        )
        self.value_label.grid(row=0, column=0, pady=(15, 5))

        ctk.CTkLabel(
            self,
            text=title,
            font=ctk.CTkFont(family="Segoe UI", size=11),
            text_color=COLORS["text_secondary"],
        ).grid(row=1, column=0, pady=(0, 15))

    def set_value(self, value: str):
        self.value_label.configure(text=value)


class ProgressSection(ctk.CTkFrame):
    def __init__(self, master, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)

        self.progress = ctk.CTkProgressBar(
            self,
            height=8,
            corner_radius=4,
            fg_color=COLORS["bg_card"],
            progress_color=COLORS["accent"],
        )
        self.progress.pack(fill="x")
        self.progress.set(0)

        self.percent_label = ctk.CTkLabel(
            self,
            text="0%",
            font=ctk.CTkFont(family="Segoe UI", size=12, weight="bold"),
            text_color=COLORS["accent"],
        )
        self.percent_label.pack(pady=(10, 0))

    def update_progress(self, value: float):
        self.progress.set(value)
        self.percent_label.configure(text=f"{int(value * 100)}%")


# ============== Event loop ==============

class LoopThread(threading.Thread):
    """Runs the coordinator's event loop off the Tk thread."""

    def __init__(self):
        super().__init__(daemon=True)
        self.loop = asyncio.new_event_loop()

    def run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(self, coro) -> "asyncio.Future":
        return asyncio.run_coroutine_threadsafe(coro, self.loop)


# ============== Main Application ==============

class SnapStashApp(ctk.CTk):
    def __init__(self, coordinator: Coordinator, runner: LoopThread):
        super().__init__()

        self.title("SnapStash")
        self.geometry("1000x760")
        self.configure(fg_color=COLORS["bg_dark"])

        self.coordinator = coordinator
        self.runner = runner

        self._create_widgets()

        self._log_handler = CallbackHandler(self._log)
        logging.getLogger("snapstash").addHandler(self._log_handler)
        self.coordinator.subscribe(self._on_state)
        self._render(self.coordinator.state)

    def _create_widgets(self):
        container = ctk.CTkFrame(self, fg_color="transparent")
        container.pack(fill="both", expand=True, padx=30, pady=30)
        container.grid_columnconfigure(0, weight=3)
        container.grid_columnconfigure(1, weight=2)
        container.grid_rowconfigure(0, weight=1)

        left = ctk.CTkFrame(container, fg_color="transparent")
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 20))
        right = ctk.CTkFrame(container, fg_color="transparent")
        right.grid(row=0, column=1, sticky="nsew")

        ctk.CTkLabel(
            left,
            text="SnapStash",
            font=ctk.CTkFont(family="Segoe UI", size=28, weight="bold"),
            text_color=COLORS["text_primary"],
        ).pack(pady=(0, 5))

        self.status_label = ctk.CTkLabel(
            left,
            text="",
            font=ctk.CTkFont(family="Segoe UI", size=13),
            text_color=COLORS["text_secondary"],
            wraplength=520,
        )
        self.status_label.pack(fill="x", pady=(0, 15))

        self.progress_section = ProgressSection(left)

        stats = ctk.CTkFrame(left, fg_color="transparent")
        stats.pack(fill="x", pady=(0, 15))
        stats.grid_columnconfigure((0, 1, 2), weight=1)
        self.stats_total = StatsCard(stats, "Memories")
        self.stats_total.grid(row=0, column=0, padx=(0, 8), sticky="nsew")
        self.stats_downloaded = StatsCard(stats, "Downloaded")
        self.stats_downloaded.grid(row=0, column=1, padx=8, sticky="nsew")
        self.stats_years = StatsCard(stats, "Years")
        self.stats_years.grid(row=0, column=2, padx=(8, 0), sticky="nsew")

        self.sections_text = ctk.CTkTextbox(
            left,
            fg_color=COLORS["bg_card"],
            text_color=COLORS["text_primary"],
            corner_radius=12,
            font=ctk.CTkFont(family="Consolas", size=12),
        )
        self.sections_text.pack(fill="both", expand=True, pady=(0, 15))

        buttons = ctk.CTkFrame(left, fg_color="transparent")
        buttons.pack(fill="x")
        self.import_btn = ModernButton(buttons, text="Import JSON", command=self._import_json, variant="secondary")
        self.import_btn.pack(side="left", fill="x", expand=True, padx=(0, 5))
        self.download_btn = ModernButton(buttons, text="Download All", command=self._start_download)

        self.console_text = ctk.CTkTextbox(
            right,
            fg_color=COLORS["bg_card"],
            text_color=COLORS["text_primary"],
            corner_radius=12,
            font=ctk.CTkFont(family="Consolas", size=12),
            wrap="word",
        )
        self.console_text.pack(fill="both", expand=True)
        self.console_text.insert("end", "Console ready.\n")
        self.console_text.configure(state="disabled")

    # ---------- console ----------

    def _append_log(self, message: str):
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.console_text.configure(state="normal")
        self.console_text.insert("end", f"[{timestamp}] {message}\n")
        self.console_text.see("end")
        self.console_text.configure(state="disabled")

    def _log(self, message: str):
        self.after(0, lambda: self._append_log(message))

    # ---------- state ----------

    def _on_state(self, state: AppState):
        # Called on the loop thread
        self.after(0, lambda s=state: self._render(s))

    def _render(self, state: AppState):
        self.status_label.configure(text=state.status_message)

        if state.is_downloading:
            self.progress_section.pack(fill="x", pady=(0, 15), before=self.sections_text)
            self.progress_section.update_progress(state.progress)
            self.download_btn.pack_forget()
        else:
            self.progress_section.pack_forget()
            if state.all_memories:
                self.download_btn.pack(side="left", fill="x", expand=True, padx=(5, 0))
            else:
                self.download_btn.pack_forget()

        self.import_btn.configure(state="disabled" if state.is_processing else "normal")
        self.stats_total.set_value(str(len(state.all_memories)))
        self.stats_downloaded.set_value(str(len(state.downloaded_files)))
        self.stats_years.set_value(str(len(state.sections)))
        self._render_sections(state)

    def _render_sections(self, state: AppState):
        lines = []
        for year_section in state.sections:
            lines.append(year_section.year)
            for month in year_section.months:
                done = sum(1 for m in month.memories if m.date in state.downloaded_files)
                lines.append(f"    {month.name:<10} {done:>4}/{len(month.memories)}")
        self.sections_text.configure(state="normal")
        self.sections_text.delete("1.0", "end")
        self.sections_text.insert("end", "\n".join(lines) if lines else "Import JSON to start")
        self.sections_text.configure(state="disabled")

    # ---------- actions ----------

    def _import_json(self):
        path = filedialog.askopenfilename(filetypes=[("JSON files", "*.json"), ("All files", "*.*")])
        if path:
            logger.info("Importing %s", Path(path).name)
            self.runner.submit(self.coordinator.load_json(Path(path)))

    def _start_download(self):
        self.runner.submit(self.coordinator.start_download())


# ============== Entry Point ==============

def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    ctk.set_appearance_mode("dark")
    ctk.set_default_color_theme("dark-blue")

    runner = LoopThread()
    runner.start()
    coordinator = Coordinator(settings)

    app = SnapStashApp(coordinator, runner)
    runner.submit(coordinator.restore())
    app.mainloop()

    runner.submit(coordinator.wait_for_background()).result(timeout=10)
    runner.loop.call_soon_threadsafe(runner.loop.stop)


if __name__ == "__main__":
    main()
