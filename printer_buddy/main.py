"""
Print Decision Buddy desktop app.

Run with ``python -m printer_buddy.main`` or through ``launch.py``.
"""

import threading

import customtkinter as ctk

from printer_buddy.config.manager import config_manager
from printer_buddy.services.api_client import GatewayError, PrinterAPIClient
from printer_buddy.ui.views.quiz import QuizFrame
from printer_buddy.ui.views.settings import SettingsFrame
from printer_buddy.utils.logger import log


class App(ctk.CTk):
    def __init__(self):
        super().__init__()
        self.title("3D Print Decision Buddy")
        self.geometry("900x720")
        self.minsize(720, 560)

        ctk.set_appearance_mode(config_manager.get("preferences.theme", "Dark"))
        ctk.set_widget_scaling(config_manager.get("preferences.appearance_scale", 1.0))

        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        # --- Sidebar ---
        sidebar = ctk.CTkFrame(self, width=180, corner_radius=0)
        sidebar.grid(row=0, column=0, sticky="nsw")
        ctk.CTkLabel(sidebar, text="🖨  Print Buddy", font=ctk.CTkFont(size=18, weight="bold")).pack(padx=20, pady=(20, 30))

        self.nav_buttons = {}
        for name, label in [("quiz", "Find Printer"), ("settings", "Settings")]:
            btn = ctk.CTkButton(
                sidebar, text=label, fg_color="transparent", anchor="w",
                command=lambda n=name: self.show_view(n)
            )
            btn.pack(fill="x", padx=10, pady=4)
            self.nav_buttons[name] = btn

        self.health_lbl = ctk.CTkLabel(sidebar, text="● Checking server...", text_color="gray", font=("Arial", 11))
        self.health_lbl.pack(side="bottom", anchor="w", padx=15, pady=15)

        # --- Main area ---
        self.container = ctk.CTkFrame(self, fg_color="transparent")
        self.container.grid(row=0, column=1, sticky="nsew", padx=10, pady=10)

        self.views = {}
        self.current_view = None
        self.show_view("quiz")
        self.refresh_health()

    def _build_view(self, name):
        if name == "quiz":
            return QuizFrame(self.container, client=PrinterAPIClient())
        return SettingsFrame(self.container, app=self)

    def show_view(self, name):
        if self.current_view is not None:
            self.views[self.current_view].pack_forget()
        if name not in self.views:
            self.views[name] = self._build_view(name)
        self.views[name].pack(fill="both", expand=True)
        self.current_view = name

        for key, btn in self.nav_buttons.items():
            btn.configure(fg_color=("gray75", "gray25") if key == name else "transparent")

    def on_settings_saved(self):
        """Rebuild the quiz with a client for the new server and re-check health."""
        quiz = self.views.pop("quiz", None)
        if quiz is not None:
            quiz.destroy()
        self.refresh_health()

    def refresh_health(self):
        self.health_lbl.configure(text="● Checking server...", text_color="gray")
        client = PrinterAPIClient()

        def check():
            try:
                status = client.check_health()
                text, color = f"● Server {status}", "#4ade80"
            except GatewayError as e:
                log.warning(f"Health check failed: {e}")
                text, color = "● Server offline", "#f87171"
            self.after(0, lambda: self.health_lbl.configure(text=text, text_color=color))

        threading.Thread(target=check, name="HealthCheck", daemon=True).start()


def main():
    log.info("Starting Print Decision Buddy")
    app = App()
    app.mainloop()


if __name__ == "__main__":
    main()
