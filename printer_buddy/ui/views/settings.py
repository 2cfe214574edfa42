import customtkinter as ctk
import threading
from tkinter import messagebox
from printer_buddy.config.manager import config_manager
from printer_buddy.services.api_client import GatewayError, PrinterAPIClient
from printer_buddy.utils.logger import log


class SettingsFrame(ctk.CTkFrame):

    THEMES = ["Dark", "Light", "System"]

    def __init__(self, master, app=None):
        super().__init__(master, fg_color="transparent")
        self.app = app
        self.token_visible = False

        ctk.CTkLabel(self, text="Settings", font=ctk.CTkFont(size=24, weight="bold")).pack(anchor="w", pady=10)

        # --- Backend connection ---
        api_frame = ctk.CTkFrame(self)
        api_frame.pack(fill="x", pady=10)
        ctk.CTkLabel(api_frame, text="Catalog Server", font=("Arial", 14, "bold")).pack(anchor="w", padx=10, pady=5)

        self.url_entry = self._entry_row(api_frame, "Server URL", config_manager.get_api_base_url())
        self.timeout_entry = self._entry_row(
            api_frame, "Timeout (seconds)", f"{config_manager.get_api_timeout():g}"
        )

        token_row = ctk.CTkFrame(api_frame, fg_color="transparent")
        token_row.pack(fill="x", pady=5)
        ctk.CTkLabel(token_row, text="Access Token", width=150, anchor="w").pack(side="left", padx=10)
        self.token_entry = ctk.CTkEntry(token_row, show="*")
        self.token_entry.pack(side="left", fill="x", expand=True, padx=10)
        token = config_manager.get_api_token()
        if token:
            self.token_entry.insert(0, token)
        self.token_btn = ctk.CTkButton(
            token_row, text="Show", width=60, fg_color="transparent",
            text_color="gray", hover_color="gray30",
            command=self.toggle_token_visibility
        )
        self.token_btn.pack(side="left", padx=(0, 10))

        ctk.CTkLabel(
            api_frame,
            text="The token is optional and stored in your OS keychain, not the config file.",
            font=("Arial", 11), text_color="gray"
        ).pack(anchor="w", padx=10, pady=(0, 10))

        # --- Appearance ---
        look_frame = ctk.CTkFrame(self)
        look_frame.pack(fill="x", pady=10)
        ctk.CTkLabel(look_frame, text="Appearance", font=("Arial", 14, "bold")).pack(anchor="w", padx=10, pady=5)
        self.theme_var = ctk.StringVar(value=config_manager.get("preferences.theme", "Dark"))
        ctk.CTkSegmentedButton(
            look_frame, values=self.THEMES, variable=self.theme_var,
            command=ctk.set_appearance_mode
        ).pack(anchor="w", padx=10, pady=(0, 10))

        # --- Actions ---
        actions_frame = ctk.CTkFrame(self, fg_color="transparent")
        actions_frame.pack(fill="x", pady=10)
        ctk.CTkButton(actions_frame, text="Save Settings", command=self.save_settings, width=200).pack(side="left", padx=10)
        self.test_btn = ctk.CTkButton(
            actions_frame, text="Test Connection", fg_color="gray30", command=self.test_connection
        )
        self.test_btn.pack(side="left", padx=10)
        self.status_lbl = ctk.CTkLabel(actions_frame, text="", text_color="gray")
        self.status_lbl.pack(side="left", padx=10)

    def _entry_row(self, parent, label, value):
        row = ctk.CTkFrame(parent, fg_color="transparent")
        row.pack(fill="x", pady=5)
        ctk.CTkLabel(row, text=label, width=150, anchor="w").pack(side="left", padx=10)
        ent = ctk.CTkEntry(row)
        ent.pack(side="left", fill="x", expand=True, padx=10)
        ent.insert(0, value)
        return ent

    def toggle_token_visibility(self):
        self.token_visible = not self.token_visible
        self.token_entry.configure(show="" if self.token_visible else "*")
        self.token_btn.configure(text="Hide" if self.token_visible else "Show")

    def _read_timeout(self):
        raw = self.timeout_entry.get().strip()
        try:
            timeout = float(raw)
        except ValueError:
            return None
        return timeout if timeout > 0 else None

    def save_settings(self):
        url = self.url_entry.get().strip()
        if not url.startswith(("http://", "https://")):
            messagebox.showerror("Invalid URL", "Server URL must start with http:// or https://")
            return
        timeout = self._read_timeout()
        if timeout is None:
            messagebox.showerror("Invalid Timeout", "Timeout must be a positive number of seconds.")
            return

        config_manager.set_api_base_url(url)
        config_manager.set("api.timeout_seconds", timeout)
        config_manager.set("preferences.theme", self.theme_var.get())
        config_manager.set_secure(config_manager.API_TOKEN_KEY, self.token_entry.get().strip())
        log.info(f"Settings saved (server {url})")

        if self.app is not None:
            self.app.on_settings_saved()
        messagebox.showinfo("Saved", "Settings saved. New requests will use them.")

    def test_connection(self):
        """Probe /health with the values currently in the form, off the Tk thread."""
        client = PrinterAPIClient(
            base_url=self.url_entry.get().strip(),
            timeout=self._read_timeout(),
            token=self.token_entry.get().strip(),
        )
        self.test_btn.configure(state="disabled")
        self.status_lbl.configure(text="Connecting...", text_color="gray")

        def probe():
            try:
                status = client.check_health()
                text, color = f"Connected ({status})", "#4ade80"
            except GatewayError as e:
                text, color = str(e), "#f87171"
            self.after(0, lambda: self._show_probe_result(text, color))

        threading.Thread(target=probe, name="HealthProbe", daemon=True).start()

    def _show_probe_result(self, text, color):
        self.test_btn.configure(state="normal")
        self.status_lbl.configure(text=text, text_color=color)
