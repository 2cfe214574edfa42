import customtkinter as ctk
import threading
from tkinter import messagebox
from typing import Optional

from printer_buddy.schemas.quiz import FetchState, QuizStep
from printer_buddy.services.api_client import GatewayError, PrinterAPIClient
from printer_buddy.services.quiz import QuizSession
from printer_buddy.services.quiz_options import QuizOptions, get_quiz_options
from printer_buddy.ui.components.recommendation_card import RecommendationCard
from printer_buddy.utils.logger import log


class QuizFrame(ctk.CTkFrame):
    """
    "Find Printer" view: renders the current QuizSession step.

    The frame holds no quiz state of its own. Every widget reads from the
    session and writes back through its setters; session changes trigger a
    re-render on the Tk thread.
    """

    def __init__(
        self,
        master,
        client: Optional[PrinterAPIClient] = None,
        options: Optional[QuizOptions] = None,
    ):
        super().__init__(master, fg_color="transparent")
        self.options = options or get_quiz_options()
        self.session = QuizSession(client=client)
        self._unsubscribe = self.session.subscribe(self._on_session_change)
        self._rendered_step: Optional[QuizStep] = None
        self._rendered_fetch: Optional[FetchState] = None
        self._render_job = None
        self._closed = False

        self.progress = ctk.CTkFrame(self, fg_color="transparent")
        self.progress.pack(fill="x", padx=20, pady=(15, 5))

        self.content = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self.content.pack(fill="both", expand=True, padx=10, pady=10)

        self.nav = ctk.CTkFrame(self, fg_color="transparent")
        self.nav.pack(fill="x", padx=20, pady=(5, 15))

        self.render()

    def destroy(self):
        self._closed = True
        self._unsubscribe()
        self.session.close()
        if self._render_job is not None:
            self.after_cancel(self._render_job)
            self._render_job = None
        super().destroy()

    def _on_session_change(self, session):
        # May arrive on the fetch worker thread; at most one render is queued
        if self._closed or self._render_job is not None:
            return
        self._render_job = self.after(0, self._flush_render)

    def _flush_render(self):
        self._render_job = None
        if not self._closed:
            self.render()

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self):
        """Rebuild content when the step or fetch state changed; always refresh nav."""
        step = self.session.step
        fetch_state = self.session.fetch_state
        if step != self._rendered_step or (
            step == QuizStep.RESULTS and fetch_state != self._rendered_fetch
        ):
            self._rendered_step = step
            self._rendered_fetch = fetch_state
            self._render_progress(step)
            for widget in self.content.winfo_children():
                widget.destroy()
            self._build_step(step)
        self._render_nav(step)

    def _render_progress(self, current: QuizStep):
        for widget in self.progress.winfo_children():
            widget.destroy()
        self.progress.grid_columnconfigure(tuple(range(len(QuizStep))), weight=1)
        for step in QuizStep:
            if step < current:
                color = "#166534"
            elif step == current:
                color = "#1e40af"
            else:
                color = "gray30"
            ctk.CTkLabel(
                self.progress,
                text=f"{step.value + 1}. {step.title}",
                fg_color=color,
                corner_radius=6,
                font=("Arial", 11, "bold" if step == current else "normal"),
            ).grid(row=0, column=step.value, padx=3, sticky="ew")

    def _build_step(self, step: QuizStep):
        header = self.options.step_header(step)
        if step != QuizStep.RESULTS:
            self._build_header(header.title, header.subtitle)

        if step == QuizStep.SKILL_LEVEL:
            self._build_choice_group(
                self.options.skill_levels,
                current=self.session.answers.skill_level,
                on_select=self.session.set_skill_level,
            )
        elif step == QuizStep.USE_CASE:
            self._build_choice_group(
                self.options.use_cases,
                current=self.session.answers.use_case,
                on_select=self.session.set_use_case,
            )
        elif step == QuizStep.BUDGET:
            self._build_budget_step()
        elif step == QuizStep.PREFERENCES:
            self._build_preferences_step()
        else:
            self._build_results_step(header.title, header.subtitle)

    def _build_header(self, title, subtitle):
        ctk.CTkLabel(self.content, text=title, font=("Arial", 20, "bold")).pack(pady=(20, 5))
        if subtitle:
            ctk.CTkLabel(
                self.content, text=subtitle, font=("Arial", 12), text_color="gray"
            ).pack(pady=(0, 20))

    def _build_choice_group(self, choices, current, on_select):
        """Radio group for skill level / use case. Selecting updates the session."""
        var = ctk.StringVar(value=current.value if current else "")
        for option in choices:
            row = ctk.CTkFrame(self.content, corner_radius=8)
            row.pack(fill="x", padx=50, pady=6)
            ctk.CTkRadioButton(
                row,
                text=f"{option.icon}  {option.name}".strip(),
                variable=var,
                value=option.value,
                font=("Arial", 14, "bold"),
                command=lambda v=option.value: on_select(v),
            ).pack(anchor="w", padx=15, pady=(10, 2))
            ctk.CTkLabel(
                row, text=option.description, font=("Arial", 11), text_color="gray"
            ).pack(anchor="w", padx=45, pady=(0, 10))

    def _build_budget_step(self):
        answers = self.session.answers
        step = self.options.budget_step

        self.budget_label = ctk.CTkLabel(
            self.content,
            text=self._budget_text(answers.budget_min, answers.budget_max),
            font=("Arial", 24, "bold"),
        )
        self.budget_label.pack(pady=(0, 20))

        self.min_slider = self._build_budget_slider(
            "Minimum", self.options.min_slider, answers.budget_min, step,
            self.session.set_budget_min,
        )
        self.max_slider = self._build_budget_slider(
            "Maximum", self.options.max_slider, answers.budget_max, step,
            self.session.set_budget_max,
        )

        presets = ctk.CTkFrame(self.content, fg_color="transparent")
        presets.pack(pady=20)
        for preset in self.options.budget_presets:
            active = preset.matches(answers.budget_min, answers.budget_max)
            ctk.CTkButton(
                presets,
                text=preset.label,
                width=100,
                fg_color="#1e40af" if active else "gray30",
                command=lambda p=preset: self._apply_preset(p),
            ).pack(side="left", padx=5)

    def _build_budget_slider(self, title, slider_range, value, step, setter):
        f = ctk.CTkFrame(self.content, fg_color="transparent")
        f.pack(fill="x", padx=50, pady=10)
        ctk.CTkLabel(f, text=title, font=("Arial", 12, "bold")).pack(anchor="w")

        def on_move(raw):
            setter(raw)
            current = self.session.answers
            self.budget_label.configure(
                text=self._budget_text(current.budget_min, current.budget_max)
            )

        slider = ctk.CTkSlider(
            f,
            from_=slider_range.start,
            to=slider_range.end,
            number_of_steps=max(1, (slider_range.end - slider_range.start) // step),
            command=on_move,
        )
        slider.set(value)
        slider.pack(fill="x", pady=5)
        return slider

    def _apply_preset(self, preset):
        self.session.apply_preset(preset.minimum, preset.maximum)
        # Presets re-render the step so sliders and highlighted preset follow
        self._rendered_step = None
        self.render()

    @staticmethod
    def _budget_text(budget_min, budget_max):
        return f"${budget_min:,}  –  ${budget_max:,}"

    def _build_preferences_step(self):
        answers = self.session.answers
        toggles = [
            ("prefer_enclosure", answers.prefer_enclosure, self.session.set_prefer_enclosure),
            ("prefer_auto_leveling", answers.prefer_auto_leveling, self.session.set_prefer_auto_leveling),
        ]
        for name, value, setter in toggles:
            info = self.options.feature(name)
            row = ctk.CTkFrame(self.content, corner_radius=8)
            row.pack(fill="x", padx=50, pady=6)
            var = ctk.BooleanVar(value=value)
            ctk.CTkSwitch(
                row,
                text=f"{info.icon}  {info.name}".strip(),
                variable=var,
                font=("Arial", 14, "bold"),
                command=lambda v=var, s=setter: s(v.get()),
            ).pack(anchor="w", padx=15, pady=(10, 2))
            ctk.CTkLabel(
                row, text=info.description, font=("Arial", 11), text_color="gray"
            ).pack(anchor="w", padx=60, pady=(0, 10))

    def _build_results_step(self, title, subtitle):
        state = self.session.fetch_state

        if state.is_loading or state.is_idle:
            ctk.CTkLabel(
                self.content, text="Finding your perfect printers...", font=("Arial", 16)
            ).pack(pady=60)
            bar = ctk.CTkProgressBar(self.content, mode="indeterminate")
            bar.pack(fill="x", padx=120)
            bar.start()
        elif state.is_failure:
            ctk.CTkLabel(
                self.content,
                text=state.message,
                font=("Arial", 13),
                text_color="#f87171",
                wraplength=500,
            ).pack(pady=(60, 15))
            ctk.CTkButton(
                self.content, text="Try Again", command=self.session.fetch_recommendations
            ).pack()
        elif not state.results:
            ctk.CTkLabel(self.content, text="No matches found", font=("Arial", 18, "bold")).pack(pady=(60, 5))
            ctk.CTkLabel(
                self.content,
                text="Try adjusting your budget or preferences",
                text_color="gray",
            ).pack()
        else:
            self._build_header(title, subtitle)
            for result in state.results:
                RecommendationCard(
                    self.content, result, on_select=self._show_printer_details
                ).pack(fill="x", padx=20, pady=6)

    def _show_printer_details(self, printer_id):
        """Load full printer details off the Tk thread."""
        threading.Thread(
            target=self._load_printer_details,
            args=(printer_id,),
            name="PrinterDetails",
            daemon=True,
        ).start()

    def _load_printer_details(self, printer_id):
        try:
            printer = self.session.client.fetch_printer(printer_id)
        except GatewayError as e:
            log.error(f"Failed to load printer {printer_id}: {e}")
            message = f"Could not load printer details: {e}"
            self.after(0, lambda: self._show_details_error(message))
            return
        self.after(0, lambda: self._present_printer(printer))

    def _show_details_error(self, message):
        if not self._closed:
            messagebox.showerror("Error", message)

    def _present_printer(self, printer):
        if self._closed:
            return
        lines = [
            f"{printer.manufacturer} {printer.name}",
            f"Price: ${printer.price:,.0f}",
            f"Build volume: {printer.build_volume_description}",
            f"Motion system: {printer.motion_system_display}",
        ]
        if printer.materials:
            lines.append(f"Materials: {', '.join(printer.materials)}")
        if printer.description:
            lines.extend(["", printer.description])
        messagebox.showinfo(printer.name, "\n".join(lines))

    # =========================================================================
    # Navigation bar
    # =========================================================================

    def _render_nav(self, step: QuizStep):
        for widget in self.nav.winfo_children():
            widget.destroy()

        if step != QuizStep.SKILL_LEVEL:
            ctk.CTkButton(
                self.nav, text="‹ Back", width=100, fg_color="gray30", command=self.session.retreat
            ).pack(side="left")

        if step == QuizStep.RESULTS:
            ctk.CTkButton(
                self.nav, text="↺ Start Over", width=140, command=self.session.reset
            ).pack(side="right")
        else:
            label = "See Results ✨" if step == QuizStep.PREFERENCES else "Continue ›"
            self.continue_btn = ctk.CTkButton(
                self.nav,
                text=label,
                width=140,
                state="normal" if self.session.can_advance() else "disabled",
                command=self.session.advance,
            )
            self.continue_btn.pack(side="right")
