"""
Recommendation Card Component for the printer quiz.

Shows one scored printer with a match badge, price and key features, and
expands to list the backend's match reasons.
"""

import customtkinter as ctk
from typing import Callable, Optional

from printer_buddy.schemas.quiz import RecommendationResult
from printer_buddy.ui.formatting import feature_tags, format_price, get_match_badge


class RecommendationCard(ctk.CTkFrame):
    """
    A recommendation card with compact and expanded views.

    Starts compact; "More" reveals the build volume and match reasons.
    """

    def __init__(
        self,
        master,
        result: RecommendationResult,
        on_select: Optional[Callable[[int], None]] = None,
    ):
        super().__init__(master, corner_radius=10, border_width=1, border_color="gray30")

        self.result = result
        self.on_select = on_select
        self.expanded = False

        self._build_compact_view()
        self._build_expanded_view()
        self.expanded_frame.pack_forget()

    def _build_compact_view(self):
        printer = self.result.printer
        self.compact_frame = ctk.CTkFrame(self, fg_color="transparent")
        self.compact_frame.pack(fill="x", padx=15, pady=12)
        self.compact_frame.grid_columnconfigure(0, weight=1)

        name_row = ctk.CTkFrame(self.compact_frame, fg_color="transparent")
        name_row.grid(row=0, column=0, sticky="w")

        ctk.CTkLabel(
            name_row,
            text=f"{printer.manufacturer} {printer.name}",
            font=("Arial", 14, "bold")
        ).pack(side="left")

        badge = get_match_badge(self.result.match_score)
        ctk.CTkLabel(
            name_row,
            text=badge.text,
            font=("Arial", 10, "bold"),
            text_color=badge.text_color,
            fg_color=badge.fg_color,
            corner_radius=4,
            padx=6,
            pady=2
        ).pack(side="left", padx=(10, 0))

        stats_row = ctk.CTkFrame(self.compact_frame, fg_color="transparent")
        stats_row.grid(row=1, column=0, sticky="w", pady=(4, 0))

        for text in [format_price(printer.price), f"Match: {self.result.match_score}%"]:
            ctk.CTkLabel(
                stats_row, text=text, font=("Arial", 11), text_color="gray60"
            ).pack(side="left", padx=(0, 15))

        ctk.CTkLabel(
            stats_row,
            text=" · ".join(feature_tags(self.result)),
            font=("Arial", 11),
            text_color="gray60"
        ).pack(side="left")

        self.expand_btn = ctk.CTkButton(
            self.compact_frame,
            text="▼ More",
            width=70,
            height=28,
            fg_color="transparent",
            hover_color="gray25",
            text_color="gray60",
            command=self._toggle_expand
        )
        self.expand_btn.grid(row=0, column=1, rowspan=2, padx=(10, 0))

    def _build_expanded_view(self):
        printer = self.result.printer
        self.expanded_frame = ctk.CTkFrame(self, fg_color="#1a1a1a", corner_radius=0)

        ctk.CTkLabel(
            self.expanded_frame,
            text=f"Build volume: {printer.build_volume_description}",
            font=("Arial", 11),
            text_color="gray70"
        ).pack(anchor="w", padx=15, pady=(10, 5))

        if self.result.reasons:
            ctk.CTkLabel(
                self.expanded_frame, text="Why it matches", font=("Arial", 12, "bold")
            ).pack(anchor="w", padx=15, pady=(5, 2))
            for reason in self.result.reasons:
                ctk.CTkLabel(
                    self.expanded_frame,
                    text=f"• {reason}",
                    font=("Arial", 11),
                    wraplength=480,
                    justify="left"
                ).pack(anchor="w", padx=25)

        if self.on_select:
            ctk.CTkButton(
                self.expanded_frame,
                text="View Details",
                height=28,
                command=lambda: self.on_select(printer.id)
            ).pack(anchor="e", padx=15, pady=10)

    def _toggle_expand(self):
        self.expanded = not self.expanded
        if self.expanded:
            self.expanded_frame.pack(fill="x")
            self.expand_btn.configure(text="▲ Less")
        else:
            self.expanded_frame.pack_forget()
            self.expand_btn.configure(text="▼ More")
