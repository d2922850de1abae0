from __future__ import annotations

import logging

import customtkinter as ctk

from study_assistant.bootstrap import IdentityBootstrap
from study_assistant.config import AppSettings, ConfigurationError
from study_assistant.logging_utils import configure_logging, install_excepthook
from study_assistant.models import BootstrapSnapshot, Panel
from study_assistant.router import panel_labels, render_panel
from study_assistant.services import StudyAssistantService

logger = logging.getLogger(__name__)

ACCENT_COLOR = "#4f46e5"
MUTED_TEXT_COLOR = "#6b7280"


class MainWindow(ctk.CTk):
	def __init__(self, service: StudyAssistantService):
		super().__init__()
		self._service = service
		self.title("AI Student Assistant")
		self.geometry("1100x760")
		self.minsize(720, 520)
		self.protocol("WM_DELETE_WINDOW", self._on_close)

		self._active_panel = ctk.StringVar(value=Panel.CHAT.value)
		self._shell_visible = False

		self._loading_frame = ctk.CTkFrame(self, corner_radius=12)
		self._loading_progress = ctk.CTkProgressBar(self._loading_frame, mode="indeterminate", width=240)
		self._loading_progress.pack(padx=24, pady=(24, 12))
		self._loading_message_label = ctk.CTkLabel(
			self._loading_frame,
			text="Initializing application...",
			font=ctk.CTkFont(weight="bold"),
		)
		self._loading_message_label.pack(padx=24, pady=(0, 4))
		ctk.CTkLabel(
			self._loading_frame,
			text="Authenticating user...",
			text_color=MUTED_TEXT_COLOR,
		).pack(padx=24, pady=(0, 24))

		self._shell_frame = ctk.CTkFrame(self, fg_color="transparent")
		self._build_header(self._shell_frame)

		content = ctk.CTkFrame(self._shell_frame, corner_radius=16)
		content.pack(fill="both", expand=True, padx=16, pady=16)
		self._panel_label = ctk.CTkLabel(
			content,
			text="",
			text_color=MUTED_TEXT_COLOR,
			font=ctk.CTkFont(size=20, weight="bold"),
		)
		self._panel_label.pack(fill="both", expand=True, padx=16, pady=16)

		self._footer_label = ctk.CTkLabel(
			self._shell_frame,
			text=f"Hackathon Project {self._service.app_id}",
			text_color=MUTED_TEXT_COLOR,
		)
		self._footer_label.pack(fill="x", padx=16, pady=(0, 8))

		self._show_loading()
		self._render_content()

		snapshot = self._service.start(on_change=self._on_bootstrap_change)
		self._apply_snapshot(snapshot)

	def _build_header(self, parent):
		header = ctk.CTkFrame(parent)
		header.pack(fill="x", padx=16, pady=(16, 0))
		header.grid_columnconfigure(1, weight=1)

		ctk.CTkLabel(
			header,
			text="AI Student Assistant",
			text_color=ACCENT_COLOR,
			font=ctk.CTkFont(size=22, weight="bold"),
		).grid(row=0, column=0, rowspan=2, sticky="w", padx=(12, 24), pady=12)

		self._tab_selector = ctk.CTkSegmentedButton(
			header,
			values=panel_labels(),
			variable=self._active_panel,
			command=self._select_panel,
		)
		self._tab_selector.grid(row=0, column=1, rowspan=2, pady=12)

		self._user_id_label = ctk.CTkLabel(header, text="User ID: N/A")
		self._user_id_label.grid(row=0, column=2, sticky="e", padx=(24, 8), pady=(8, 0))

		self._user_status_label = ctk.CTkLabel(header, text="", text_color=MUTED_TEXT_COLOR)
		self._user_status_label.grid(row=1, column=2, sticky="e", padx=(24, 8), pady=(0, 8))

		self._sign_out_btn = ctk.CTkButton(header, text="Sign out", width=90, command=self._sign_out)
		self._sign_out_btn.grid(row=0, column=3, rowspan=2, padx=(0, 12), pady=12)

	def _on_bootstrap_change(self, snapshot: BootstrapSnapshot):
		# Called from the sign-in worker thread.
		self.after(0, lambda: self._apply_snapshot(snapshot))

	def _apply_snapshot(self, snapshot: BootstrapSnapshot):
		if not snapshot.is_auth_ready:
			self._loading_message_label.configure(text=snapshot.loading_message)
			self._show_loading()
			if snapshot.is_blocked or snapshot.is_failed:
				self._loading_progress.stop()
			return

		self._user_id_label.configure(text=f"User ID: {snapshot.user_id or 'N/A'}")
		self._user_status_label.configure(text=snapshot.user_status or "")
		self._sign_out_btn.configure(state="normal" if snapshot.user_id else "disabled")
		self._show_shell()

	def _show_loading(self):
		if self._shell_visible:
			return
		self._loading_frame.place(relx=0.5, rely=0.5, anchor="center")
		self._loading_progress.start()

	def _show_shell(self):
		if self._shell_visible:
			return
		self._shell_visible = True
		self._loading_progress.stop()
		self._loading_frame.place_forget()
		self._shell_frame.pack(fill="both", expand=True)

	def _select_panel(self, selected: str):
		self._active_panel.set(selected)
		self._render_content()

	def _render_content(self):
		view = render_panel(self._active_panel.get())
		self._panel_label.configure(text=view.message)

	def _sign_out(self):
		try:
			self._service.sign_out()
		except Exception as exc:
			logger.exception("Sign out failed")
			self._user_status_label.configure(text=f"Sign out failed: {exc}")

	def _on_close(self):
		self._service.close()
		self.destroy()


def build_service(settings: AppSettings) -> StudyAssistantService:
	return StudyAssistantService(settings, IdentityBootstrap(settings))


def run_app() -> None:
	ctk.set_appearance_mode("System")
	ctk.set_default_color_theme("blue")

	try:
		settings = AppSettings.from_env()
	except ConfigurationError as exc:
		configure_logging()
		logger.error("Configuration error: %s", exc)
		app = ctk.CTk()
		app.title("AI Student Assistant - Configuration Error")
		app.geometry("760x360")
		message = ctk.CTkTextbox(app)
		message.pack(fill="both", expand=True, padx=16, pady=16)
		message.insert(
			"1.0",
			"Configuration error. Fix the environment variables and restart:\n\n"
			f"{exc}\n\n"
			"Recognised settings:\n"
			"- STUDY_APP_ID\n"
			"- STUDY_FIREBASE_CONFIG (JSON object)\n"
			"- STUDY_INITIAL_AUTH_TOKEN\n"
			"- STUDY_TIMEOUT_SECONDS / STUDY_RETRY_ATTEMPTS\n"
			"- STUDY_LOG_LEVEL / STUDY_LOG_DIR\n",
		)
		app.mainloop()
		return

	configure_logging(settings.log_level, settings.log_dir)
	install_excepthook()

	window = MainWindow(build_service(settings))
	window.mainloop()
