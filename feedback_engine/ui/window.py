"""Tk rendering of the feedback window. All decisions live in SessionController."""

from __future__ import annotations

import tkinter as tk
from tkinter import filedialog, messagebox, simpledialog, ttk
from typing import Callable

from ..session.controller import Notice, SessionController
from ..session.images import ACCEPTED_EXTENSIONS
from ..session.messages import MAX_IMAGES_MESSAGE
from ..session.snippets import Snippet
from ..session.timer import CountdownUpdate

_IMAGE_FILETYPES = [("Image files", " ".join(f"*{ext}" for ext in sorted(ACCEPTED_EXTENSIONS)))]


class TkTickSource:
    """Drives SessionTimer ticks from the Tk event loop."""

    def __init__(self, root: tk.Misc) -> None:
        self.root = root
        self._job: str | None = None
        self._callback: Callable[[], None] | None = None
        self._interval_ms = 1000

    def start(self, callback: Callable[[], None], interval_s: float) -> None:
        self.stop()
        self._callback = callback
        self._interval_ms = max(1, int(interval_s * 1000))
        self._job = self.root.after(self._interval_ms, self._fire)

    def stop(self) -> None:
        if self._job is not None:
            self.root.after_cancel(self._job)
            self._job = None

    def _fire(self) -> None:
        # Reschedule first so a callback that stops the timer cancels the next tick.
        self._job = self.root.after(self._interval_ms, self._fire)
        if self._callback is not None:
            self._callback()


class FeedbackWindow:
    def __init__(self, root: tk.Tk, controller: SessionController) -> None:
        self.root = root
        self.controller = controller
        self.snippets: list[Snippet] = []
        self.root.title(controller.config.window_title)
        self.root.minsize(520, 420)
        self._build()
        controller.timer.on_countdown(self._render_countdown)
        controller.on_close(self._close)
        self.root.protocol("WM_DELETE_WINDOW", controller.cancel)
        self.root.bind_all("<KeyPress>", lambda _event: controller.activity(), add="+")
        self.root.bind_all("<Motion>", lambda _event: controller.activity(), add="+")

    def run(self) -> None:
        self.snippets = self.controller.start()
        self._render_snippets()
        self.text.focus_set()
        self.root.mainloop()

    def _build(self) -> None:
        frame = ttk.Frame(self.root, padding=10)
        frame.pack(fill=tk.BOTH, expand=True)

        ttk.Label(frame, text=self.controller.config.prompt_text, wraplength=480, justify=tk.LEFT).pack(anchor=tk.W)

        snippet_row = ttk.Frame(frame)
        snippet_row.pack(fill=tk.X, pady=(8, 0))
        self.snippet_choice = ttk.Combobox(snippet_row, state="readonly")
        self.snippet_choice.pack(side=tk.LEFT, fill=tk.X, expand=True)
        for label, handler in (
            ("Insert", self._on_insert_snippet),
            ("Add", self._on_add_snippet),
            ("Edit", self._on_edit_snippet),
            ("Remove", self._on_remove_snippet),
        ):
            ttk.Button(snippet_row, text=label, command=handler).pack(side=tk.LEFT, padx=(6, 0))

        self.text = tk.Text(frame, height=10, wrap=tk.WORD, undo=True)
        self.text.pack(fill=tk.BOTH, expand=True, pady=8)
        self.text.bind("<<Modified>>", self._on_text_modified)
        self.text.bind("<Control-v>", self._on_paste)

        image_row = ttk.Frame(frame)
        image_row.pack(fill=tk.X)
        self.image_list = tk.Listbox(image_row, height=4)
        self.image_list.pack(side=tk.LEFT, fill=tk.X, expand=True)
        buttons = ttk.Frame(image_row)
        buttons.pack(side=tk.LEFT, padx=(6, 0))
        ttk.Button(buttons, text="Add image", command=self._on_add_image).pack(fill=tk.X)
        ttk.Button(buttons, text="Remove", command=self._on_remove_image).pack(fill=tk.X, pady=(4, 0))
        self.image_count = ttk.Label(frame)
        self.image_count.pack(anchor=tk.W)

        status = ttk.Frame(frame)
        status.pack(fill=tk.X, pady=(6, 0))
        self.countdown = ttk.Label(status, foreground="#666666")
        self.countdown.pack(side=tk.LEFT)
        self.pause_button = ttk.Button(status, text="Pause Timer", command=self._on_toggle_pause)
        self.pause_button.pack(side=tk.RIGHT)

        actions = ttk.Frame(frame)
        actions.pack(fill=tk.X, pady=(8, 0))
        for label, handler in (
            ("Submit", self.controller.submit),
            ("Approve", self.controller.approve),
            ("Reject", self.controller.reject),
            ("AI Decide", self.controller.ai_decide),
            ("Cancel", self.controller.cancel),
        ):
            ttk.Button(actions, text=label, command=handler).pack(side=tk.LEFT, padx=(0, 6))
        self._render_images()

    def _show(self, notice: Notice | None) -> None:
        if notice is None:
            return
        self.controller.begin_dialog()
        try:
            if notice.level == "error":
                messagebox.showerror(notice.title, notice.message, parent=self.root)
            else:
                messagebox.showinfo(notice.title, notice.message, parent=self.root)
        finally:
            self.controller.end_dialog()

    def _render_countdown(self, update: CountdownUpdate) -> None:
        if update.active and not self.controller.session.has_text:
            suffix = " (paused)" if update.paused else ""
            self.countdown.configure(
                text=f"Auto-close: {update.remaining_s}s{suffix}",
                foreground="red" if update.low_time else "#666666",
            )
        else:
            self.countdown.configure(text="")
        self.pause_button.configure(text="Resume Timer" if update.paused else "Pause Timer")

    def _render_images(self) -> None:
        session = self.controller.session
        self.image_list.delete(0, tk.END)
        for attachment in session.images:
            self.image_list.insert(tk.END, f"{attachment.display_name} ({attachment.size_display})")
        self.image_count.configure(text=f"Images: {len(session.images)}/{session.max_images}")

    def _render_snippets(self) -> None:
        self.snippet_choice.configure(values=[snippet.title for snippet in self.snippets])
        self.snippet_choice.set("")

    def _on_text_modified(self, _event: tk.Event) -> None:
        if not self.text.edit_modified():
            return
        self.text.edit_modified(False)
        self.controller.text_changed(self.text.get("1.0", "end-1c"))

    def _on_paste(self, _event: tk.Event) -> str | None:
        before = len(self.controller.session.images)
        notice = self.controller.paste_image()
        self._render_images()
        self._show(notice)
        if notice is not None or len(self.controller.session.images) != before:
            return "break"
        return None

    def _on_add_image(self) -> None:
        session = self.controller.session
        if session.available_slots <= 0:
            self._show(Notice("Maximum Reached", MAX_IMAGES_MESSAGE.format(max_images=session.max_images)))
            return
        self.controller.begin_dialog()
        try:
            paths = filedialog.askopenfilenames(parent=self.root, title="Select Images", filetypes=_IMAGE_FILETYPES)
        finally:
            self.controller.end_dialog()
        if len(paths) == 1:
            self._show(self.controller.attach_file(paths[0]))
        elif paths:
            self._show(self.controller.drop_files(paths))
        self._render_images()

    def _on_remove_image(self) -> None:
        selection = self.image_list.curselection()
        if not selection:
            return
        attachment = self.controller.session.images[selection[0]]
        self._show(self.controller.remove_image(attachment))
        self._render_images()

    def _on_toggle_pause(self) -> None:
        self.controller.toggle_pause()

    def _selected_snippet(self) -> Snippet | None:
        index = self.snippet_choice.current()
        if index < 0 or index >= len(self.snippets):
            return None
        return self.snippets[index]

    def _on_insert_snippet(self) -> None:
        snippet = self._selected_snippet()
        if snippet is None:
            return
        text = self.controller.insert_snippet(snippet)
        self.text.delete("1.0", tk.END)
        self.text.insert("1.0", text)
        self.text.see(tk.END)
        self.snippet_choice.set("")
        self.text.focus_set()

    def _ask_snippet(self, heading: str, snippet: Snippet | None = None) -> tuple[str, str] | None:
        self.controller.begin_dialog()
        try:
            title = simpledialog.askstring(
                heading, "Title:", parent=self.root, initialvalue=snippet.title if snippet else ""
            )
            content = None
            if title:
                content = simpledialog.askstring(
                    heading, "Content:", parent=self.root, initialvalue=snippet.content if snippet else ""
                )
        finally:
            self.controller.end_dialog()
        if not title or content is None:
            return None
        return title, content

    def _on_add_snippet(self) -> None:
        answer = self._ask_snippet("New snippet")
        if answer is None:
            return
        self._show(self.controller.add_snippet(*answer))
        self._reload_snippets()

    def _on_edit_snippet(self) -> None:
        snippet = self._selected_snippet()
        if snippet is None:
            return
        answer = self._ask_snippet("Edit snippet", snippet)
        if answer is None:
            return
        self._show(self.controller.update_snippet(snippet, *answer))
        self._reload_snippets()

    def _on_remove_snippet(self) -> None:
        snippet = self._selected_snippet()
        if snippet is None:
            return
        self.controller.begin_dialog()
        try:
            confirmed = messagebox.askyesno(
                "Remove snippet", f"Remove snippet '{snippet.title}'?", parent=self.root
            )
        finally:
            self.controller.end_dialog()
        if not confirmed:
            return
        self._show(self.controller.remove_snippet(snippet))
        self._reload_snippets()

    def _reload_snippets(self) -> None:
        self.snippets = list(self.controller.snippet_store.snippets)
        self._render_snippets()

    def _close(self) -> None:
        notice = self.controller.shutdown_notice
        if notice is not None:
            messagebox.showerror(notice.title, notice.message, parent=self.root)
        self.root.destroy()
