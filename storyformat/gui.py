"""
Contains the code for the graphical user interface (GUI).
"""
import logging
import threading
import queue
import re
import dataclasses
import os
import platform
import subprocess
from pathlib import Path

import tkinter as tk
from tkinter import ttk, filedialog, messagebox

try:
    from tkinterdnd2 import DND_FILES, TkinterDnD
except ImportError:
    TkinterDnD = None

from .core.pipeline import FormattingPipeline, StoryValidationError
from .resources.loader import write_template_ini
from .utils.config import FormatterConfig
from .utils.ini_reader import IniFormatError
from .utils.logger import setup_main_logger, LOG_DIR

log = logging.getLogger("story_formatter")

CHECKED = "☑"
UNCHECKED = "☐"


def open_path(path: Path):
    """Opens a file or directory in the system's default explorer."""
    try:
        if platform.system() == "Windows":
            os.startfile(path)
        elif platform.system() == "Darwin":
            subprocess.Popen(["open", str(path)])
        else:
            subprocess.Popen(["xdg-open", str(path)])
    except OSError as e:
        log.error(f"Failed to open path {path}: {e}")


class SettingsDialog(tk.Toplevel):
    """A dialog for configuring formatting settings."""
    def __init__(self, parent, config: FormatterConfig):
        super().__init__(parent)
        self.withdraw() # Start hidden
        self.transient(parent)
        self.title("Formatting Settings")
        self.config: FormatterConfig = config
        self.result: FormatterConfig | None = None

        self.max_size_var = tk.IntVar(value=self.config.max_file_size_kb)
        self.max_lines_var = tk.IntVar(value=self.config.max_lines)
        self.font_var = tk.StringVar(value=str(self.config.font_path or ""))
        self.output_var = tk.StringVar(value=str(self.config.output_dir or ""))
        self.search_parents_var = tk.BooleanVar(value=self.config.search_parent_dirs)

        body = ttk.Frame(self, padding="10")
        body.pack(padx=5, pady=5, fill=tk.BOTH, expand=True)
        self._create_widgets(body)

        # Center without flash
        self._center_window(parent)
        self.deiconify() # Show only after geometry is set

        self.grab_set()
        self.protocol("WM_DELETE_WINDOW", self.on_cancel)
        self.resizable(False, False)
        self.wait_window(self)

    def _center_window(self, parent):
        self.update_idletasks()
        width = self.winfo_reqwidth()
        height = self.winfo_reqheight()

        x = parent.winfo_rootx() + (parent.winfo_width() // 2) - (width // 2)
        y = parent.winfo_rooty() + (parent.winfo_height() // 2) - (height // 2)
        self.geometry(f"{width}x{height}+{x}+{y}")

    def _create_widgets(self, parent):
        frame = ttk.Frame(parent)
        frame.pack(fill=tk.X, expand=True)

        def add_row(row, label, widget):
            ttk.Label(frame, text=label).grid(row=row, column=0, sticky=tk.W, pady=2)
            widget.grid(row=row, column=1, sticky=tk.W, pady=2, padx=5)

        def add_path_row(row, label, variable, command):
            ttk.Label(frame, text=label).grid(row=row, column=0, sticky=tk.W, pady=2)
            path_frame = ttk.Frame(frame)
            path_frame.grid(row=row, column=1, sticky=tk.EW, pady=2, padx=5)
            ttk.Entry(path_frame, textvariable=variable, width=40).pack(side=tk.LEFT, fill=tk.X, expand=True)
            ttk.Button(path_frame, text="...", command=command, width=3).pack(side=tk.LEFT, padx=5)

        add_row(0, "Max Story Size (KB):", ttk.Entry(frame, textvariable=self.max_size_var, width=7))
        add_row(1, "Max Story Lines:", ttk.Entry(frame, textvariable=self.max_lines_var, width=7))
        ttk.Checkbutton(frame, text="Search parent folders for the configuration",
                        variable=self.search_parents_var).grid(row=2, column=0, columnspan=2, sticky=tk.W, pady=5)
        add_path_row(3, "Measurement Font:", self.font_var, self.on_browse_font)
        add_path_row(4, "Output Folder:", self.output_var, self.on_browse_output)

        btn_frame = ttk.Frame(parent)
        btn_frame.pack(fill=tk.X, pady=(10, 0))
        ttk.Button(btn_frame, text="Cancel", command=self.on_cancel).pack(side=tk.RIGHT, padx=5)
        ttk.Button(btn_frame, text="OK", command=self.on_ok).pack(side=tk.RIGHT)

    def on_browse_font(self):
        file = filedialog.askopenfilename(
            filetypes=[("Font Files", "*.ttf *.otf *.ttc"), ("All Files", "*.*")]
        )
        if file: self.font_var.set(file)

    def on_browse_output(self):
        folder = filedialog.askdirectory()
        if folder: self.output_var.set(folder)

    def on_ok(self):
        try:
            font = self.font_var.get()
            output = self.output_var.get()
            self.result = dataclasses.replace(
                self.config,
                max_file_size_kb=self.max_size_var.get(),
                max_lines=self.max_lines_var.get(),
                search_parent_dirs=self.search_parents_var.get(),
                font_path=Path(font) if font else None,
                output_dir=Path(output) if output else None,
            )
            self.on_cancel()
        except (ValueError, tk.TclError):
            messagebox.showerror("Invalid Input", "Please enter valid numbers.")

    def on_cancel(self):
        self.grab_release()
        self.destroy()


class FormatterApp:
    def __init__(self, root, story_path: Path | None = None):
        self.root = root
        self.root.title("StoryFormatter")
        self.root.geometry("640x420")

        setup_main_logger(logging.INFO)

        self.formatter_config = FormatterConfig()
        self.queue = queue.Queue()
        self.render_thread: threading.Thread | None = None
        self.story_path: Path | None = None

        self._create_widgets()
        self._setup_layout()
        self._bind_events()
        self._process_queue()

        if story_path is not None:
            self.load_story(story_path)

    def _create_widgets(self):
        self.main_frame = ttk.Frame(self.root, padding="5")

        # Toolbar
        self.toolbar = ttk.Frame(self.main_frame)
        self.open_btn = ttk.Button(self.toolbar, text="Open Story", command=self.on_open_click)
        self.reload_btn = ttk.Button(self.toolbar, text="Reload Config", command=self.on_reload_click)
        self.init_btn = ttk.Button(self.toolbar, text="New Config", command=self.on_init_click)

        self.right_toolbar = ttk.Frame(self.toolbar)
        self.logs_btn = ttk.Button(self.right_toolbar, text="Logs", command=self.on_logs_click)
        self.settings_btn = ttk.Button(self.right_toolbar, text="Settings", command=self.on_settings_click)

        self.story_label = ttk.Label(self.main_frame, text="No story loaded.", anchor=tk.W)

        # Section list
        self.tree_frame = ttk.Frame(self.main_frame)
        self.tree = ttk.Treeview(self.tree_frame, columns=("output",), selectmode="extended")
        self.tree_scroll_y = ttk.Scrollbar(self.tree_frame, orient=tk.VERTICAL, command=self.tree.yview)
        self.tree.configure(yscrollcommand=self.tree_scroll_y.set)
        self.tree.tag_configure('dimmed', foreground='gray')

        self.tree.heading("#0", text="Render / Section", anchor=tk.W)
        self.tree.column("#0", width=200, anchor=tk.W)
        self.tree.heading("output", text="Output File", anchor=tk.W)
        self.tree.column("output", width=380)

        if TkinterDnD:
            self.tree.drop_target_register(DND_FILES)
            self.tree.dnd_bind('<<Drop>>', self.on_drop)

        self.bottom_panel = ttk.Frame(self.main_frame)
        self.render_btn = ttk.Button(self.bottom_panel, text="Render Checked Sections", command=self.on_render_click)

        self.status_frame = ttk.Frame(self.main_frame, relief=tk.SUNKEN, padding="2")
        self.status_label = ttk.Label(self.status_frame, text="Ready", anchor=tk.W)

    def _setup_layout(self):
        self.main_frame.pack(fill=tk.BOTH, expand=True)

        self.toolbar.pack(fill=tk.X, pady=(0, 5))
        self.open_btn.pack(side=tk.LEFT, padx=2)
        self.reload_btn.pack(side=tk.LEFT, padx=2)
        self.init_btn.pack(side=tk.LEFT, padx=2)

        self.right_toolbar.pack(side=tk.RIGHT)
        self.logs_btn.pack(side=tk.LEFT, padx=2)
        self.settings_btn.pack(side=tk.LEFT, padx=2)

        self.story_label.pack(fill=tk.X, pady=(0, 5))

        self.tree_frame.pack(fill=tk.BOTH, expand=True)
        self.tree_scroll_y.pack(side=tk.RIGHT, fill=tk.Y)
        self.tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        self.bottom_panel.pack(fill=tk.X, pady=5)
        self.render_btn.pack(side=tk.RIGHT)

        self.status_frame.pack(fill=tk.X, side=tk.BOTTOM)
        self.status_label.pack(fill=tk.X)

    def _bind_events(self):
        self.tree.bind("<Button-1>", self.on_tree_click)
        self.tree.bind("<space>", self.on_space_toggle)

    # --- Actions ---

    def on_logs_click(self):
        """Opens the logs directory."""
        if LOG_DIR.exists():
            open_path(LOG_DIR)
        else:
            messagebox.showinfo("Logs", "Log directory does not exist yet.")

    def on_settings_click(self):
        dialog = SettingsDialog(self.root, self.formatter_config)
        if dialog.result:
            self.formatter_config = dialog.result
            self.status_label.config(text="Settings saved.")
            self.on_reload_click()

    def on_open_click(self):
        file = filedialog.askopenfilename(
            title="Select Story",
            filetypes=[("Text Files", "*.txt *.story"), ("All Files", "*.*")]
        )
        if file:
            self.load_story(Path(file))

    def on_reload_click(self):
        if self.story_path is not None:
            self.load_story(self.story_path)

    def on_init_click(self):
        if self.story_path is None:
            messagebox.showinfo("New Config", "Open a story first.")
            return
        target = self.story_path.resolve().parent / self.formatter_config.ini_name
        try:
            write_template_ini(target)
        except FileExistsError as e:
            messagebox.showerror("New Config", str(e))
            return
        open_path(target)
        self.load_story(self.story_path)

    def on_drop(self, event):
        data = event.data
        if not data: return
        try:
            paths_list = self.root.tk.splitlist(data)
        except tk.TclError:
            paths_list = re.findall(r'\{([^}]+)\}|([^{\s}]+)', data)
            paths_list = [p[0] or p[1] for p in paths_list]

        if paths_list:
            self.load_story(Path(paths_list[0]))

    # --- Section list ---

    def load_story(self, story_path: Path):
        """Validates the story and lists the sections of its configuration."""
        self.tree.delete(*self.tree.get_children())
        self.story_path = story_path
        self.story_label.config(text=str(story_path))

        pipeline = FormattingPipeline(self.formatter_config)
        try:
            lines, ini_path = pipeline.validate(story_path)
            ini = pipeline.load_ini(ini_path)
        except (StoryValidationError, IniFormatError) as e:
            self.status_label.config(text="Invalid story or configuration.")
            messagebox.showerror("StoryFormatter - Invalid input", str(e))
            return

        for name, render in pipeline.section_flags(ini):
            output = pipeline.output_path(story_path, name)
            self.tree.insert("", tk.END, iid=name, text=f"{CHECKED if render else UNCHECKED} {name}",
                             values=(str(output),), tags=() if render else ('dimmed',))

        self.status_label.config(text=f"{len(lines)} lines, configuration: {ini_path}")

    def _is_checked(self, item_id) -> bool:
        return self.tree.item(item_id, "text").startswith(CHECKED)

    def _set_checked(self, item_id, checked: bool):
        text = f"{CHECKED if checked else UNCHECKED} {item_id}"
        self.tree.item(item_id, text=text, tags=() if checked else ('dimmed',))

    def on_tree_click(self, event):
        if self.render_thread and self.render_thread.is_alive(): return
        region = self.tree.identify_region(event.x, event.y)
        if region == "tree":
            item_id = self.tree.identify_row(event.y)
            if item_id:
                self._set_checked(item_id, not self._is_checked(item_id))

    def on_space_toggle(self, event=None):
        selected_items = self.tree.selection()
        if not selected_items: return
        target = not self._is_checked(selected_items[0])
        for item_id in selected_items:
            self._set_checked(item_id, target)

    # --- Rendering ---

    def _update_ui_state(self, busy):
        state = tk.DISABLED if busy else tk.NORMAL
        for button in (self.open_btn, self.reload_btn, self.init_btn, self.render_btn, self.settings_btn):
            button.config(state=state)

    def on_render_click(self):
        if self.render_thread and self.render_thread.is_alive(): return
        if self.story_path is None:
            messagebox.showinfo("Info", "Open a story first.")
            return

        sections = tuple(item for item in self.tree.get_children() if self._is_checked(item))
        if not sections:
            messagebox.showinfo("Info", "No sections checked for rendering.")
            return

        config = dataclasses.replace(self.formatter_config, sections=sections)
        self._update_ui_state(busy=True)
        self.status_label.config(text=f"Rendering {len(sections)} sections...")

        def run_render():
            try:
                written = FormattingPipeline(config).run(self.story_path)
                self.queue.put(("render_done", written))
            except (StoryValidationError, IniFormatError) as e:
                self.queue.put(("invalid_input", str(e)))
            except Exception as e:
                log.error("Rendering failed.", exc_info=True)
                self.queue.put(("fatal_error", f"{type(e).__name__}: {e}"))

        self.render_thread = threading.Thread(target=run_render, daemon=True)
        self.render_thread.start()

    def _process_queue(self):
        try:
            while True:
                task, data = self.queue.get_nowait()
                self._update_ui_state(busy=False)

                match task:
                    case "render_done":
                        self.status_label.config(text=f"Wrote {len(data)} files.")
                        messagebox.showinfo("Done", "\n".join(str(p) for p in data) or "Nothing rendered.")
                    case "invalid_input":
                        self.status_label.config(text="Invalid story or configuration.")
                        messagebox.showerror("StoryFormatter - Invalid input", data)
                    case "fatal_error":
                        self.status_label.config(text="Rendering failed.")
                        messagebox.showerror("Error", data)

        except queue.Empty:
            pass
        self.root.after(100, self._process_queue)


def run_gui(story_path: Path | None = None):
    if TkinterDnD:
        root = TkinterDnD.Tk()
    else:
        root = tk.Tk()
    app = FormatterApp(root, story_path)
    root.mainloop()
