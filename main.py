# main.py
import logging
import sys
import tkinter as tk
from functools import lru_cache
from tkinter import filedialog, messagebox

from PIL import Image

from glowback.config import DEFAULT_HISTORY_SIZE, Settings
from glowback.controller import Controller
from glowback.errors import ConfigError
from glowback.model import Error, ImageSelected, Initial, Loading, Model, Restored
from glowback.services import io as Sio
from glowback.services.gemini import GeminiRestorationService
from glowback.services.history import RestorationHistory
from glowback.services.worker import BackgroundRunner
from glowback.ui import ComparatorWidget, HistoryPanel, ImageCard

logger = logging.getLogger("glowback")

BG = "#181818"

IMAGE_FILETYPES = [
    ("Images", "*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff"),
    ("All files", "*.*"),
]


# текущая пара + недавние из истории
@lru_cache(maxsize=DEFAULT_HISTORY_SIZE + 2)
def _decode(ref: Sio.ImageRef):
    return Sio.for_display(ref)


# --- приложение ---
class GlowBackApp(tk.Tk):
    def __init__(self, settings: Settings, service=None):
        super().__init__()
        self.title("GlowBack")
        self.geometry("1200x780")
        self.configure(bg=BG)

        if service is None:
            service = GeminiRestorationService(api_key=settings.api_key, model=settings.model)
        model = Model(history=RestorationHistory(maxlen=settings.history_size))
        self.ctrl = Controller(model, service, self, BackgroundRunner(self))

        # Верхняя панель
        top = tk.Frame(self, bg=BG)
        top.pack(side=tk.TOP, fill=tk.X, padx=12, pady=(12, 4))
        tk.Label(top, text="GlowBack", bg=BG, fg="#a78bfa", font=("TkDefaultFont", 22, "bold"))\
            .pack(side=tk.LEFT)
        tk.Label(top, text="Breathe new life into your old photos.", bg=BG, fg="#999")\
            .pack(side=tk.LEFT, padx=12)
        tk.Button(top, text="History", command=self.toggle_history).pack(side=tk.RIGHT)
        tk.Button(top, text="Open image…", command=self.open_image).pack(side=tk.RIGHT, padx=(0, 6))

        # Боковая панель истории (скрыта по умолчанию)
        self.history_panel = HistoryPanel(self)
        self.history_panel.set_callbacks(
            on_select=self.select_history,
            on_download=self.download_history,
            on_close=self.toggle_history,
        )
        self._history_open = False

        # Нижние кнопки
        footer = tk.Frame(self, bg=BG)
        footer.pack(side=tk.BOTTOM, fill=tk.X, padx=12, pady=12)
        inner = tk.Frame(footer, bg=BG)
        inner.pack(anchor="center")
        self.reset_btn = tk.Button(inner, text="Start Over", command=self.ctrl.reset)
        self.restore_btn = tk.Button(inner, text="✨ Restore Image", command=self.ctrl.restore)
        self.download_btn = tk.Button(inner, text="Download Restored Image", command=self.download)

        # Сообщение об ошибке
        self.error_label = tk.Label(self, bg="#4c1d1d", fg="#fca5a5", padx=12, pady=8, wraplength=700)

        # Центральная область
        self.content = tk.Frame(self, bg=BG)
        self.content.pack(side=tk.TOP, expand=True, fill=tk.BOTH, padx=12, pady=8)

        self.uploader = tk.Frame(self.content, bg="#202020", highlightbackground="#555", highlightthickness=2)
        tk.Label(self.uploader, text="Click to upload a photo", bg="#202020", fg="#ddd",
                 font=("TkDefaultFont", 16, "bold")).pack(pady=(90, 6))
        tk.Label(self.uploader, text="PNG, JPG, GIF up to 10MB", bg="#202020", fg="#888").pack()
        self.uploader.bind("<Button-1>", lambda _e: self.open_image())
        for ch in self.uploader.winfo_children():
            ch.bind("<Button-1>", lambda _e: self.open_image())

        self.cards = tk.Frame(self.content, bg=BG)
        self.cards.grid_columnconfigure(0, weight=1, uniform="c")
        self.cards.grid_columnconfigure(1, weight=1, uniform="c")
        self.cards.grid_rowconfigure(0, weight=1)
        self.original_card = ImageCard(self.cards, "Original Image")
        self.original_card.grid(row=0, column=0, sticky="nsew", padx=(0, 6))
        self.restored_card = ImageCard(self.cards, "Restored Image",
                                       placeholder="Restored image will appear here")
        self.restored_card.grid(row=0, column=1, sticky="nsew", padx=(6, 0))
        self._card_original = None

        self.comparator = None
        self._compared = None

        self.ctrl.subscribe(self._render)
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._render(self.ctrl.state)

    # --- загрузка ---
    def open_image(self):
        if isinstance(self.ctrl.state, Loading):
            return
        path = filedialog.askopenfilename(title="Choose a photo", filetypes=IMAGE_FILETYPES)
        if not path:
            return
        self.ctrl.open_path(path)

    # --- сохранение ---
    def download(self, entry_id=None):
        if not self.ctrl.can_download(entry_id):
            return
        path = filedialog.asksaveasfilename(
            title="Save restored image",
            initialfile=self.ctrl.suggested_download_name(entry_id),
            defaultextension=".png",
            filetypes=[("PNG", "*.png"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            self.ctrl.download(path, entry_id)
        except OSError as e:
            logger.warning("Failed to save %s: %s", path, e)
            messagebox.showerror("Error", f"Could not save the file:\n{e}")

    # --- история ---
    def toggle_history(self):
        if self._history_open:
            self.history_panel.place_forget()
        else:
            self.history_panel.set_entries(self.ctrl.m.history.list())
            self.history_panel.place(relx=1.0, rely=0.0, relheight=1.0, anchor="ne", width=320)
            self.history_panel.lift()
        self._history_open = not self._history_open

    def select_history(self, entry_id: int):
        if self.ctrl.select_history(entry_id) and self._history_open:
            self.toggle_history()

    def download_history(self, entry_id: int):
        self.download(entry_id)

    # --- отрисовка по состоянию ---
    def _render(self, st):
        self._render_footer(st)

        if isinstance(st, Error):
            self.error_label.config(text=st.message)
            self.error_label.pack(side=tk.BOTTOM, pady=(0, 4), before=self.content)
        else:
            self.error_label.pack_forget()

        if isinstance(st, Initial):
            self._show(self.uploader)
            return
        if isinstance(st, Restored):
            self._show_comparator(st)
            return

        self._show(self.cards)
        if st.original is not self._card_original:
            self._card_original = st.original
            self.original_card.set_image(self._safe_decode(st.original))
        if isinstance(st, Loading):
            self.restored_card.set_loading(st.progress, st.message)
        else:
            self.restored_card.set_image(None)

    def _render_footer(self, st):
        for b in (self.reset_btn, self.restore_btn, self.download_btn):
            b.pack_forget()
        if not isinstance(st, Initial):
            self.reset_btn.pack(side=tk.LEFT, padx=6)
        if isinstance(st, ImageSelected):
            self.restore_btn.config(text="✨ Restore Image", state="normal")
            self.restore_btn.pack(side=tk.LEFT, padx=6)
        elif isinstance(st, Loading):
            self.restore_btn.config(text="Restoring...", state="disabled")
            self.restore_btn.pack(side=tk.LEFT, padx=6)
        elif isinstance(st, Restored):
            self.download_btn.pack(side=tk.LEFT, padx=6)

    def _show(self, frame):
        for f in (self.uploader, self.cards, self.comparator):
            if f is not None and f is not frame:
                f.pack_forget()
        if frame is not None and not frame.winfo_ismapped():
            frame.pack(expand=True, fill=tk.BOTH)

    def _show_comparator(self, st: Restored):
        pair = (st.original, st.restored)
        if self.comparator is None or self._compared != pair:
            # новый виджет на каждую пару — позиция ползунка не сохраняется
            if self.comparator is not None:
                self.comparator.destroy()
            self.comparator = ComparatorWidget(self.content)
            self._compared = pair
            before, after = self._safe_decode(st.original), self._safe_decode(st.restored)
            if before is not None and after is not None:
                self.comparator.set_images(before, after)
        self._show(self.comparator)
        self._card_original = None
        if self._history_open:
            self.history_panel.set_entries(self.ctrl.m.history.list())

    def _safe_decode(self, ref):
        if ref is None:
            return None
        try:
            return _decode(ref)
        except (OSError, Image.DecompressionBombError) as e:
            logger.warning("Cannot preview image: %s", e)
            return None

    def _on_close(self):
        self.ctrl.shutdown()
        self.destroy()


def main(argv=None):
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", e)
        root = tk.Tk()
        root.withdraw()
        messagebox.showerror("GlowBack", str(e))
        root.destroy()
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = GlowBackApp(settings)
    app.mainloop()
    return 0


# --- запуск ---
if __name__ == "__main__":
    sys.exit(main())
