import queue
import threading
from pathlib import Path
from typing import Optional, Tuple

import tkinter as tk
from tkinter import filedialog, messagebox, ttk

from config import DATA_DIR, DEFAULT_GROUP_SIZE, OUTPUT_DIR, load_settings
from draw import CongratsRequest, DrawEngine, TickHandle
from export import export_file_name, groups_to_csv_bytes, groups_to_excel_bytes
from grouping import GroupingEngine, planned_group_count
from logging_config import setup_logging
from messages import message
from naming import NamingClient
from roster import (
    deduplicate,
    duplicate_count,
    ingest_text,
    names_to_text,
    read_roster_upload,
    sample_roster,
)

log = setup_logging()

RESULT_POLL_MS = 100


class DrawAndGroupApp:
    def __init__(self, root: tk.Tk) -> None:
        self.root = root
        self.root.title("추첨 & 조 편성")
        self.root.geometry("1200x750")

        self.settings = load_settings()
        self.locale = self.settings.locale
        self.naming = NamingClient(self.settings)
        self.engine = DrawEngine()
        self.grouping = GroupingEngine(self.naming)
        self.roster = ()

        self._handle: Optional[TickHandle] = None
        self._after_id: Optional[str] = None
        # 작업 스레드 결과는 큐로만 넘기고 메인 스레드에서 꺼낸다
        self.congrats_queue: "queue.Queue[Tuple[CongratsRequest, str]]" = queue.Queue()

        self.allow_repeat_var = tk.BooleanVar(value=False)
        self.use_ai_var = tk.BooleanVar(value=self.naming.available)
        self.group_size_var = tk.IntVar(value=DEFAULT_GROUP_SIZE)

        self._build_ui()
        self.root.after(RESULT_POLL_MS, self._poll_congrats)

    def _build_ui(self) -> None:
        notebook = ttk.Notebook(self.root)
        notebook.pack(fill=tk.BOTH, expand=True, padx=12, pady=8)

        # 명단 탭
        tab_roster = ttk.Frame(notebook)
        notebook.add(tab_roster, text="명단")
        btns = ttk.Frame(tab_roster)
        btns.pack(fill=tk.X, pady=6)
        ttk.Button(btns, text="CSV 불러오기", command=self.load_file).pack(side=tk.LEFT)
        ttk.Button(btns, text="샘플 명단", command=self.load_sample).pack(side=tk.LEFT, padx=8)
        ttk.Button(btns, text="명단 적용", command=self.apply_text).pack(side=tk.LEFT, padx=8)
        ttk.Button(btns, text="중복 제거", command=self.remove_duplicates).pack(side=tk.LEFT, padx=8)
        ttk.Button(btns, text="비우기", command=lambda: self.set_roster(())).pack(side=tk.LEFT, padx=8)
        self.roster_text = tk.Text(tab_roster, height=24)
        self.roster_text.pack(fill=tk.BOTH, expand=True)
        self.roster_text.bind("<<Modified>>", self._on_text_modified)

        # 추첨 탭
        tab_draw = ttk.Frame(notebook)
        notebook.add(tab_draw, text="행운 추첨")
        self.spotlight_var = tk.StringVar(value="???")
        ttk.Label(tab_draw, textvariable=self.spotlight_var, font=("Arial", 40)).pack(pady=(30, 10))
        self.congrats_var = tk.StringVar()
        ttk.Label(tab_draw, textvariable=self.congrats_var, font=("Arial", 14)).pack()
        draw_btns = ttk.Frame(tab_draw)
        draw_btns.pack(pady=12)
        ttk.Button(draw_btns, text="추첨 시작", command=self.start_draw).pack(side=tk.LEFT)
        ttk.Button(draw_btns, text="초기화", command=self.reset_draw).pack(side=tk.LEFT, padx=8)
        ttk.Checkbutton(
            draw_btns, text="중복 당첨 허용", variable=self.allow_repeat_var,
            command=self.toggle_repeat,
        ).pack(side=tk.LEFT, padx=8)
        self.history_box = tk.Listbox(tab_draw, height=12)
        self.history_box.pack(fill=tk.BOTH, expand=True, padx=40, pady=8)

        # 조 편성 탭
        tab_group = ttk.Frame(notebook)
        notebook.add(tab_group, text="조 편성")
        group_btns = ttk.Frame(tab_group)
        group_btns.pack(fill=tk.X, pady=6)
        ttk.Label(group_btns, text="조별 인원").pack(side=tk.LEFT)
        ttk.Spinbox(group_btns, from_=1, to=999, textvariable=self.group_size_var, width=6).pack(
            side=tk.LEFT, padx=4
        )
        ttk.Checkbutton(group_btns, text="AI 조 이름", variable=self.use_ai_var).pack(side=tk.LEFT, padx=8)
        ttk.Button(group_btns, text="조 편성 실행", command=self.run_grouping).pack(side=tk.LEFT, padx=8)
        ttk.Button(group_btns, text="CSV 저장", command=lambda: self.save_groups("csv")).pack(
            side=tk.LEFT, padx=8
        )
        ttk.Button(group_btns, text="엑셀 저장", command=lambda: self.save_groups("xlsx")).pack(
            side=tk.LEFT, padx=8
        )
        self.board = ttk.Frame(tab_group)
        self.board.pack(fill=tk.BOTH, expand=True, pady=8)

        self.status_var = tk.StringVar(value="명단을 입력해 주세요.")
        ttk.Label(self.root, textvariable=self.status_var).pack(anchor=tk.W, padx=12, pady=(0, 8))

    # 명단
    def set_roster(self, roster, refill_text: bool = True) -> None:
        self._cancel_animation()
        self.roster = roster
        self.engine.load_roster(roster)
        self.grouping.clear()
        if refill_text:
            self.roster_text.delete("1.0", tk.END)
            self.roster_text.insert("1.0", names_to_text(roster))
        self.refresh_draw()
        self.refresh_board()
        dup = duplicate_count(roster)
        self.status_var.set(
            f"총 {len(roster)}명" + (f" - 중복 이름 {dup}건" if dup else "")
        )

    def apply_text(self) -> None:
        self.set_roster(ingest_text(self.roster_text.get("1.0", tk.END)), refill_text=False)

    def _on_text_modified(self, _event=None) -> None:
        if not self.roster_text.edit_modified():
            return
        self.roster_text.edit_modified(False)
        names = [p.name for p in ingest_text(self.roster_text.get("1.0", tk.END))]
        # 버튼으로 채운 텍스트는 이미 반영된 명단과 같으므로 다시 적용하지 않는다
        if names != [p.name for p in self.roster]:
            self.apply_text()

    def load_file(self) -> None:
        path = filedialog.askopenfilename(
            title="명단 파일 선택",
            filetypes=[("CSV Files", "*.csv"), ("Excel Files", "*.xlsx"), ("Text Files", "*.txt")],
            initialdir=str(DATA_DIR) if DATA_DIR.exists() else None,
        )
        if not path:
            return
        try:
            p = Path(path)
            self.set_roster(read_roster_upload(p.name, p.read_bytes()))
        except Exception as e:
            messagebox.showerror("에러", str(e))

    def load_sample(self) -> None:
        self.set_roster(sample_roster())

    def remove_duplicates(self) -> None:
        self.set_roster(deduplicate(self.roster))

    # 추첨
    def _cancel_animation(self) -> None:
        if self._after_id is not None:
            self.root.after_cancel(self._after_id)
            self._after_id = None
        self.engine.cancel(self._handle)
        self._handle = None

    def start_draw(self) -> None:
        reason = self.engine.blocked_reason()
        if reason:
            messagebox.showinfo("안내", message(reason, self.locale))
            return
        self.congrats_var.set("")
        self._handle = self.engine.start_draw()
        self._on_tick()

    def _on_tick(self) -> None:
        self._after_id = None
        handle = self._handle
        if handle is None:
            return
        name = self.engine.tick(handle)
        if name is None:
            return
        self.spotlight_var.set(name)
        if not handle.done:
            self._after_id = self.root.after(self.engine.interval_ms, self._on_tick)
            return
        self._handle = None
        self.refresh_draw()
        request = self.engine.congratulation_request()
        if request is not None:
            threading.Thread(target=self._fetch_congrats, args=(request,), daemon=True).start()

    def _fetch_congrats(self, request: CongratsRequest) -> None:
        text = self.naming.generate_congratulation(request.winner.name, self.locale)
        self.congrats_queue.put((request, text))

    def _poll_congrats(self) -> None:
        while True:
            try:
                request, text = self.congrats_queue.get_nowait()
            except queue.Empty:
                break
            self._apply_congrats(request, text)
        self.root.after(RESULT_POLL_MS, self._poll_congrats)

    def _apply_congrats(self, request: CongratsRequest, text: str) -> None:
        if self.engine.attach_congratulation(request, text):
            self.congrats_var.set(text)

    def reset_draw(self) -> None:
        self._cancel_animation()
        self.engine.reset()
        self.refresh_draw()

    def toggle_repeat(self) -> None:
        self.engine.set_allow_repeat(bool(self.allow_repeat_var.get()))
        self.refresh_draw()

    def refresh_draw(self) -> None:
        state = self.engine.state
        self.spotlight_var.set(state.winner.name if state.winner else "???")
        self.congrats_var.set(state.congratulation)
        self.history_box.delete(0, tk.END)
        total = len(state.history)
        for i, p in enumerate(state.history):
            self.history_box.insert(tk.END, f"#{total - i}  {p.name}")
        self.status_var.set(f"현재 추첨 대상: {self.engine.pool_size}명")

    # 조 편성
    def run_grouping(self) -> None:
        if not self.roster:
            messagebox.showinfo("안내", message("empty_roster", self.locale))
            return
        try:
            size = int(self.group_size_var.get())
            self.grouping.run(self.roster, size, use_ai_names=self.use_ai_var.get(), locale=self.locale)
            self.refresh_board()
            self.status_var.set(
                f"조 편성 완료 - {len(self.roster)}명, {planned_group_count(len(self.roster), size)}개 조"
            )
        except Exception as e:
            messagebox.showerror("에러", str(e))

    def refresh_board(self) -> None:
        for child in self.board.winfo_children():
            child.destroy()
        for i, group in enumerate(self.grouping.groups):
            frame = ttk.Frame(self.board, relief=tk.RIDGE, borderwidth=1)
            frame.grid(row=i // 4, column=i % 4, sticky=tk.NSEW, padx=6, pady=6)
            self.board.columnconfigure(i % 4, weight=1)
            ttk.Label(frame, text=group.name).pack()
            lb = tk.Listbox(frame, height=max(3, len(group.members)))
            lb.pack(fill=tk.BOTH, expand=True)
            for no, m in enumerate(group.members, start=1):
                lb.insert(tk.END, f"{no}. {m.name}")

    def save_groups(self, ext: str) -> None:
        try:
            groups = self.grouping.groups
            if not groups:
                messagebox.showinfo("안내", "조 편성 결과가 없습니다. 먼저 조 편성을 진행하세요.")
                return
            OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
            out_path = OUTPUT_DIR / export_file_name("groups", ext)
            if ext == "csv":
                out_path.write_bytes(groups_to_csv_bytes(groups, self.locale))
            else:
                out_path.write_bytes(groups_to_excel_bytes(groups, self.locale))
            messagebox.showinfo("완료", f"저장 완료:\n{out_path}")
        except Exception as e:
            messagebox.showerror("에러", str(e))


def main() -> None:
    root = tk.Tk()
    DrawAndGroupApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
