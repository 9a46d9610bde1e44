"""
User Interface for the Shift Grid

CustomTkinter window drawing the daily schedule grid on a canvas. The window
only paints and forwards pointer events; all selection, drag and commit
rules live in ScheduleGridController.
"""

import customtkinter as ctk
import tkinter as tk
from tkinter import messagebox
from typing import Optional, Tuple
import logging

from .controller import ScheduleGridController
from .geometry import GridMetrics, cell_at, cell_origin, shift_rect
from .models import InvalidGridError
from .time_grid import format_hours

logger = logging.getLogger(__name__)


# Configure CustomTkinter
ctk.set_appearance_mode("light")
ctk.set_default_color_theme("blue")

HEADER_ROWS = 3
HOUR_CHOICES = [str(h) for h in range(0, 31)]

SHIFT_COLOR = "#60a5fa"
SELECTED_COLOR = "#bfdbfe"
DROP_OK_COLOR = "#bbf7d0"
DROP_BAD_COLOR = "#fecaca"
BAND_COLORS = {"good": "#dcfce7", "warning": "#fef9c3", "over": "#fee2e2"}


class ScheduleGridView(ctk.CTkFrame):
    """Canvas-backed grid of employees by time slots"""

    def __init__(self, parent, controller: ScheduleGridController, cell_size: int = 30):
        super().__init__(parent)
        self.controller = controller
        self.cell_size = cell_size
        self._hover_cell: Optional[Tuple[int, str]] = None

        self._create_widgets()
        self.controller.subscribe(self.redraw)

    def _create_widgets(self):
        self.canvas = tk.Canvas(self, bg="white", highlightthickness=0)
        x_scroll = ctk.CTkScrollbar(self, orientation="horizontal", command=self.canvas.xview)
        y_scroll = ctk.CTkScrollbar(self, orientation="vertical", command=self.canvas.yview)
        self.canvas.configure(xscrollcommand=x_scroll.set, yscrollcommand=y_scroll.set)

        self.canvas.grid(row=0, column=0, sticky="nsew")
        y_scroll.grid(row=0, column=1, sticky="ns")
        x_scroll.grid(row=1, column=0, sticky="ew")
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_motion)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<Button-3>", self._on_context)
        self.canvas.bind("<Escape>", lambda _e: self.controller.cancel())

    @property
    def metrics(self) -> GridMetrics:
        rows = len(self.controller.employees)
        if self.controller.coverage():
            rows += 1
        return GridMetrics(rows=rows, columns=len(self.controller.grid),
                           cell_size=self.cell_size, header_rows=HEADER_ROWS)

    def zoom_in(self):
        self.cell_size = self.metrics.zoom_in().cell_size
        self.redraw()

    def zoom_out(self):
        self.cell_size = self.metrics.zoom_out().cell_size
        self.redraw()

    def _cell_for_event(self, event) -> Tuple[Optional[int], Optional[str]]:
        """Employee id and slot under the pointer, or (None, None)"""
        x = self.canvas.canvasx(event.x)
        y = self.canvas.canvasy(event.y)
        cell = cell_at(x, y, self.metrics)
        if cell is None:
            return None, None
        row, column = cell
        if row >= len(self.controller.employees):
            return None, None
        return self.controller.employees[row].id, self.controller.grid.slots[column]

    def _on_press(self, event):
        self.canvas.focus_set()
        employee_id, slot = self._cell_for_event(event)
        if employee_id is None:
            return
        self.controller.press(employee_id, slot)

    def _on_motion(self, event):
        employee_id, slot = self._cell_for_event(event)
        self._hover_cell = (employee_id, slot) if employee_id is not None else None
        self.controller.move(employee_id, slot)

    def _on_release(self, event):
        employee_id, slot = self._cell_for_event(event)
        self._hover_cell = None
        self.controller.release(employee_id, slot)

    def _on_context(self, event):
        """Right click on a shift offers to delete it"""
        employee_id, slot = self._cell_for_event(event)
        if employee_id is None:
            return
        shift = self.controller.selection.shift_at(employee_id, slot)
        if shift is None:
            return
        employee = self.controller.employee(employee_id)
        name = employee.name if employee else str(employee_id)
        if messagebox.askyesno("Delete Shift",
                               f"Delete the {shift.start_time} - {shift.end_time} shift of {name}?"):
            self.controller.delete_shift(shift.id)

    def redraw(self):
        """Repaint the whole grid from controller state"""
        c = self.canvas
        c.delete("all")
        metrics = self.metrics
        grid = self.controller.grid
        size = metrics.cell_size

        c.configure(scrollregion=(0, 0, metrics.width, metrics.height))

        # Header: date, hours, quarter marks
        c.create_text(8, size // 2, anchor="w", font=("", 11, "bold"),
                      text=self.controller.date.strftime("%A, %d %B %Y"))
        for column, slot in enumerate(grid.slots):
            x, _ = cell_origin(0, column, metrics)
            if slot.endswith(":00"):
                c.create_text(x + 2, size + size // 2, anchor="w", text=slot[:2], font=("", 9, "bold"))
                c.create_line(x, size, x, metrics.height, fill="#aaaaaa", width=2)
            else:
                c.create_text(x + size // 2, 2 * size + size // 2, text=slot[3:], font=("", 7), fill="#888888")
                c.create_line(x, 2 * size, x, metrics.height, fill="#eeeeee", dash=(2, 2))

        hours = self.controller.all_weekly_hours()
        for row, employee in enumerate(self.controller.employees):
            _, y = cell_origin(row, 0, metrics)
            c.create_line(0, y, metrics.width, y, fill="#e5e7eb")
            weekly = hours[employee.id]
            if weekly.remaining_hours <= 0:
                color = "#dc2626"
            elif weekly.remaining_hours < 8:
                color = "#d97706"
            else:
                color = "#374151"
            c.create_text(6, y + size // 2, anchor="w", text=employee.name, font=("", 9, "bold"))
            c.create_text(metrics.label_width - 4, y + size // 2, anchor="e", fill=color, font=("", 8),
                          text=f"{format_hours(weekly.remaining_hours)} left")

            for column, slot in enumerate(grid.slots):
                if self.controller.selection.is_selected(employee.id, slot):
                    x0, y0 = cell_origin(row, column, metrics)
                    c.create_rectangle(x0, y0, x0 + size, y0 + size, fill=SELECTED_COLOR, outline="")

        self._draw_shifts(metrics)
        self._draw_drop_preview(metrics)
        self._draw_coverage(metrics)

    def _draw_shifts(self, metrics: GridMetrics):
        rows = {emp.id: i for i, emp in enumerate(self.controller.employees)}
        for shift in self.controller.visible_shifts:
            if shift.employee_id not in rows:
                continue
            columns = self.controller.selection.covered_columns(shift)
            if not columns:
                continue
            start, end = columns[0], columns[-1] + 1
            dragging = self.controller.drag.is_dragging and self.controller.drag.shift.id == shift.id
            x0, y0, x1, y1 = shift_rect(rows[shift.employee_id], start, end, metrics)
            self.canvas.create_rectangle(x0 + 1, y0 + 2, x1 - 1, y1 - 2, outline="",
                                         fill=SHIFT_COLOR, stipple="gray50" if dragging else "")
            self.canvas.create_text(x0 + 4, (y0 + y1) // 2, anchor="w", font=("", 8), fill="white",
                                    text=f"{shift.start_time}-{shift.end_time}")

    def _draw_drop_preview(self, metrics: GridMetrics):
        drag = self.controller.drag
        if not drag.is_dragging or self._hover_cell is None or self.controller.drop_preview is None:
            return
        employee_id, slot = self._hover_cell
        placed = drag.target_range(slot)
        if placed is None:
            return
        row = next(i for i, e in enumerate(self.controller.employees) if e.id == employee_id)
        start = self.controller.grid.index_of(slot)
        x0, y0, x1, y1 = shift_rect(row, start, start + placed[2], metrics)
        fill = DROP_OK_COLOR if self.controller.drop_preview else DROP_BAD_COLOR
        self.canvas.create_rectangle(x0, y0, x1, y1, fill=fill, outline="")

    def _draw_coverage(self, metrics: GridMetrics):
        costs = self.controller.coverage()
        if not costs:
            return
        row = len(self.controller.employees)
        _, y = cell_origin(row, 0, metrics)
        self.canvas.create_text(6, y + metrics.cell_size // 2, anchor="w", font=("", 8, "bold"),
                                text="Cost (% sales)")
        for column, cost in enumerate(costs):
            if cost.band is None:
                continue
            x0, y0 = cell_origin(row, column, metrics)
            self.canvas.create_rectangle(x0, y0, x0 + metrics.cell_size, y0 + metrics.cell_size,
                                         fill=BAND_COLORS[cost.band], outline="")
            self.canvas.create_text(x0 + metrics.cell_size // 2, y0 + metrics.cell_size // 2,
                                    font=("", 6), text=f"{cost.cost_percentage:.0f}%")


class DashboardPanel(ctk.CTkFrame):
    """Weekly and night hours for the displayed week"""

    def __init__(self, parent, controller: ScheduleGridController):
        super().__init__(parent, width=300)
        self.controller = controller

        self._create_widgets()
        self.controller.subscribe(self.update_dashboard)

    def _create_widgets(self):
        ctk.CTkLabel(
            self,
            text="This Week",
            font=ctk.CTkFont(size=18, weight="bold")
        ).pack(pady=(10, 20))

        self.stats_frame = ctk.CTkScrollableFrame(self, height=200)
        self.stats_frame.pack(fill="both", expand=True, padx=10, pady=10)

    def update_dashboard(self):
        for widget in self.stats_frame.winfo_children():
            widget.destroy()

        table = self.controller.weekly_hours_table()
        for emp, (_, row) in zip(self.controller.employees, table.iterrows()):
            night = self.controller.night_hours(emp.id)

            emp_frame = ctk.CTkFrame(self.stats_frame)
            emp_frame.pack(fill="x", pady=2)
            ctk.CTkLabel(emp_frame, text=emp.name, font=ctk.CTkFont(weight="bold")).pack(anchor="w", padx=10)

            stats_text = (f"Worked: {format_hours(row['Total'])} | Max: {format_hours(row['Max'])}\n"
                          f"Night: {format_hours(night.total_hours)}")
            ctk.CTkLabel(emp_frame, text=stats_text, justify="left").pack(anchor="w", padx=20, pady=2)

            if row["Remaining"] <= 0:
                emp_frame.configure(fg_color="lightcoral")


class MainWindow(ctk.CTk):
    """Main application window"""

    def __init__(self, controller: ScheduleGridController):
        super().__init__()

        self.title("Shift Grid")
        self.geometry("1400x800")

        self.controller = controller
        self.controller.notify = self.show_notification

        self._create_widgets()
        self.controller.subscribe(self._refresh_controls)
        self.grid_view.redraw()
        self.dashboard.update_dashboard()
        self._refresh_controls()

    def _create_widgets(self):
        control_frame = ctk.CTkFrame(self, height=60)
        control_frame.pack(fill="x", padx=10, pady=10)

        ctk.CTkButton(control_frame, text="◀", width=40,
                      command=self.controller.previous_day).pack(side="left", padx=5)
        ctk.CTkButton(control_frame, text="Today", width=70,
                      command=self.controller.today).pack(side="left", padx=5)
        ctk.CTkButton(control_frame, text="▶", width=40,
                      command=self.controller.next_day).pack(side="left", padx=5)

        ctk.CTkLabel(control_frame, text="From:").pack(side="left", padx=(20, 5))
        self.start_var = ctk.StringVar(value=str(self.controller.grid.start_hour))
        ctk.CTkOptionMenu(control_frame, values=HOUR_CHOICES[:24], variable=self.start_var,
                          command=self._on_hours_change, width=70).pack(side="left")

        ctk.CTkLabel(control_frame, text="To:").pack(side="left", padx=(10, 5))
        self.end_var = ctk.StringVar(value=str(self.controller.grid.end_hour))
        ctk.CTkOptionMenu(control_frame, values=HOUR_CHOICES[1:], variable=self.end_var,
                          command=self._on_hours_change, width=70).pack(side="left")

        ctk.CTkButton(control_frame, text="−", width=30,
                      command=lambda: self.grid_view.zoom_out()).pack(side="left", padx=(20, 2))
        ctk.CTkButton(control_frame, text="+", width=30,
                      command=lambda: self.grid_view.zoom_in()).pack(side="left", padx=2)

        self.save_button = ctk.CTkButton(control_frame, text="Save Shifts", width=120,
                                         command=self._save)
        self.save_button.pack(side="right", padx=10)

        content_frame = ctk.CTkFrame(self)
        content_frame.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        self.grid_view = ScheduleGridView(content_frame, self.controller,
                                          cell_size=self.controller.config.cell_size)
        self.grid_view.pack(side="left", fill="both", expand=True, padx=(0, 5))

        self.dashboard = DashboardPanel(content_frame, self.controller)
        self.dashboard.pack(side="right", fill="y", padx=(5, 0))

        self.status_var = ctk.StringVar(value="Ready")
        ctk.CTkLabel(self, textvariable=self.status_var).pack(side="bottom", fill="x", padx=10, pady=5)

    def _refresh_controls(self):
        has_selection = self.controller.selection.has_selections
        busy = self.controller.commit_in_flight
        self.save_button.configure(state="normal" if has_selection and not busy else "disabled")

    def _on_hours_change(self, _value):
        try:
            self.controller.set_hour_range(int(self.start_var.get()), int(self.end_var.get()))
        except (ValueError, InvalidGridError) as e:
            self.show_notification("warning", f"Invalid hour range: {e}")
            self.start_var.set(str(self.controller.grid.start_hour))
            self.end_var.set(str(self.controller.grid.end_hour))

    def _save(self):
        batch = self.controller.save()
        if batch is not None and batch.skipped:
            self.status_var.set(f"{len(batch.skipped)} intervals overlap existing shifts and were skipped")

    def show_notification(self, level: str, message: str):
        logger.log(logging.getLevelName(level.upper()), message)
        self.status_var.set(message)
        if level == "error":
            messagebox.showwarning("Shift Grid", message)
