"""
Main Entry Point for the Shift Grid

Wires configuration, the in-memory shift store, the grid controller and the
desktop window together, with logging and global error handling.
"""

import sys
import logging
import traceback
from pathlib import Path
from datetime import datetime
from tkinter import messagebox

from shift_grid.config import load_config, load_daily_sales, load_seed
from shift_grid.controller import ScheduleGridController
from shift_grid.models import ShiftGridError
from shift_grid.store import InMemoryShiftStore


def setup_logging():
    """Setup application logging"""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"shift_grid_{datetime.now().strftime('%Y%m%d')}.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

    return logging.getLogger(__name__)


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger(__name__)
    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback)
    )

    # Show error dialog if GUI is available
    try:
        error_msg = f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}"
        messagebox.showerror("Application Error", error_msg)
    except Exception:
        logger.debug("No GUI available for the error dialog")


class ShiftGridApp:
    """Main application class"""

    def __init__(self, config_file: str = "data/shift_grid.json"):
        self.logger = logging.getLogger(__name__)
        self.config_file = Path(config_file)
        self.store = None
        self.controller = None
        self.main_window = None

    def initialize(self) -> bool:
        """Initialize application components"""
        try:
            self.logger.info("Initializing Shift Grid")

            config = load_config(self.config_file)
            employees, shifts = load_seed(self.config_file)
            daily_sales = load_daily_sales(self.config_file)

            self.store = InMemoryShiftStore(employees, shifts)
            self.controller = ScheduleGridController(
                persistence=self.store,
                employees=self.store.employees,
                shifts=self.store.shifts,
                config=config,
                daily_sales=daily_sales
            )
            # The store confirms changes; only then does the grid see them
            self.store.subscribe(lambda: self.controller.set_shifts(self.store.shifts))
            self.logger.info(f"Controller ready with {len(employees)} employees")
            return True

        except ShiftGridError as e:
            self.logger.error(f"Failed to initialize application: {e}")
            self.logger.error(traceback.format_exc())
            return False

    def run(self) -> bool:
        """Run the main application"""
        if not self.initialize():
            try:
                messagebox.showerror("Initialization Error",
                                     f"Failed to initialize Shift Grid.\n\n"
                                     f"Check {self.config_file} and the logs directory.")
            except Exception as e:
                print(f"Failed to show initialization error: {e}")
            return False

        try:
            # Imported here so the core stays usable without a display
            from shift_grid.ui import MainWindow

            self.logger.info("Starting GUI application")
            self.main_window = MainWindow(self.controller)
            self.main_window.mainloop()
            self.logger.info("Application closed normally")
            return True

        except Exception as e:
            self.logger.error(f"Application error: {e}")
            self.logger.error(traceback.format_exc())
            return False


def main():
    """Main entry point"""
    sys.excepthook = handle_exception

    logger = setup_logging()
    logger.info("=" * 50)
    logger.info("Starting Shift Grid")
    logger.info("=" * 50)

    config_file = sys.argv[1] if len(sys.argv) > 1 else "data/shift_grid.json"
    app = ShiftGridApp(config_file)
    success = app.run()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
