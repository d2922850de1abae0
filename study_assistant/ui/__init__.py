from .main_window import MainWindow, build_service, run_app

__all__ = ["MainWindow", "build_service", "run_app"]
