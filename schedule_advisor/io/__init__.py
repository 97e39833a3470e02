"""I/O utilities for CSV import/export."""

from .config import AdvisorConfig, load_config
from .export_csv import export_conflicts_csv, export_suggestions_csv
from .import_csv import import_cleaners_csv, import_schedule_csv, import_sites_csv, import_vacations_csv

__all__ = [
    "AdvisorConfig",
    "load_config",
    "import_cleaners_csv",
    "import_sites_csv",
    "import_schedule_csv",
    "import_vacations_csv",
    "export_conflicts_csv",
    "export_suggestions_csv",
]
