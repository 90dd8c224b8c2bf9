"""shopfront models."""

from pathlib import Path

from shopfront.settings import settings


def load_all_models() -> None:
    """Load every app's models so they register on the shared metadata."""
    project_root = Path(__file__).resolve().parent.parent.parent
    for app in settings.app_names:
        models_file = project_root / app / "models.py"
        if models_file.exists():
            module_name = f"shopfront.{app}.models"
            __import__(module_name)
