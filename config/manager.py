"""Configuration manager: load, save and validate the YAML config.

Uses ruamel.yaml so the written file keeps its section comments.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML COMMENTS ───

_YAML_HEADER = f"""\
# ============================================
# Lecture schedule: configuration
# Created: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "calendar": (
        "Calendar",
        "Displayed hour windows. Layout only, collision checks ignore them.",
    ),
    "semester": (
        "Semester",
        "First sittings of events must fall inside this range.",
    ),
    "store": (
        "Document store",
        None,
    ),
    "caller": (
        "Command line identity",
        "role: admin | hod | lecturer",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "schedule_config.yaml"

    def __init__(self, path: Optional[Path] = None):
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """True while no config file exists yet."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Load ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Load config from YAML. Validated through pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Config file not found: {target}\n"
                f"Run 'python main.py init' to create one."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Invalid config file: {target}\n"
                f"Validation error: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> AppConfig:
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            return AppConfig()
        return self.load(target)

    # ─── Save ───

    def save(self, config: AppConfig, path: Optional[Path] = None,
             quiet: bool = False) -> Path:
        """Save config as commented YAML."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        if not quiet:
            console.print(f"[green]✓[/green] Config saved: {target}")
        return target

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "calendar" in cm:
            cal = CommentedMap(cm["calendar"])
            cal.yaml_add_eol_comment("row 0 of the day grid", "day_first_hour")
            cal.yaml_add_eol_comment("exclusive", "day_last_hour")
            cm["calendar"] = cal

        return cm
