import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..utils.logger import get_logger
from .pattern_engine import NATIVE_SYNTAX, PatternEngine, create_engine

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "default_configs" / "profiles.json"


@dataclass
class RegexProfile:
    name: str
    description: str
    engine: str
    id: str
    timeout: Optional[float] = None
    version: int = 0
    default_flags: str = "gm"
    syntax: str = NATIVE_SYNTAX

    def build_engine(self) -> PatternEngine:
        return create_engine(self.engine, timeout=self.timeout, version=self.version, syntax=self.syntax)


class ProfileManager:
    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.profiles: Dict[str, RegexProfile] = {}
        self.palette: Tuple[str, ...] = ()
        self.load_default_profiles()

    def load_default_profiles(self) -> None:
        """Load profiles and the highlight palette from the JSON configuration."""
        if not self.config_path.exists():
            logger.warning("Profile configuration %s not found", self.config_path)
            return

        with open(self.config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.palette = tuple(data.get("palette", ()))
        for profile_id, profile_data in data.get("profiles", {}).items():
            self.profiles[profile_id] = RegexProfile(
                name=profile_data["name"],
                description=profile_data["description"],
                engine=profile_data.get("engine", "regex"),
                id=profile_id,
                timeout=profile_data.get("timeout"),
                version=profile_data.get("version", 0),
                default_flags=profile_data.get("default_flags", "gm"),
                syntax=profile_data.get("syntax", NATIVE_SYNTAX),
            )

    def get_profile(self, profile_id: str) -> Optional[RegexProfile]:
        return self.profiles.get(profile_id)

    def list_profiles(self) -> List[RegexProfile]:
        return list(self.profiles.values())

    def get_default_profile_id(self) -> str:
        return "ecmascript"

    def get_default_profile(self) -> Optional[RegexProfile]:
        return self.get_profile(self.get_default_profile_id())
