"""
설정 로드: default.yaml + 환경 변수.

우선순위 (높은 순):
1. APP_* 환경 변수 (.env 포함)
2. default.yaml
3. Settings 기본값

프로세스 시작 시 한 번만 로드한다 (lifespan).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"

ENV_PREFIX = "APP_"


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드 (없으면 빈 dict)."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def _env(name: str) -> str | None:
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    return value if value else None


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# (Settings 필드, 환경 변수 이름, 변환 함수)
_ENV_OVERRIDES = [
    ("public_root", "PUBLIC_ROOT", Path),
    ("uploads_dir", "UPLOADS", str),
    ("lock_dir", "LOCK_DIR", Path),
    ("page_max_size", "PAGE_MAX_SIZE", int),
    ("database_url", "DATABASE_URL", str),
    ("create_tables", "CREATE_TABLES", _as_bool),
    ("log_level", "LOG_LEVEL", str),
]


@dataclass
class Settings:
    """
    애플리케이션 설정.

    uploads_dir는 public_root 기준 상대 경로이며 앞뒤 "/"를 포함한다
    (예: "/uploads/"). DB의 path 컬럼은 uploads_dir + 저장 파일명.
    lock_dir는 저장 파일별 락 파일 위치 (public_root 밖이어야 함).
    """
    public_root: Path = Path("./public")
    uploads_dir: str = "/uploads/"
    lock_dir: Path = Path("./data/locks")
    page_max_size: int = 50
    database_url: str = "sqlite:///./data/app.db"
    create_tables: bool = True
    session_cookie: str = "session"
    site_title: str = "Uploads"
    log_level: str = "INFO"
    file_types: list[dict[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.uploads_dir = normalize_uploads_dir(self.uploads_dir)
        if self.page_max_size < 1:
            raise ValueError(f"page_max_size must be >= 1, got {self.page_max_size}")

    @property
    def uploads_path(self) -> Path:
        """업로드 파일이 실제로 저장되는 디렉토리."""
        return self.public_root / self.uploads_dir.strip("/")

    @classmethod
    def from_config(cls, config: dict) -> "Settings":
        """
        설정 dict → Settings.

        Args:
            config: load_config() 결과

        Returns:
            환경 변수 오버라이드가 적용된 Settings
        """
        paths = config.get("paths") or {}
        pagination = config.get("pagination") or {}
        database = config.get("database") or {}
        auth = config.get("auth") or {}
        site = config.get("site") or {}
        upload = config.get("upload") or {}
        logging_cfg = config.get("logging") or {}

        values: dict[str, Any] = {
            "public_root": Path(paths.get("public_root", "./public")),
            "uploads_dir": paths.get("uploads", "/uploads/"),
            "lock_dir": Path(paths.get("lock_dir", "./data/locks")),
            "page_max_size": int(pagination.get("max_size", 50)),
            "database_url": database.get("url", "sqlite:///./data/app.db"),
            "create_tables": bool(database.get("create_tables", True)),
            "session_cookie": auth.get("session_cookie", "session"),
            "site_title": site.get("title", "Uploads"),
            "log_level": logging_cfg.get("level", "INFO"),
            "file_types": list(upload.get("file_types") or []),
        }

        # 환경 변수 오버라이드
        for key, env_name, convert in _ENV_OVERRIDES:
            raw = _env(env_name)
            if raw is not None:
                values[key] = convert(raw)

        return cls(**values)


def normalize_uploads_dir(uploads_dir: str) -> str:
    """"uploads" / "/uploads" / "uploads/" → "/uploads/"."""
    stripped = uploads_dir.strip().strip("/")
    if not stripped:
        return "/"
    return f"/{stripped}/"


def load_settings(config_path: Path | None = None, env_file: Path | None = None) -> Settings:
    """
    .env + default.yaml에서 Settings 생성.

    Args:
        config_path: YAML 경로 (기본: 프로젝트 루트 default.yaml)
        env_file: .env 경로 (기본: 현재 디렉토리 탐색)

    Returns:
        Settings
    """
    load_dotenv(dotenv_path=env_file)
    settings = Settings.from_config(load_config(config_path))
    logger.info(
        f"Settings loaded: uploads={settings.uploads_path}, "
        f"page_max_size={settings.page_max_size}"
    )
    return settings


def configure_logging(settings: Settings) -> None:
    """루트 로거 레벨 설정."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
