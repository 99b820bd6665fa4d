from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    override_storage_key: str = os.getenv("FINAI_OVERRIDE_STORAGE_KEY", "finai.firebase_config")
    placeholder_markers: tuple[str, ...] = _split_csv(
        os.getenv("PLACEHOLDER_MARKERS", "YOUR_,在此處貼上,PASTE_HERE,change-me")
    )

    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-pro")
    auth_timeout_seconds: float = float(os.getenv("AUTH_TIMEOUT_SECONDS", "15"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    web_mode: bool = os.getenv("FINAI_WEB", "0") == "1"
    port: int = int(os.getenv("PORT", "8550"))


settings = Settings()
