from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()


def _default_data_dir() -> str:
    return str(Path.home() / ".gradetrackr")


@dataclass(frozen=True)
class Settings:
    data_dir: str = os.getenv("GRADETRACKR_DATA_DIR") or _default_data_dir()
    namespace: str = os.getenv("GRADETRACKR_NAMESPACE", "grade-tracker")
    # file | appwrite | local
    backend: str = os.getenv("GRADETRACKR_BACKEND", "file").strip().lower()
    log_level: str = os.getenv("GRADETRACKR_LOG_LEVEL", "INFO").upper()

    groq_api_key: str = os.getenv("GROQ_API_KEY", "")
    groq_api_url: str = os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")
    groq_model: str = os.getenv("GROQ_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")

    appwrite_endpoint: str = os.getenv("APPWRITE_ENDPOINT", "")
    appwrite_project_id: str = os.getenv("APPWRITE_PROJECT_ID", "")
    appwrite_api_key: str = os.getenv("APPWRITE_API_KEY", "")
    appwrite_database_id: str = os.getenv("APPWRITE_DATABASE_ID", "")
    appwrite_collection_id: str = os.getenv("APPWRITE_GRADEBOOK_COLLECTION_ID", "gradebooks")
    appwrite_document_id: str = os.getenv("APPWRITE_GRADEBOOK_DOCUMENT_ID", "default")

    @property
    def local_db_path(self) -> str:
        return str(Path(self.data_dir) / "local_store.db")


settings = Settings()
