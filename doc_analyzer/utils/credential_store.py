import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from doc_analyzer.logger import GLOBAL_LOGGER as log

API_KEY_STORAGE_KEY = "openai_api_key"
DEFAULT_CREDENTIALS_PATH = "~/.doc_analyzer/credentials.json"


class CredentialStore:
    """
    Local key-value file holding a single credential string under a fixed key.

    The file is plain JSON, e.g. {"openai_api_key": "sk-..."}. Other keys found
    in the file are preserved on write.
    """

    def __init__(self, path: Optional[str] = None, storage_key: str = API_KEY_STORAGE_KEY):
        raw_path = path or os.getenv("DOC_ANALYZER_CREDENTIALS") or DEFAULT_CREDENTIALS_PATH
        self.path = Path(raw_path).expanduser()
        self.storage_key = storage_key

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, ValueError) as e:
            log.error("Failed to read credential file | path=%s | error=%s", str(self.path), str(e))
            return {}
        if not isinstance(data, dict):
            log.warning("Credential file is not a JSON object, ignoring | path=%s", str(self.path))
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            log.debug("Could not restrict credential file permissions | path=%s", str(self.path))

    def get(self) -> Optional[str]:
        value = self._read().get(self.storage_key)
        if isinstance(value, str) and value.strip():
            return value
        return None

    def set(self, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("Credential must not be blank")

        data = self._read()
        data[self.storage_key] = value
        self._write(data)
        log.info("Credential stored | key=%s | path=%s", self.storage_key, str(self.path))
        return value

    def clear(self) -> bool:
        data = self._read()
        if self.storage_key not in data:
            return False
        data.pop(self.storage_key)
        self._write(data)
        log.info("Credential removed | key=%s", self.storage_key)
        return True
