import json
import sys
from pathlib import Path
from typing import Any, Dict

APP_DIR = Path(__file__).parent.resolve()
LANG_DIR = APP_DIR / "lang"
DEFAULT_LANG = "en"

_lang_data: Dict[str, Any] = {}
_fallback_data: Dict[str, Any] = {}


def _read_lang_file(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_lang(lang_code: str = DEFAULT_LANG) -> None:
    global _lang_data, _fallback_data

    fallback_file = LANG_DIR / f"{DEFAULT_LANG}.json"
    if not _fallback_data and fallback_file.exists():
        try:
            _fallback_data = _read_lang_file(fallback_file)
        except (OSError, ValueError) as e:
            print(f"[!] Failed to load fallback language {fallback_file.name}: {e}", file=sys.stderr)
            _fallback_data = {}

    lang_file = LANG_DIR / f"{lang_code}.json"
    if lang_code == DEFAULT_LANG or not lang_file.exists():
        _lang_data = _fallback_data
        return

    try:
        _lang_data = _read_lang_file(lang_file)
    except (OSError, ValueError) as e:
        print(f"[!] Failed to load language {lang_code}, using fallback: {e}", file=sys.stderr)
        _lang_data = _fallback_data


def get_string(key: str, default: str = "") -> str:
    if not _fallback_data:
        load_lang(DEFAULT_LANG)
    val = _lang_data.get(key, _fallback_data.get(key, default))
    if val:
        return val

    missing_key_format = _fallback_data.get("err_missing_key", "[{key}]")
    try:
        return missing_key_format.format(key=key)
    except KeyError:
        return f"[{key}]"
