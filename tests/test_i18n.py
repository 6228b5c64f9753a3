import json
import re
from pathlib import Path

import pytest
from autoroot import i18n
from autoroot.workflow import Orchestrator

BASE = Path(__file__).parent.parent
SRC = BASE / "bin" / "autoroot"
LANG = SRC / "lang"


def get_src_keys():
    keys = set()
    pat = re.compile(r'get_string\s*\(\s*["\']([^"\']+)["\']')
    for f in SRC.rglob("*.py"):
        keys.update(pat.findall(f.read_text(encoding="utf-8")))
    return keys


def load_langs():
    d = {}
    for f in LANG.glob("*.json"):
        try:
            with open(f, "r", encoding="utf-8") as fp:
                d[f.name] = set(json.load(fp).keys())
        except ValueError:
            pytest.fail(f"Bad JSON {f.name}")
    return d


class TestI18n:
    @pytest.fixture(scope="class")
    def src_keys(self):
        return get_src_keys()

    @pytest.fixture(scope="class")
    def lang_map(self):
        return load_langs()

    def test_missing_keys(self, src_keys, lang_map):
        assert lang_map
        for n, k in lang_map.items():
            missing = src_keys - k
            assert not missing, f"Missing in {n}: {missing}"

    def test_step_titles(self, lang_map):
        titles = {f"wf_title_{state.value}" for state, _ in Orchestrator(None)._steps()}
        for n, k in lang_map.items():
            assert titles <= k, f"Missing step titles in {n}: {titles - k}"

    def test_parity(self, lang_map):
        base_k = lang_map["en.json"]
        for n, k in lang_map.items():
            if n == "en.json":
                continue
            diff = base_k - k
            assert not diff, f"{n} missing keys from en.json: {diff}"


def test_missing_key_placeholder():
    i18n.load_lang("en")
    assert i18n.get_string("no_such_key_anywhere") == "[no_such_key_anywhere]"


def test_unknown_language_falls_back():
    i18n.load_lang("xx")
    assert i18n.get_string("main_success") == i18n._fallback_data["main_success"]
    i18n.load_lang("en")
