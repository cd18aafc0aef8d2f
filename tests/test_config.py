"""Tests for the Config store: loading, access, mutation and caching."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from cconf.config import Config
from cconf.errors import (
    ConfigKeyError,
    ConfigNotFoundError,
    ConfigParseError,
    UnsupportedFormatError,
)


# === Loading ===


class TestLoad:
    def test_app_json_scenario(self, loaded_config: Config) -> None:
        """Values of the sample file are reachable by dotted path."""
        assert loaded_config.get_str("name") == "cconf"
        assert loaded_config.get("ext") == {"email": "a@b.com", "author": "a"}
        assert loaded_config.get_str("ext.email") == "a@b.com"
        assert loaded_config.get_float("version", 2.0) == 0.1
        assert loaded_config.get_float("missing.key", 2.0) == 2.0

    def test_later_files_override(self, app_json: str, override_yaml: str) -> None:
        """Files are deep-merged in order, later ones winning."""
        c = Config()
        c.load(app_json, override_yaml)
        assert c.get_str("ext.author") == "b"
        assert c.get_str("ext.email") == "a@b.com"
        assert c.get_str("ext.site") == "https://example.com"
        assert c.get_bool("debug") is True

    def test_unsupported_format(self, config: Config, tmp_path: Path) -> None:
        """A file with no registered loader raises UnsupportedFormatError."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            config.load(str(tmp_path / "app.toml"))
        assert exc_info.value.details["format"] == "toml"

    def test_missing_file(self, config: Config, tmp_path: Path) -> None:
        """A missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            config.load(str(tmp_path / "absent.json"))

    def test_invalid_json(self, config: Config, tmp_path: Path) -> None:
        """Malformed JSON raises ConfigParseError."""
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        with pytest.raises(ConfigParseError):
            config.load(str(bad))

    def test_aborts_on_first_error(self, app_json: str, override_yaml: str, tmp_path: Path) -> None:
        """Files after a failing one are not loaded; earlier ones are kept."""
        c = Config()
        with pytest.raises(UnsupportedFormatError):
            c.load(app_json, str(tmp_path / "x.toml"), override_yaml)
        assert c.get_str("name") == "cconf"
        assert c.get("debug") is None

    def test_load_resets_cache(self, loaded_config: Config, override_yaml: str) -> None:
        """Values read before a load are recomputed after it."""
        assert loaded_config.get_str("ext.author") == "a"
        assert loaded_config.get("debug") is None
        loaded_config.load(override_yaml)
        assert loaded_config.get_str("ext.author") == "b"
        assert loaded_config.get("debug") is True

    def test_explicit_format(self, config: Config, tmp_path: Path) -> None:
        """fmt selects the loader regardless of the extension."""
        f = tmp_path / "settings.conf"
        f.write_text(json.dumps({"port": 8080}))
        config.load(str(f), fmt="json")
        assert config.get_int("port") == 8080

    def test_register_loader(self, config: Config, tmp_path: Path) -> None:
        """Custom loaders are matched by extension."""
        seen: list[str] = []

        def load_env(path: str) -> dict:
            seen.append(path)
            return {"env": "prod"}

        config.register_loader("env", load_env)
        path = str(tmp_path / "app.env")
        config.load(path)
        assert seen == [path]
        assert config.get_str("env") == "prod"

    def test_loaders_are_per_instance(self, config: Config) -> None:
        """Registering a loader does not leak to other instances."""
        config.register_loader("ini", lambda path: {})
        assert "ini" not in Config().loaders

    def test_accepts_path_objects(self, config: Config, app_json: str) -> None:
        """pathlib.Path arguments are accepted."""
        config.load(Path(app_json))
        assert config.get_str("name") == "cconf"

    def test_empty_yaml_is_skipped(self, loaded_config: Config, tmp_path: Path) -> None:
        """An empty document does not wipe the store."""
        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        loaded_config.load(str(empty))
        assert loaded_config.get_str("name") == "cconf"


class TestLoadPattern:
    def test_loads_matches_in_sorted_order(self, config: Config, tmp_path: Path) -> None:
        """Matching files are loaded in lexical order."""
        (tmp_path / "10-base.json").write_text(json.dumps({"level": "base", "a": 1}))
        (tmp_path / "20-local.json").write_text(json.dumps({"level": "local"}))
        config.load_pattern(str(tmp_path / "*.json"))
        assert config.get_str("level") == "local"
        assert config.get_int("a") == 1

    def test_no_match_logs_warning(self, config: Config, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """A pattern without matches leaves the store empty and warns."""
        with caplog.at_level(logging.WARNING, logger="cconf.config"):
            config.load_pattern(str(tmp_path / "*.json"))
        assert config.store is None
        assert "No configuration files match" in caplog.text


# === Access ===


class TestGet:
    def test_missing_returns_default(self, loaded_config: Config) -> None:
        """Missing keys return the default, or None."""
        assert loaded_config.get("nope") is None
        assert loaded_config.get("nope", "dflt") == "dflt"

    def test_converts_to_default_type(self) -> None:
        """Values are converted to the type of the default."""
        c = Config({"n": 3, "f": 2.9})
        value = c.get("n", 1.5)
        assert value == 3.0
        assert isinstance(value, float)
        assert c.get("f", 0) == 2

    def test_inconvertible_returns_default(self, loaded_config: Config) -> None:
        """A value that cannot take the default's type yields the default."""
        assert loaded_config.get("version", "x") == "x"
        assert loaded_config.get("name", 7) == 7
        assert loaded_config.get("ext", 7) == 7

    def test_bool_is_not_a_number(self) -> None:
        """Booleans and numbers do not convert into each other."""
        c = Config({"flag": True, "n": 1})
        assert c.get("flag", 0) == 0
        assert c.get("n", False) is False

    def test_default_type_does_not_stick(self, loaded_config: Config) -> None:
        """Different defaults for the same key are honoured independently."""
        assert loaded_config.get("version", 1.0) == 0.1
        assert loaded_config.get("version", "s") == "s"
        assert loaded_config.get("version") == 0.1

    def test_empty_store(self, config: Config) -> None:
        """An empty store resolves everything to the default."""
        assert config.store is None
        assert config.get("a.b", 3) == 3

    def test_non_finite_and_huge_numbers(self, config: Config, tmp_path: Path) -> None:
        """Numbers without an int or float form yield the default."""
        f = tmp_path / "numbers.yaml"
        f.write_text("big: .inf\nnan: .nan\n")
        config.load(str(f))
        config.set("huge", 10**400)
        assert config.get_int("big", 7) == 7
        assert config.get_int("nan", 7) == 7
        assert config.get_float("huge", 1.5) == 1.5
        assert config.get("huge", 0) == 10**400


class TestTypedGetters:
    def test_get_str(self, loaded_config: Config) -> None:
        """get_str returns strings, empty string by default."""
        assert loaded_config.get_str("name") == "cconf"
        assert loaded_config.get_str("version") == ""
        assert loaded_config.get_str("missing", "x") == "x"

    def test_get_int(self, loaded_config: Config) -> None:
        """get_int truncates floats."""
        assert loaded_config.get_int("version") == 0
        assert loaded_config.get_int("missing", 5) == 5

    def test_get_float(self) -> None:
        """get_float widens ints."""
        c = Config({"n": 3})
        assert c.get_float("n") == 3.0
        assert isinstance(c.get_float("n"), float)
        assert c.get_float("missing", 2) == 2.0

    def test_get_bool(self, loaded_config: Config) -> None:
        """get_bool only accepts booleans."""
        loaded_config.set("debug", True)
        assert loaded_config.get_bool("debug") is True
        assert loaded_config.get_bool("name") is False
        assert loaded_config.get_bool("missing", True) is True


# === Mutation ===


class TestSet:
    def test_set_on_empty_store(self, config: Config) -> None:
        """Setting on an empty store creates the tree."""
        config.set("a.b", 1)
        assert config.store == {"a": {"b": 1}}
        assert config.get("a.b") == 1

    def test_index_on_empty_store_fails(self, config: Config) -> None:
        """A list index cannot be created implicitly."""
        with pytest.raises(ConfigKeyError) as exc_info:
            config.set("a.0", 5)
        assert exc_info.value.key == "a.0"

    def test_index_into_existing_list(self) -> None:
        """Existing list slots can be written."""
        c = Config({"a": [1, 2]})
        c.set("a.0", 5)
        assert c.get("a") == [5, 2]

    def test_index_out_of_range(self) -> None:
        """Lists are not grown by set."""
        c = Config({"a": [1]})
        with pytest.raises(ConfigKeyError) as exc_info:
            c.set("a.3", 5)
        assert exc_info.value.key == "a.3"
        assert "is not a valid key" in str(exc_info.value)

    def test_through_scalar(self, loaded_config: Config) -> None:
        """A path crossing a scalar is rejected with the offending prefix."""
        with pytest.raises(ConfigKeyError) as exc_info:
            loaded_config.set("name.first", "x")
        assert exc_info.value.key == "name.first"
        assert loaded_config.get_str("name") == "cconf"

    def test_round_trip(self, loaded_config: Config) -> None:
        """A value set at a path is returned by get."""
        loaded_config.set("ext.email", "c@d.org")
        assert loaded_config.get_str("ext.email") == "c@d.org"

    def test_cached_value_invalidated(self, loaded_config: Config) -> None:
        """set never leaves a stale cached value for its key."""
        assert loaded_config.get_str("name") == "cconf"
        loaded_config.set("name", "other")
        assert loaded_config.get_str("name") == "other"

    def test_descendants_invalidated(self, loaded_config: Config) -> None:
        """Replacing a subtree refreshes cached reads beneath it."""
        assert loaded_config.get_str("ext.email") == "a@b.com"
        loaded_config.set("ext", {"email": "new@b.com"})
        assert loaded_config.get_str("ext.email") == "new@b.com"
        assert loaded_config.get("ext.author") is None

    def test_ancestors_invalidated(self, loaded_config: Config) -> None:
        """Creating a path refreshes cached misses of its ancestors."""
        assert loaded_config.get("db") is None
        loaded_config.set("db.host", "localhost")
        assert loaded_config.get("db") == {"host": "localhost"}

    def test_custom_separator(self, app_json: str) -> None:
        """Keys use the configured separator."""
        c = Config(separator="/")
        c.load(app_json)
        assert c.get_str("ext/email") == "a@b.com"
        c.set("ext/email", "x@y.z")
        assert c.get("ext") == {"email": "x@y.z", "author": "a"}

    def test_empty_separator_rejected(self) -> None:
        """An empty separator is invalid."""
        with pytest.raises(ValueError):
            Config(separator="")

    def test_failed_set_leaves_store_unchanged(self, config: Config) -> None:
        """A rejected key writes nothing, not even the empty root."""
        with pytest.raises(ConfigKeyError) as exc_info:
            config.set("a.b.0", 5)
        assert exc_info.value.key == "a.b.0"
        assert config.store is None

    def test_failed_set_in_existing_tree(self, loaded_config: Config) -> None:
        """A rejected key leaves an existing tree untouched."""
        with pytest.raises(ConfigKeyError):
            loaded_config.set("ext.new.0.x", 1)
        assert loaded_config.get("ext") == {"email": "a@b.com", "author": "a"}

    def test_index_spellings_invalidated(self) -> None:
        """Reads through a differently spelled index see the new value."""
        c = Config({"l": [1, 2]})
        assert c.get("l.00") == 1
        assert c.get("l.000") == 1
        c.set("l.0", 9)
        assert c.get("l.00") == 9
        assert c.get("l.000") == 9


class TestReplaceStore:
    def test_merges_left_to_right(self, config: Config) -> None:
        """Given trees are deep-merged in order."""
        config.replace_store({"a": {"b": 1}, "x": 1}, {"a": {"c": 2}, "x": 2})
        assert config.store == {"a": {"b": 1, "c": 2}, "x": 2}

    def test_inputs_not_mutated(self, config: Config) -> None:
        """The caller's dicts are left untouched."""
        first = {"a": {"b": 1}}
        config.replace_store(first, {"a": {"c": 2}})
        assert first == {"a": {"b": 1}}

    def test_discards_previous_tree(self, loaded_config: Config) -> None:
        """The previous tree is dropped, not merged into."""
        loaded_config.replace_store({"other": 1})
        assert loaded_config.get("name") is None
        assert loaded_config.get_int("other") == 1

    def test_resets_cache(self, config: Config) -> None:
        """Cached reads are recomputed against the new tree."""
        config.replace_store({"a": {"b": 1}})
        assert config.get("a.b") == 1
        config.replace_store({"a": {"b": 2}})
        assert config.get("a.b") == 2

    def test_no_trees(self, loaded_config: Config) -> None:
        """Replacing with nothing empties the store."""
        loaded_config.replace_store()
        assert loaded_config.store is None

    def test_constructor_data(self) -> None:
        """Initial data is installed through replace_store."""
        data = {"a": 1}
        c = Config(data)
        assert c.get_int("a") == 1
        assert c.store is not data
