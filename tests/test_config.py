from pathlib import Path
import textwrap

import pytest

from nestview.config import ConfigError, load_config
from nestview.render import PageComposer


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "site.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_loads_config_relative_to_file(sample_config: Path, site_root: Path) -> None:
    config = load_config(sample_config)

    assert config.document_root == site_root
    assert config.outer == "page.html"
    assert config.paths == {"html": "templates", "css": "assets/css", "js": "assets/js"}
    assert config.vars["site_name"] == "Acme"
    assert [entry.kind for entry in config.head] == ["meta", "js"]


def test_composer_from_config(sample_config: Path, site_root: Path) -> None:
    composer = PageComposer.from_config(load_config(sample_config))

    assert composer.outer == str(site_root / "templates" / "page.html")
    assert composer.get_group_path("js") == "assets/js"
    assert composer.head.scripts == ["/assets/js/app.js"]

    html = composer.render_to_string()
    assert '<meta charset="utf-8">' in html
    assert '<script src="/assets/js/app.js"></script>' in html


def test_rejects_unknown_keys(tmp_path: Path, site_root: Path) -> None:
    path = _write_config(
        tmp_path,
        f"""
        document_root = "{site_root}"
        unexpected = "nope"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "extra" in str(exc.value).lower()


def test_rejects_unknown_head_kind(tmp_path: Path, site_root: Path) -> None:
    path = _write_config(
        tmp_path,
        f"""
        document_root = "{site_root}"

        [[head]]
        kind = "favicon"
        value = "x.ico"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "kind" in str(exc.value)


def test_rejects_missing_document_root(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'document_root = "nowhere"')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "not a directory" in str(exc.value)


def test_rejects_invalid_toml(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "document_root = ")

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "Invalid TOML" in str(exc.value)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.toml")
