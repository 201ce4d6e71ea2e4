from pathlib import Path
import textwrap

import pytest
from typer.testing import CliRunner

from nestview.render import PageComposer

OUTER_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
{{ display_head() }}
</head>
<body>
{{ include_html("header.html", {"heading": "Override"}) }}
<main>{{ heading }}</main>
{{ include_html("missing.html") }}
{{ include_html("nav.html") }}
</body>
</html>
"""

HEADER_TEMPLATE = """{{ set_head("css", "main.css") }}<header>{{ heading }}|{{ site_name }}</header>"""

NAV_TEMPLATE = """{{ set_head("title", "Nav Title") }}<nav>{{ heading }}</nav>"""


def write_file(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """
    Build a small document root with templates and assets.
    """
    root = tmp_path / "site"
    write_file(root, "templates/page.html", OUTER_TEMPLATE)
    write_file(root, "templates/partials/header.html", HEADER_TEMPLATE)
    write_file(root, "templates/partials/nav.html", NAV_TEMPLATE)
    write_file(root, "assets/css/main.css", "body { margin: 0; }\n")
    write_file(root, "assets/js/app.js", "console.log('app');\n")
    write_file(root, "assets/js/vendor/jquery.js", "/* jquery */\n")
    write_file(root, "view/icons/favicon.ico")
    write_file(root, ".hidden/secret.html", "secret")
    return root.resolve()


@pytest.fixture
def composer(site_root: Path) -> PageComposer:
    composer = PageComposer(site_root)
    composer.set_group_path("css", "assets/css")
    composer.set_group_path("js", "assets/js")
    composer.set_vars({"heading": "Welcome", "site_name": "Acme"})
    return composer


@pytest.fixture
def sample_config(site_root: Path) -> Path:
    """
    Write a site config next to the document root and return its path.
    """
    config_text = textwrap.dedent(
        """
        document_root = "site"
        outer = "page.html"

        [paths]
        html = "templates"
        css = "assets/css"
        js = "assets/js"

        [vars]
        heading = "Welcome"
        site_name = "Acme"

        [[head]]
        kind = "meta"
        value = { name = "charset", content = "utf-8" }

        [[head]]
        kind = "js"
        value = "app.js"
        """
    ).strip()
    path = site_root.parent / "site.toml"
    path.write_text(config_text + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_file():
    return write_file
