from pathlib import Path

from typer.testing import CliRunner

from nestview import cli


def test_render_writes_page_to_stdout(runner: CliRunner, sample_config: Path) -> None:
    result = runner.invoke(cli.app, ["render", "--config", str(sample_config)])

    assert result.exit_code == 0, result.output
    assert "<header>Override|Acme</header>" in result.stdout
    assert "<title>Nav Title</title>" in result.stdout
    assert "missing.html" in result.output


def test_render_with_vars_and_output_file(runner: CliRunner, sample_config: Path, tmp_path: Path) -> None:
    target = tmp_path / "out" / "index.html"

    result = runner.invoke(
        cli.app,
        ["render", "--config", str(sample_config), "--var", "heading=From CLI", "--output", str(target)],
    )

    assert result.exit_code == 0, result.output
    html = target.read_text(encoding="utf-8")
    assert "<main>From CLI</main>" in html
    assert "<header>Override|Acme</header>" in html


def test_render_unknown_outer_exits(runner: CliRunner, sample_config: Path) -> None:
    result = runner.invoke(cli.app, ["render", "--config", str(sample_config), "--outer", "nope.html"])

    assert result.exit_code == 1
    assert "Template not found" in result.output


def test_render_rejects_malformed_var(runner: CliRunner, sample_config: Path) -> None:
    result = runner.invoke(cli.app, ["render", "--config", str(sample_config), "--var", "novalue"])

    assert result.exit_code != 0


def test_resolve_prints_path(runner: CliRunner, site_root: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["resolve", "main.css", "--root", str(site_root), "--dir", "assets", "--relative"],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "/assets/css/main.css"


def test_resolve_uses_config_groups(runner: CliRunner, sample_config: Path, site_root: Path) -> None:
    result = runner.invoke(cli.app, ["resolve", "header.html", "--config", str(sample_config), "--group", "html"])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == str(site_root / "templates" / "partials" / "header.html")


def test_resolve_not_found_exits(runner: CliRunner, site_root: Path) -> None:
    result = runner.invoke(cli.app, ["resolve", "ghost.html", "--root", str(site_root)])

    assert result.exit_code == 1
    assert "Not found" in result.output


def test_head_prints_configured_entries(runner: CliRunner, sample_config: Path) -> None:
    result = runner.invoke(cli.app, ["head", "--config", str(sample_config)])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ['<meta charset="utf-8">', '<script src="/assets/js/app.js"></script>']


def test_bad_config_reports_error(runner: CliRunner, tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text('document_root = "missing"\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["render", "--config", str(path)])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "nestview" in result.stdout
