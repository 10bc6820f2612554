import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

CASES = Path(__file__).parent / "cases"
SRC = Path(__file__).resolve().parent.parent / "src"


def _run_cli(args, cwd: Path):
    env = os.environ.copy()
    pythonpath = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(SRC) + (os.pathsep + pythonpath if pythonpath else "")
    result = subprocess.run(
        [sys.executable, "-m", "cli", *args],
        cwd=cwd,
        env=env,
        check=False,
        capture_output=True,
        text=True,
    )
    return result


def test_cli_reports_violations():
    result = _run_cli(["check", "tests/cases/module_import.js"], cwd=CASES.parent.parent)
    assert result.returncode == 1, result.stderr
    assert result.stdout.splitlines() == [
        "tests/cases/module_import.js:2:1: import-style: Use default import for module `path`."
    ]


def test_cli_clean_file_exits_zero(tmp_path):
    source = tmp_path / "clean.js"
    source.write_text("import path from 'path';\nimport { promisify } from 'util';\n", encoding="utf-8")
    result = _run_cli(["check", str(source)], cwd=tmp_path)
    assert result.returncode == 0, result.stderr
    assert result.stdout == ""


def test_cli_fix_rewrites_file_in_place(tmp_path):
    target = tmp_path / "namespace_fix.js"
    shutil.copy(CASES / "namespace_fix.js", target)
    result = _run_cli(
        ["check", str(target), "--fix", "--config", str(CASES / "styles.yaml")],
        cwd=tmp_path,
    )
    assert result.returncode == 0, result.stderr
    content = target.read_text(encoding="utf-8")
    assert content.startswith("import * as path from 'path';\n")
    assert "const read = promisify(path.join);" in content
    assert "return path.resolve(join(file));" in content
    assert "{ join: path.join, res: path.resolve }" in content


def test_cli_json_output(tmp_path):
    result = _run_cli(
        ["check", "tests/cases/module_import.js", "--format", "json"],
        cwd=CASES.parent.parent,
    )
    assert result.returncode == 1, result.stderr
    (report,) = json.loads(result.stdout)
    assert report["file"] == "tests/cases/module_import.js"
    assert report["module"] == "path"
    assert report["line"] == 2
    assert report["fixable"] is False


def test_cli_script_mode_checks_require(tmp_path):
    source = tmp_path / "loader.js"
    source.write_text("const { inspect } = require('util');\nrequire('chalk');\n", encoding="utf-8")
    result = _run_cli(["check", str(source), "--script"], cwd=tmp_path)
    assert result.returncode == 1, result.stderr
    assert "Use default import for module `chalk`." in result.stdout
    assert "util" not in result.stdout


def test_cli_rejects_bad_config(tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("checkEverything: true\n", encoding="utf-8")
    result = _run_cli(
        ["check", str(CASES / "module_import.js"), "--config", str(config)], cwd=tmp_path
    )
    assert result.returncode == 1
    assert "ERROR" in result.stderr


def test_cli_missing_input(tmp_path):
    result = _run_cli(["check", str(tmp_path / "absent.js")], cwd=tmp_path)
    assert result.returncode == 1
    assert "Input file not found" in result.stderr
