from pathlib import Path

from emitter import apply_fixes
from frontend import run_frontend
from rules import ImportStyle, RewritePlan, StatementKind, TextEdit, Violation, load_options
from rules import check_import_style

CASES = Path(__file__).parent / "cases"


def _violation(plan):
    return Violation(
        node={},
        kind=StatementKind.STATIC_IMPORT,
        module_name="m",
        allowed_styles=(ImportStyle.NAMESPACE,),
        actual_styles=frozenset({ImportStyle.NAMED}),
        message="Use namespace import for module `m`.",
        line=1,
        column=0,
        fix=plan,
    )


def test_edits_of_a_plan_apply_together():
    source = "import { a } from 'm';\na(a);\n"
    plan = RewritePlan(
        namespace="m",
        declaration=TextEdit(0, 22, "import * as m from 'm';"),
        references=(TextEdit(23, 24, "m.a"), TextEdit(25, 26, "m.a")),
    )
    result = apply_fixes(source, [_violation(plan)])
    assert result.output == "import * as m from 'm';\nm.a(m.a);\n"
    assert result.changed
    assert result.skipped == []


def test_overlapping_plan_is_deferred_whole():
    source = "abcdef"
    first = _violation(RewritePlan("x", TextEdit(0, 2, "XY"), (TextEdit(4, 5, "E"),)))
    second = _violation(RewritePlan("y", TextEdit(2, 3, "c"), (TextEdit(4, 6, "zz"),)))
    result = apply_fixes(source, [second, first])
    assert result.output == "XYcdEf"
    assert result.applied == [first]
    assert result.skipped == [second]


def test_violations_without_fix_are_ignored():
    result = apply_fixes("import 'm';", [_violation(None)])
    assert result.output == "import 'm';"
    assert not result.changed


def test_fix_case_file_end_to_end():
    source = (CASES / "namespace_fix.js").read_text(encoding="utf-8")
    options = load_options(CASES / "styles.yaml")
    frontend_result = run_frontend(source, source_name="namespace_fix.js")
    violations = check_import_style(frontend_result, options)
    assert [v.module_name for v in violations] == ["path"]

    result = apply_fixes(source, violations)
    assert result.output == (
        "import * as path from 'path';\n"
        "import { promisify } from 'util';\n"
        "\n"
        "const read = promisify(path.join);\n"
        "\n"
        "export function locate(file) {\n"
        "  const join = (a) => a;\n"
        "  return path.resolve(join(file));\n"
        "}\n"
        "\n"
        "export const api = { join: path.join, res: path.resolve };\n"
    )
