from emitter import apply_fixes
from frontend import run_frontend
from rules import ImportStyleOptions, check_import_style
from rules.fixer import extract_specifiers, member_access

NAMESPACE_ONLY = {"path": {"namespace": True}, "m": {"namespace": True}}


def _options():
    return ImportStyleOptions(styles=NAMESPACE_ONLY, extend_default_styles=False)


def _violations(source: str, *, source_type: str = "module"):
    result = run_frontend(source, source_name="fix.js", source_type=source_type)
    assert result.parse.errors == []
    return check_import_style(result, _options())


def _fix(source: str, *, source_type: str = "module") -> str:
    return apply_fixes(source, _violations(source, source_type=source_type)).output


def _fix_until_stable(source: str, *, source_type: str = "module") -> str:
    for _ in range(10):
        result = apply_fixes(source, _violations(source, source_type=source_type))
        if not result.changed:
            break
        source = result.output
    return source


# ------------------------------------------------------------ static imports


def test_default_specifier_becomes_namespace_member():
    source = "import { default as x } from 'm';\nx();\n"
    assert _fix(source) == "import * as m from 'm';\nm.default();\n"


def test_namespace_name_avoids_existing_binding():
    source = "import { default as x } from 'm';\nconst m = 1;\nx(m);\n"
    assert _fix(source) == "import * as m_ from 'm';\nconst m = 1;\nm_.default(m);\n"


def test_namespace_name_avoids_nested_binding():
    source = (
        "import { join } from 'path';\n"
        "function f() { const path = 1; return join(path); }\n"
    )
    assert _fix(source) == (
        "import * as path_ from 'path';\n"
        "function f() { const path = 1; return path_.join(path); }\n"
    )


def test_shadowed_references_are_left_alone():
    source = "import { join } from 'path';\nfunction f(join) { return join; }\njoin('x');\n"
    assert _fix(source) == (
        "import * as path from 'path';\nfunction f(join) { return join; }\npath.join('x');\n"
    )


def test_shorthand_property_keeps_its_key():
    source = "import { join } from 'path';\nexport const api = { join };\n"
    assert _fix(source) == "import * as path from 'path';\nexport const api = { join: path.join };\n"


def test_existing_namespace_specifier_is_reused():
    source = "import def, * as ns from 'path';\ndef(ns);\n"
    assert _fix(source) == "import * as ns from 'path';\nns.default(ns);\n"


def test_local_named_like_namespace_is_reused_without_rewrites():
    source = "import { path } from 'path';\npath.join('a');\n"
    (violation,) = _violations(source)
    assert violation.fix.namespace == "path"
    assert violation.fix.references == ()
    assert apply_fixes(source, [violation]).output == (
        "import * as path from 'path';\npath.join('a');\n"
    )


def test_exported_binding_declines_fix():
    (violation,) = _violations("import { join } from 'path';\nexport { join };\n")
    assert violation.fix is None


def test_side_effect_import_has_nothing_to_rewrite():
    (violation,) = _violations("import 'path';\n")
    assert violation.fix is None


def test_same_module_imported_twice_gets_distinct_names():
    source = "import { join } from 'path';\nimport { sep } from 'path';\njoin(sep);\n"
    first_pass = apply_fixes(source, _violations(source))
    assert len(first_pass.applied) == 1 and len(first_pass.skipped) == 1
    assert first_pass.output == (
        "import * as path from 'path';\nimport { sep } from 'path';\npath.join(sep);\n"
    )
    assert _fix_until_stable(source) == (
        "import * as path from 'path';\nimport * as path_ from 'path';\npath.join(path_.sep);\n"
    )


# ----------------------------------------------------------------- require


def test_require_destructuring_becomes_whole_module_binding():
    source = "const { join, sep } = require('path');\nconsole.log(join('a', sep));\n"
    assert _fix(source, source_type="script") == (
        "const path = require('path');\nconsole.log(path.join('a', path.sep));\n"
    )


def test_require_keeps_declaration_kind_and_missing_semicolon():
    source = "var { join } = require('path')\njoin()\n"
    assert _fix(source, source_type="script") == "var path = require('path')\npath.join()\n"


def test_default_key_is_rewritten_as_default_member():
    source = "const { default: p } = require('m');\np();\n"
    assert _fix(source, source_type="script") == "const m = require('m');\nm.default();\n"


def test_multiple_declarators_decline_fix():
    (violation,) = _violations(
        "const { join } = require('path'), x = 1;\n", source_type="script"
    )
    assert violation.fix is None


def test_reassigned_binding_declines_fix():
    (violation,) = _violations(
        "let { join } = require('path');\njoin = null;\n", source_type="script"
    )
    assert violation.fix is None


def test_defaults_in_pattern_decline_fix():
    (violation,) = _violations(
        "const { join = null } = require('path');\n", source_type="script"
    )
    assert violation.fix is None


def test_with_statement_declines_fix():
    source = "const { join } = require('path');\nwith (obj) { join(); }\n"
    (violation,) = _violations(source, source_type="script")
    assert violation.fix is None


def test_same_module_required_twice_gets_distinct_names():
    source = "const { join } = require('path');\nconst { sep } = require('path');\njoin(sep);\n"
    first_pass = apply_fixes(source, _violations(source, source_type="script"))
    assert first_pass.output == (
        "const path = require('path');\nconst { sep } = require('path');\npath.join(sep);\n"
    )
    assert _fix_until_stable(source, source_type="script") == (
        "const path = require('path');\nconst path_ = require('path');\npath.join(path_.sep);\n"
    )


def test_rest_capture_is_left_untouched():
    source = "const { join, ...rest } = require('path');\njoin(rest);\n"
    (violation,) = _violations(source)
    assert [ref.text for ref in violation.fix.references] == ["path.join"]
    assert apply_fixes(source, [violation]).output == (
        "const path = require('path');\npath.join(rest);\n"
    )


# ------------------------------------------------------------ dynamic import


def test_awaited_dynamic_import_becomes_namespace_binding():
    source = "async function f() { const { join } = await import('path'); return join; }\n"
    assert _fix(source) == (
        "async function f() { const path = await import('path'); return path.join; }\n"
    )


def test_awaited_dynamic_import_keeps_declaration_kind():
    source = "async function f() {\n  let { sep } = await import('path')\n  return sep\n}\n"
    assert _fix(source) == (
        "async function f() {\n  let path = await import('path')\n  return path.sep\n}\n"
    )


# ----------------------------------------------------------------- plumbing


def test_fixed_output_is_clean():
    source = "import { join } from 'path';\njoin('a');\n"
    fixed = _fix(source)
    assert _violations(fixed) == []
    assert _fix(fixed) == fixed


def test_extract_specifiers_rejects_nested_patterns():
    result = run_frontend("const { a: { b } } = require('m');", analyze=False, source_type="script")
    declarator = result.parse.ast["body"][0]["declarations"][0]
    assert extract_specifiers(declarator) is None


def test_member_access_quotes_non_identifier_names():
    assert member_access("ns", "default") == "ns.default"
    assert member_access("ns", "a-b") == 'ns["a-b"]'
