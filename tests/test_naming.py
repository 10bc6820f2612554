import pytest

from frontend import run_frontend
from rules.naming import avoid_capture, get_namespace_identifier, is_valid_identifier


@pytest.mark.parametrize(
    "module_name, expected",
    [
        ("react", "React"),
        ("react-router-dom", "ReactRouterDOM"),
        ("lodash", "_"),
        ("jquery", "$"),
        ("path", "path"),
        ("node:path", "nodePath"),
        ("node:fs/promises", "promises"),
        ("@angular/core/", "core"),
        ("./utils/string-helpers.js", "stringHelpers"),
        ("my_lib", "myLib"),
        ("2d-array", "_2dArray"),
        ("a.b.c", "a"),
    ],
)
def test_get_namespace_identifier(module_name, expected):
    assert get_namespace_identifier(module_name) == expected


def test_special_cases_match_exactly():
    assert get_namespace_identifier("react/jsx-runtime") == "jsxRuntime"


def _root_scope(source: str):
    result = run_frontend(source)
    assert result.analysis is not None
    return result.analysis.root_scope


def test_avoid_capture_keeps_free_name():
    assert avoid_capture("fs", _root_scope("const x = 1;")) == "fs"


def test_avoid_capture_skips_outer_and_nested_bindings():
    scope = _root_scope("const fs = 1;\nfunction f() { let fs_ = 2; return fs_; }\n")
    assert avoid_capture("fs", scope) == "fs__"


def test_avoid_capture_checks_enclosing_chain():
    result = run_frontend("const fs = 1;\nfunction f() { return 1; }\n")
    function_scope = result.analysis.root_scope.children[0]
    assert avoid_capture("fs", function_scope) == "fs_"


def test_avoid_capture_skips_taken_globals():
    assert avoid_capture("window", _root_scope(""), {"window"}) == "window_"


def test_avoid_capture_suffixes_reserved_words():
    assert avoid_capture("class", _root_scope("")) == "class_"
    assert is_valid_identifier("class_")


def test_avoid_capture_gives_up_on_unusable_names():
    assert avoid_capture("foo-", _root_scope("")) is None
