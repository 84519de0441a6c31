"""Tests for the syntax auto-repair passes and the safe-apply pipeline."""

import pytest

from response2files.repair.auto_repair import (
    RepairPipeline,
    aggressive_fix,
    quick_validate,
    safe_apply,
)
from response2files.repair.import_merge import merge_duplicate_imports, parse_imports
from response2files.repair.syntax_repair import (
    fix_arrow_functions,
    fix_attribute_quoting,
    fix_bracket_balance,
    fix_conditional_expressions,
    fix_declarations,
)
from response2files.repair.tag_balance import fix_tag_balance, iter_tags


class TestArrowFunctions:
    def test_missing_arrow_after_assignment(self):
        assert fix_arrow_functions("const onClick = () { doThing(); }") == (
            "const onClick = () => { doThing(); }"
        )

    def test_missing_arrow_with_return_type(self):
        assert fix_arrow_functions("const handler = (e: Event): void {") == (
            "const handler = (e: Event): void => {"
        )

    def test_missing_arrow_in_callback(self):
        code = "items.map((item) {\n  return item.id;\n})"
        assert fix_arrow_functions(code) == "items.map((item) => {\n  return item.id;\n})"

    def test_hybrid_function(self):
        code = "function App() => {\n  return null;\n}"
        assert fix_arrow_functions(code) == "function App() {\n  return null;\n}"

    def test_spaced_arrow(self):
        assert fix_arrow_functions("const f = (a, b) = > a + b;") == "const f = (a, b) => a + b;"

    def test_inside_string_untouched(self):
        code = "const s = 'x = () {';"
        assert fix_arrow_functions(code) == code


class TestAttributeQuoting:
    def test_missing_equals(self):
        assert fix_attribute_quoting('<div className"card">x</div>') == '<div className="card">x</div>'

    def test_event_handler_string(self):
        assert fix_attribute_quoting('<button onClick="handleClick">Go</button>') == (
            "<button onClick={handleClick}>Go</button>"
        )

    def test_style_string(self):
        assert fix_attribute_quoting('<p style="color: red; font-size: 12px">Hi</p>') == (
            "<p style={{ color: 'red', fontSize: '12px' }}>Hi</p>"
        )

    def test_double_equals(self):
        assert fix_attribute_quoting('<div id=="main"></div>') == '<div id="main"></div>'

    def test_outside_tag_untouched(self):
        code = 'const a = b; const c = title"x";'
        assert fix_attribute_quoting(code) == code


class TestConditionalExpressions:
    def test_wraps_else_branch(self):
        code = "{isOpen ? <Modal /> : hasError && <Error />}"
        assert fix_conditional_expressions(code) == "{isOpen ? <Modal /> : (hasError && <Error />)}"

    def test_adds_missing_else(self):
        assert fix_conditional_expressions("{open ? <Modal />}") == "{open ? <Modal /> : null}"

    def test_adds_missing_else_after_element(self):
        assert fix_conditional_expressions("{open ? <div>Hi</div>}") == "{open ? <div>Hi</div> : null}"

    def test_complete_ternary_untouched(self):
        code = "{open ? <Modal /> : null}"
        assert fix_conditional_expressions(code) == code


class TestDeclarations:
    def test_doubled_colon(self):
        assert fix_declarations("const x: : number = 1;") == "const x: number = 1;"

    def test_trailing_comma_before_brace(self):
        assert fix_declarations("const o = { a: 1, }") == "const o = { a: 1 }"


class TestBracketBalance:
    def test_appends_closers(self):
        code = "function f() {\n  if (x) {\n    run();\n"
        assert fix_bracket_balance(code) == "function f() {\n  if (x) {\n    run();}}\n"

    def test_line_comment_gets_newline(self):
        assert fix_bracket_balance("call(a, // note") == "call(a, // note\n)"

    def test_open_string_untouched(self):
        code = 'foo("abc'
        assert fix_bracket_balance(code) == code

    def test_stray_closers_untouched(self):
        assert fix_bracket_balance("a)}") == "a)}"


class TestTagBalance:
    def test_closes_innermost_first(self):
        code = "return (\n  <div>\n    <span>Hi\n  );"
        assert fix_tag_balance(code) == "return (\n  <div>\n    <span>Hi</span></div>\n  );"

    def test_statements_after_last_tag(self):
        code = "<div>\n  <p>text\nconst x = 1;"
        assert fix_tag_balance(code) == code

    def test_void_element(self):
        code = '<div><img src="a.png"></div>'
        assert fix_tag_balance(code) == code

    def test_generics_are_not_tags(self):
        assert iter_tags("const a: Array<string> = [];") == []

    def test_closing_tag_after_text(self):
        tags = iter_tags("<div>Hello</div>")
        assert [(tag.name, tag.kind) for tag in tags] == [("div", "open"), ("div", "close")]
        assert fix_tag_balance("<div>Hello</div>;") == "<div>Hello</div>;"

    def test_arrow_inside_attribute(self):
        code = "<button onClick={() => a > b}>Go</button>"
        assert [tag.kind for tag in iter_tags(code)] == ["open", "close"]
        assert fix_tag_balance(code) == code


class TestMergeImports:
    def test_merges_named_imports(self):
        code = (
            "import { useState } from 'react';\n"
            "import { useEffect } from 'react';\n"
            "import Foo from './Foo';\n"
        )
        assert merge_duplicate_imports(code) == (
            "import { useState, useEffect } from 'react';\nimport Foo from './Foo';\n"
        )

    def test_merges_default_and_named(self):
        code = "import React from 'react';\nimport { useState } from \"react\";"
        assert merge_duplicate_imports(code) == "import React, { useState } from 'react';"

    def test_conflicting_defaults_untouched(self):
        code = "import A from 'x';\nimport B from 'x';"
        assert merge_duplicate_imports(code) == code

    def test_parse_imports(self):
        imports = parse_imports("import React, { useState, useEffect } from 'react';")
        assert imports[0].default == "React"
        assert imports[0].named == ["useState", "useEffect"]


class TestRepairPipeline:
    def test_aggressive_fix_records_passes(self):
        outcome = aggressive_fix("const f = () { return 1; }")
        assert outcome.changed
        assert outcome.commit() == "const f = () => { return 1; }"
        assert outcome.discard() == "const f = () { return 1; }"
        assert outcome.fixes_applied == ["Pass 1: Fixed arrow function syntax"]
        assert outcome.rounds == 2

    def test_custom_passes(self):
        outcome = RepairPipeline(passes=[("Upper", str.upper)], max_rounds=2).run("ab")
        assert outcome.code == "AB"
        assert outcome.fixes_applied == ["Pass 1: Upper"]


class TestQuickValidate:
    def test_valid(self):
        assert quick_validate("const a = { b: 1 };")

    def test_unbalanced(self):
        assert not quick_validate("const a = {")

    def test_bad_residue(self):
        assert not quick_validate("const f = (a) = > a")

    def test_residue_inside_string_ignored(self):
        assert quick_validate("const s = '= >';")


class TestSafeApply:
    def test_applies_valid_repair(self):
        assert safe_apply("const onClick = () { doThing(); }") == "const onClick = () => { doThing(); }"

    def test_unrelated_text_untouched(self):
        assert safe_apply("plain text without code") == "plain text without code"

    @pytest.mark.parametrize(
        "code",
        [
            "export default function App() {\n  return <div>Hello</div>;\n}",
            "class A extends B {\n  render() {\n    return <span>ok</span>;\n  }\n}",
            "export const A = () => <p>Hi there</p>;",
            "const items: Array<string> = [];\nexport const L = () => <ul>{items.length}</ul>;",
        ],
    )
    def test_valid_component_untouched(self, code):
        assert safe_apply(code) == code

    def test_reverts_when_validation_fails(self):
        code = "const f = () { run(); }}"
        assert safe_apply(code) == code
