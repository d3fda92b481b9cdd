import json
import subprocess
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path

from estree_builders import (
    call,
    const,
    export_all,
    export_default,
    export_named,
    func_decl,
    ident,
    lit,
    member,
    obj,
    program,
    prop,
    ret,
    try_,
    with_spans,
)


ROOT = Path(__file__).resolve().parents[1]
ENGINE = ROOT / "lint_engine.py"
VENV_PY = ROOT / ".venv" / "bin" / "python"
PYTHON = VENV_PY if VENV_PY.exists() else Path(sys.executable)


def run_engine(tree, filename="fixture.ts.json", source=None, rules=None, extra_args=()):
    with tempfile.TemporaryDirectory() as td:
        tree_path = Path(td) / filename
        tree_path.write_text(tree if isinstance(tree, str) else json.dumps(tree), encoding="utf-8")
        if source is not None:
            source_path = Path(td) / filename[: -len(".json")]
            source_path.write_text(textwrap.dedent(source), encoding="utf-8")

        cmd = [str(PYTHON), str(ENGINE)]
        if rules is not None:
            cmd.extend(["--rules", ",".join(rules)])
        cmd.extend(extra_args)
        cmd.append(str(tree_path))

        proc = subprocess.run(
            cmd,
            cwd=ROOT,
            capture_output=True,
            text=True,
            check=False,
        )
        if proc.returncode != 0:
            raise RuntimeError(f"Engine failed:\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

        if "--text" in extra_args:
            return proc.stdout, None

        payload = json.loads(proc.stdout)
        if payload.get("ok") is not True:
            return payload, None

        results = payload.get("results", [])
        if len(results) != 1:
            raise RuntimeError(f"Expected one result entry, got {len(results)}")

        return payload, results[0]


def _message_ids(result):
    return [item.get("message_id") for item in result.get("items", [])]


SWALLOWED_SOURCE = """\
export function safeParse(json) {
  try {
    return JSON.parse(json);
  } catch (err) {
    // ignore: bad input
  }
}
"""


def _swallowed_catch_tree():
    catch_text = "{\n    // ignore: bad input\n  }"
    tree = program(
        export_named(
            func_decl(
                "safeParse",
                ["json"],
                try_([ret(call(member(ident("JSON"), ident("parse")), ident("json")))], ident("err"), []),
            )
        )
    )
    handler_block = tree["body"][0]["declaration"]["body"]["body"][0]["handler"]["body"]
    start = SWALLOWED_SOURCE.index(catch_text)
    handler_block["start"] = start
    handler_block["end"] = start + len(catch_text)
    return with_spans(tree)


class RegressionRulesTest(unittest.TestCase):
    def test_comment_only_catch_is_reported_with_line(self):
        _payload, result = run_engine(_swallowed_catch_tree(), "fail-swallowed-catch.js.json", SWALLOWED_SOURCE)

        self.assertEqual(_message_ids(result), ["noSwallowedCatch"])
        item = result["items"][0]
        self.assertEqual(item["rule"], "inhuman/no-swallowed-catch")
        self.assertEqual(item["severity"], "error")
        self.assertEqual(item["line"], 4)
        self.assertEqual(result["summary"]["error"], 1)

    def test_non_primitive_const_at_top_is_reported(self):
        tree = with_spans(
            program(
                export_named(const("CONFIG", obj(prop(ident("retries"), lit(3))))),
                func_decl("compute", ["value"], ret(call(member(ident("value"), ident("trim"))))),
                export_named(
                    func_decl(
                        "format",
                        ["value"],
                        const("trimmed", call("compute", ident("value"))),
                        ret(ident("trimmed")),
                    )
                ),
            )
        )
        _payload, result = run_engine(tree)

        self.assertEqual(_message_ids(result), ["exportsLast"])
        self.assertEqual(result["summary"]["by_rule"], {"inhuman/export-code-last": 1})

    def test_primitive_constants_at_top_pass(self):
        tree = with_spans(
            program(
                export_named(const("VERSION", lit("1.0.0"))),
                export_named(const("DEFAULT_TIMEOUT_MS", lit(1000))),
                export_named(const("IS_ENABLED", lit(True))),
                export_named(const("NOTHING", lit(None))),
                func_decl("compute", ["value"], ret(call(member(ident("value"), ident("trim"))))),
                export_named(
                    func_decl(
                        "format",
                        ["value"],
                        const("trimmed", call("compute", ident("value"))),
                        ret(ident("trimmed")),
                    )
                ),
            )
        )
        _payload, result = run_engine(tree)

        self.assertEqual(result["items"], [])
        self.assertEqual(result["summary"]["total"], 0)

    def test_allow_re_export_flag(self):
        tree = with_spans(program(export_all("./shared"), func_decl("local", [])))

        _payload, result = run_engine(tree)
        self.assertEqual(_message_ids(result), ["exportsLast"])

        _payload, result = run_engine(tree, extra_args=["--allow-re-export"])
        self.assertEqual(result["items"], [])

    def test_rule_filter_limits_output(self):
        wrapper = func_decl("f", ["a"], ret(call("g", ident("a"))))
        tree = with_spans(program(export_default(wrapper)))

        payload, result = run_engine(tree, rules=["no-empty-wrappers"])
        self.assertEqual(_message_ids(result), ["noEmptyWrapper"])
        self.assertEqual(payload["rules"], ["no-empty-wrappers"])

        _payload, result = run_engine(tree, rules=["no-switch"])
        self.assertEqual(result["items"], [])

    def test_envelope_with_binding_table(self):
        tree = with_spans(program(const("config", call("load")), export_default(ident("config"))))
        envelope = {
            "program": tree,
            "sourceText": None,
            "bindings": {"config": [{"start": 500, "end": 506, "kind": "reference"}]},
        }

        _payload, result = run_engine(json.dumps(envelope), rules=["export-code-last"])
        self.assertEqual(result["items"], [])

        _payload, result = run_engine(tree, rules=["export-code-last"])
        self.assertEqual(_message_ids(result), ["noDefaultExportAlias"])

    def test_invalid_tree_reports_load_error(self):
        payload, result = run_engine("{not json", "broken.ts.json")
        self.assertTrue(payload["ok"])
        self.assertIsNotNone(result)
        self.assertFalse(result["ok"])
        self.assertIn("Failed to load broken.ts.json", result["error"])

        payload, result = run_engine(json.dumps({"type": "ExpressionStatement"}), "stray.ts.json")
        self.assertFalse(result["ok"])
        self.assertIn("does not hold an ESTree Program", result["error"])

    def test_unknown_rule_is_rejected(self):
        payload, result = run_engine(with_spans(program()), rules=["no-such-rule"])
        self.assertIsNone(result)
        self.assertFalse(payload["ok"])
        self.assertIn("Unknown rule(s): no-such-rule", payload["error"])

    def test_text_mode(self):
        output, _ = run_engine(
            _swallowed_catch_tree(), "fail-swallowed-catch.js.json", SWALLOWED_SOURCE, extra_args=["--text"]
        )
        self.assertIn("[ERROR] Do not swallow errors in catch blocks.", output)
        self.assertIn("inhuman/no-swallowed-catch, line 4", output)
        self.assertIn("[timing] load:", output)


if __name__ == "__main__":
    unittest.main()
