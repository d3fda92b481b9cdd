import json
import os
import sys
import time

from ast_loader import LoadTreeError, load_tree
from rule_registry import ALL_RULE_NAMES, PLUGIN_NAME, build_engine


def _round_ms(value):
    return round(max(0.0, float(value)), 3)


def _timing_ms(load_ms, analysis_ms):
    return {
        "load": _round_ms(load_ms),
        "analysis": _round_ms(analysis_ms),
        "total": _round_ms(load_ms + analysis_ms),
    }


def _summary(items):
    out = {"error": 0, "warning": 0}
    by_rule = {}
    for item in items:
        sev = item.get("severity", "warning")
        if sev not in out:
            sev = "warning"
        out[sev] += 1

        rule = item.get("rule")
        if rule:
            by_rule[rule] = by_rule.get(rule, 0) + 1

    out["total"] = out["error"] + out["warning"]
    out["by_rule"] = by_rule
    return out


def _item(diagnostic):
    return {
        "severity": diagnostic["severity"],
        "source": "rule",
        "rule": f"{PLUGIN_NAME}/{diagnostic['rule']}",
        "message_id": diagnostic["message_id"],
        "line": diagnostic["line"],
        "column": diagnostic["column"],
        "message": diagnostic["message"],
    }


def _pop_value(args, flag):
    """Removes `flag VALUE` from args; returns (args, value or None, error)."""
    if flag not in args:
        return args, None, None
    idx = args.index(flag)
    if idx + 1 >= len(args):
        return args, None, f"Missing value after {flag}."
    return args[:idx] + args[idx + 2 :], args[idx + 1], None


def _fail(error, json_mode):
    if json_mode:
        print(json.dumps({"ok": False, "error": error}))
    else:
        print(error)


def main():
    args = sys.argv[1:]
    json_mode = True
    if "--text" in args:
        json_mode = False
        args = [a for a in args if a != "--text"]

    debug = "--debug" in args
    args = [a for a in args if a != "--debug"]

    options = {}
    if "--allow-re-export" in args:
        options["export-code-last"] = {"allowReExport": True}
        args = [a for a in args if a != "--allow-re-export"]

    args, source_filename, error = _pop_value(args, "--source")
    if error:
        _fail(error, json_mode)
        return

    args, raw_rules, error = _pop_value(args, "--rules")
    if error:
        _fail(error + " (expected comma-separated rule names)", json_mode)
        return

    enabled_rules = None
    if raw_rules is not None:
        enabled_rules = [r.strip().lower() for r in raw_rules.split(",") if r.strip()]
        unknown = sorted({r for r in enabled_rules if r not in ALL_RULE_NAMES})
        if unknown:
            _fail(
                "Unknown rule(s): "
                + ", ".join(unknown)
                + ". Valid rules: "
                + ", ".join(sorted(ALL_RULE_NAMES))
                + ".",
                json_mode,
            )
            return

    selected_rules = sorted(set(enabled_rules) if enabled_rules else ALL_RULE_NAMES)

    files = args
    if not files:
        _fail("No files provided.", json_mode)
        return
    if source_filename is not None and len(files) > 1:
        _fail("--source can only be used with a single tree file.", json_mode)
        return

    engine = build_engine(selected_rules, options, debug=debug)

    overall_start = time.perf_counter()
    results = []

    for idx, filename in enumerate(files):
        display_name = os.path.basename(filename)

        load_start = time.perf_counter()
        try:
            program, source_text, binding_table = load_tree(filename, source_filename)
        except LoadTreeError as exc:
            load_ms = (time.perf_counter() - load_start) * 1000.0
            message = f"Failed to load {display_name}: {exc}"
            if not json_mode:
                if len(files) > 1:
                    print(f"=== {display_name} ===")
                print(message)
                if idx < len(files) - 1:
                    print()
                continue
            results.append(
                {
                    "file": display_name,
                    "path": os.path.realpath(filename),
                    "ok": False,
                    "error": message,
                    "items": [],
                    "summary": _summary([]),
                    "timing_ms": _timing_ms(load_ms, 0.0),
                    "rules": selected_rules,
                }
            )
            continue

        load_ms = (time.perf_counter() - load_start) * 1000.0

        analysis_start = time.perf_counter()
        diagnostics = engine.run(program, source_text, binding_table)
        analysis_ms = (time.perf_counter() - analysis_start) * 1000.0

        items = [_item(d) for d in diagnostics]
        timing = _timing_ms(load_ms, analysis_ms)

        if json_mode:
            results.append(
                {
                    "file": display_name,
                    "path": os.path.realpath(filename),
                    "ok": True,
                    "error": None,
                    "items": items,
                    "summary": _summary(items),
                    "timing_ms": timing,
                    "rules": selected_rules,
                }
            )
            continue

        if len(files) > 1:
            print(f"=== {display_name} ===")

        for item in items:
            prefix = "[ERROR]" if item["severity"] == "error" else "[WARN]"
            location = f", line {item['line']}" if isinstance(item["line"], int) else ""
            print(f"{prefix} {item['message']} ({item['rule']}{location})")

        print(
            f"[timing] load: {timing['load']} ms, analysis: {timing['analysis']} ms, "
            f"total: {timing['total']} ms."
        )

        if idx < len(files) - 1:
            print()

    if json_mode:
        total_ms = _round_ms((time.perf_counter() - overall_start) * 1000.0)
        print(
            json.dumps(
                {
                    "ok": True,
                    "results": results,
                    "timing_ms": {"total": total_ms},
                    "rules": selected_rules,
                }
            )
        )


if __name__ == "__main__":
    main()
