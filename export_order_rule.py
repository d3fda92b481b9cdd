from base_rule import BaseRule
from pattern_classifiers import (
    default_exported_name,
    is_exempt_export,
    is_export_node,
    is_local_alias_export,
    is_local_named_export_list,
    is_type_only_export,
)
from usage_resolver import build_usage_resolver, collect_declarations


class ExportCodeLastRule(BaseRule):
    """
    Keeps the public surface at the bottom of a file: declarations first,
    then exports. Type-only exports and primitive constants may sit
    anywhere; re-exports may too when `allowReExport` is set.

    Also rejects exports that only add indirection:
    - `export { foo }` for local values
    - `export const x = y` / `export const x = obj.y`
    - `export default name` unless `name` is a variable also used locally
    """

    meta = {
        "name": "export-code-last",
        "type": "layout",
        "description": "Require value exports at the bottom of the file, but allow type-only exports anywhere.",
        "messages": {
            "exportsLast": (
                "Value export statements should appear at the end of the file (type-only exports are exempt)."
            ),
            "noExportSpecifiers": (
                "Do not use `export { ... }` for local values. "
                "Export the declaration directly at the bottom of the file instead."
            ),
            "noExportAlias": (
                "Do not export local aliases like `export const x = y`. "
                "Export the declaration directly at the bottom of the file instead."
            ),
            "noDefaultExportAlias": (
                "Do not default-export a local binding by name. Export the declaration directly instead."
            ),
        },
        "schema": {"allowReExport": bool},
    }

    def create(self, context):
        allow_re_export = context.options.get("allowReExport") is True

        def check_program(program):
            body = program.get("body") or []
            if not body:
                return

            reported = set()

            def report(node, message_id):
                reported.add(id(node))
                context.report(node, message_id)

            for node in body:
                if is_local_named_export_list(node) and not is_type_only_export(node):
                    report(node, "noExportSpecifiers")

            for node in body:
                if is_local_alias_export(node):
                    report(node, "noExportAlias")

            # Built per file so nothing is memoized across files.
            usage = build_usage_resolver(program, context.binding_table)
            declarations = collect_declarations(program)

            for node in body:
                name = default_exported_name(node)
                if name is None:
                    continue
                if self._is_used_variable(name, node, declarations, usage):
                    continue
                report(node, "noDefaultExportAlias")

            last_non_export = -1
            for index in range(len(body) - 1, -1, -1):
                if not is_export_node(body[index]):
                    last_non_export = index
                    break

            # A file of nothing but exports has nothing to reorder.
            if last_non_export == -1:
                return

            for node in body[:last_non_export]:
                if not is_export_node(node) or id(node) in reported:
                    continue
                if is_exempt_export(node, allow_re_export):
                    continue
                context.report(node, "exportsLast")

        return {"Program": check_program}

    def _is_used_variable(self, name, export, declarations, usage):
        found = declarations.get(name, [])
        # Functions and classes gain nothing from being exported by name.
        if any(d.kind in ("function", "class") for d in found):
            return False
        if not any(d.kind == "variable" for d in found):
            return False
        return usage.has_external_reference(name, excluded=(export,))
