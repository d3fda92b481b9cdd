from types import MappingProxyType

from ast_walker import node_span, walk_ast
from source_code import SourceCode


_NO_OPTIONS = MappingProxyType({})


def freeze_options(options):
    """
    Per-file options: {rule name: {option: value}}, read-only once built.
    """
    return MappingProxyType({name: MappingProxyType(dict(values or {})) for name, values in (options or {}).items()})


class RuleContext:
    """
    What one rule sees of one file: its options, the source text, the
    optional host binding table and the reporting sink.
    """

    def __init__(self, rule, options, source_code, binding_table, sink):
        self.rule = rule
        self.options = options
        self.source_code = source_code
        self.binding_table = binding_table
        self._sink = sink

    def report(self, node, message_id):
        messages = self.rule.meta["messages"]
        if message_id not in messages:
            raise KeyError(f"Rule '{self.rule.name}' has no message '{message_id}'")

        line, column = self.source_code.location(node)
        span = node_span(node)
        self._sink.append(
            {
                "rule": self.rule.name,
                "message_id": message_id,
                "message": messages[message_id],
                "severity": "error" if self.rule.meta.get("type") == "problem" else "warning",
                "line": line,
                "column": column,
                "start": span[0] if span else None,
                "end": span[1] if span else None,
            }
        )


class RuleEngine:
    """
    Runs a collection of rules over one file's ESTree program and collects
    their diagnostics.
    """

    def __init__(self, rules, options=None, *, debug=False):
        self.rules = rules
        self.options = options or {}
        self.debug = debug

    def run(self, program, source_text=None, binding_table=None):
        diagnostics = []
        source_code = SourceCode(source_text)
        options = freeze_options(self.options)

        handlers = {}
        for rule in self.rules:
            context = RuleContext(rule, options.get(rule.name, _NO_OPTIONS), source_code, binding_table, diagnostics)
            for kind, callback in (rule.create(context) or {}).items():
                handlers.setdefault(kind, []).append(callback)

        nodes = []
        walk_ast(program, nodes, debug=self.debug)

        for node in nodes:
            for callback in handlers.get(node.get("type"), ()):
                callback(node)

        def position_key(item, index):
            start = item.get("start")
            if isinstance(start, int):
                return (start, index)
            return (10**9, index)

        return [
            item for _, item in sorted(
                [(position_key(item, i), item) for i, item in enumerate(diagnostics)],
                key=lambda x: x[0],
            )
        ]
