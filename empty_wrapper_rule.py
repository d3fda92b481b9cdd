from base_rule import BaseRule
from pattern_classifiers import FUNCTION_KINDS, is_exported_function, is_pass_through_call


class NoEmptyWrappersRule(BaseRule):
    """
    Flags exported functions that only forward their parameters, in order,
    to a single other call.
    """

    meta = {
        "name": "no-empty-wrappers",
        "type": "suggestion",
        "description": "Disallow exported empty wrapper functions that only pass through to another call.",
        "messages": {
            "noEmptyWrapper": "Do not export empty wrapper functions. Export the implementation directly instead.",
        },
        "schema": {},
    }

    def create(self, context):
        def check_function_like(node):
            if not is_exported_function(node):
                return
            if not is_pass_through_call(node):
                return
            context.report(node, "noEmptyWrapper")

        return {kind: check_function_like for kind in FUNCTION_KINDS}
