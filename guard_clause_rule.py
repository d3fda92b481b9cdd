from base_rule import BaseRule
from pattern_classifiers import FUNCTION_KINDS, wrapping_conditional


class RequireGuardClausesRule(BaseRule):
    """
    Flags functions whose whole body is a single `if` with no `else`.
    """

    meta = {
        "name": "require-guard-clauses",
        "type": "suggestion",
        "description": (
            "Require guard clauses by forbidding a single if-statement that wraps the entire function body."
        ),
        "messages": {
            "requireGuardClause": (
                "Avoid wrapping the entire function body in an if. Use a guard clause / early return instead."
            ),
        },
        "schema": {},
    }

    def create(self, context):
        def check_function_like(node):
            conditional = wrapping_conditional(node)
            if conditional is None:
                return
            context.report(conditional, "requireGuardClause")

        return {kind: check_function_like for kind in FUNCTION_KINDS}
