from base_rule import BaseRule


class NoSwitchRule(BaseRule):
    meta = {
        "name": "no-switch",
        "type": "suggestion",
        "description": "Disallow switch statements.",
        "messages": {"noSwitch": "Do not use switch statements."},
        "schema": {},
    }

    def create(self, context):
        return {"SwitchStatement": lambda node: context.report(node, "noSwitch")}


class NoElseRule(BaseRule):
    meta = {
        "name": "no-else",
        "type": "suggestion",
        "description": "Disallow else branches.",
        "messages": {"noElse": "Do not use else branches. Return early instead."},
        "schema": {},
    }

    def create(self, context):
        def check_if(node):
            alternate = node.get("alternate")
            if alternate is None:
                return
            context.report(alternate, "noElse")

        return {"IfStatement": check_if}
