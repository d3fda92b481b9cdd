from rule_engine import RuleEngine

from guard_clause_rule import RequireGuardClausesRule
from swallowed_catch_rule import NoSwallowedCatchRule
from export_order_rule import ExportCodeLastRule
from empty_wrapper_rule import NoEmptyWrappersRule
from branching_rules import NoElseRule, NoSwitchRule


PLUGIN_NAME = "inhuman"

RULES = {
    "require-guard-clauses": RequireGuardClausesRule,
    "no-swallowed-catch": NoSwallowedCatchRule,
    "export-code-last": ExportCodeLastRule,
    "no-empty-wrappers": NoEmptyWrappersRule,
    # Re-exposed as-is from the branching rule pack.
    "no-switch": NoSwitchRule,
    "no-else": NoElseRule,
}

ALL_RULE_NAMES = set(RULES)


def plugin():
    return {
        "meta": {"name": PLUGIN_NAME},
        "rules": {name: rule_cls() for name, rule_cls in RULES.items()},
    }


def _normalized_rules(enabled_rules):
    if not enabled_rules:
        return set(ALL_RULE_NAMES)
    unknown = sorted(set(enabled_rules) - ALL_RULE_NAMES)
    if unknown:
        raise ValueError(f"Unknown rule(s): {', '.join(unknown)}")
    return set(enabled_rules)


def _validate_options(options):
    for name, values in (options or {}).items():
        if name not in RULES:
            raise ValueError(f"Options given for unknown rule '{name}'")
        schema = RULES[name].meta["schema"]
        for key, value in (values or {}).items():
            if key not in schema:
                raise ValueError(f"Rule '{name}' has no option '{key}'")
            if not isinstance(value, schema[key]):
                raise ValueError(f"Option '{key}' of rule '{name}' must be {schema[key].__name__}")


def build_engine(enabled_rules=None, options=None, *, debug=False):
    names = _normalized_rules(enabled_rules)
    _validate_options(options)
    rules = [rule_cls() for name, rule_cls in RULES.items() if name in names]
    return RuleEngine(rules, options, debug=debug)
