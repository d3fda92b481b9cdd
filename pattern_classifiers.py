FUNCTION_KINDS = ("FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression")

EXPORT_KINDS = {"ExportAllDeclaration", "ExportDefaultDeclaration", "ExportNamedDeclaration"}

_EARLY_EXIT_KINDS = {"ReturnStatement", "ThrowStatement"}

# Layers peeled off before looking for a call: `await f()`, `a?.f()`, `(f())`.
_CALL_WRAPPERS = {
    "AwaitExpression": "argument",
    "ChainExpression": "expression",
    "ParenthesizedExpression": "expression",
}

_GROUPING_WRAPPERS = {
    "ChainExpression": "expression",
    "ParenthesizedExpression": "expression",
}

_NUMERIC_UNARY_OPERATORS = {"+", "-", "~"}


def unwrap_expression(node, wrappers=_CALL_WRAPPERS):
    cur = node
    while cur is not None and cur.get("type") in wrappers:
        cur = cur.get(wrappers[cur["type"]])
    return cur


def is_early_exit(node):
    if node is None:
        return False

    if node.get("type") in _EARLY_EXIT_KINDS:
        return True

    if node.get("type") == "BlockStatement":
        body = node.get("body") or []
        return len(body) == 1 and is_early_exit(body[0])

    return False


def is_negated_condition(node):
    return node is not None and node.get("type") == "UnaryExpression" and node.get("operator") == "!"


def block_statements(function):
    """
    Statements of a function's block body, or None for expression-bodied
    arrows and bodiless declarations.
    """
    body = function.get("body")
    if body is None or body.get("type") != "BlockStatement":
        return None
    return body.get("body") or []


def wrapping_conditional(function):
    """
    Returns the `if` that wraps a function's entire body, or None.

    `if (!x) return;` is a real guard clause and is not returned.
    """
    statements = block_statements(function)
    if statements is None or len(statements) != 1:
        return None

    only = statements[0]
    if only.get("type") != "IfStatement":
        return None
    if only.get("alternate") is not None:
        return None

    if is_negated_condition(only.get("test")) and is_early_exit(only.get("consequent")):
        return None

    return only


def is_wrapper_conditional(function):
    return wrapping_conditional(function) is not None


def call_from_statement(statement):
    if statement is None:
        return None

    kind = statement.get("type")
    if kind == "ExpressionStatement":
        expr = unwrap_expression(statement.get("expression"))
    elif kind == "ReturnStatement":
        expr = unwrap_expression(statement.get("argument"))
    else:
        return None

    if expr is not None and expr.get("type") == "CallExpression":
        return expr
    return None


def _is_identifier(node, name=None):
    if node is None or node.get("type") != "Identifier":
        return False
    return name is None or node.get("name") == name


def _forwards_in_order(names, args):
    for name, arg in zip(names, args):
        if not _is_identifier(arg, name):
            return False
    return True


def is_pass_through_call(function):
    """
    True when a function body is one call that receives the function's own
    parameters, unchanged and in order.
    """
    statements = block_statements(function)
    if statements is None or len(statements) != 1:
        return False

    call = call_from_statement(statements[0])
    if call is None:
        return False

    args = call.get("arguments") or []
    names = []
    rest_name = None

    for param in function.get("params") or []:
        if rest_name is not None:
            return False
        if _is_identifier(param):
            names.append(param["name"])
            continue
        if param.get("type") == "RestElement" and _is_identifier(param.get("argument")):
            rest_name = param["argument"]["name"]
            continue
        # Destructuring and defaulted parameters do more than forward.
        return False

    if rest_name is None:
        return len(args) == len(names) and _forwards_in_order(names, args)

    if len(args) != len(names) + 1:
        return False
    if not _forwards_in_order(names, args):
        return False

    last = args[-1]
    return last.get("type") == "SpreadElement" and _is_identifier(last.get("argument"), rest_name)


def _is_literal(node):
    return node is not None and node.get("type") == "Literal"


def _is_bigint_literal(node):
    return _is_literal(node) and node.get("bigint") is not None


def _is_numeric_literal(node):
    if not _is_literal(node):
        return False
    value = node.get("value")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return True
    return _is_bigint_literal(node)


def _is_boolean_literal(node):
    return _is_literal(node) and isinstance(node.get("value"), bool)


def _is_primitive_value(node):
    if node.get("regex") is not None:
        return False
    value = node.get("value")
    # JSON has no bigint, so bigint literals arrive with a null value.
    return value is None or isinstance(value, (str, int, float, bool))


def is_primitive_literal(node):
    node = unwrap_expression(node, _GROUPING_WRAPPERS)
    if node is None:
        return False

    kind = node.get("type")

    if kind == "TemplateLiteral":
        return not node.get("expressions")

    if kind == "Literal":
        return _is_primitive_value(node)

    if kind == "UnaryExpression":
        argument = node.get("argument")
        operator = node.get("operator")
        if operator in _NUMERIC_UNARY_OPERATORS:
            return _is_numeric_literal(argument)
        if operator == "!":
            return _is_boolean_literal(argument)

    return False


def is_alias_expression(node):
    node = unwrap_expression(node, _GROUPING_WRAPPERS)
    return node is not None and node.get("type") in ("Identifier", "MemberExpression")


def is_export_node(node):
    return node is not None and node.get("type") in EXPORT_KINDS


def is_type_only_export(node):
    if node is None:
        return False

    # export type * from "./x"
    if node.get("type") == "ExportAllDeclaration":
        return node.get("exportKind") == "type"

    if node.get("type") != "ExportNamedDeclaration":
        return False

    # export type { Foo } from "./x"
    if node.get("exportKind") == "type":
        return True

    # export { type Foo } from "./x"
    specifiers = node.get("specifiers") or []
    if specifiers:
        return all(spec.get("exportKind") == "type" for spec in specifiers)

    return False


def is_local_named_export_list(node):
    """`export { foo }`: no inline declaration and no remote source."""
    if node is None or node.get("type") != "ExportNamedDeclaration":
        return False
    if node.get("declaration") is not None or node.get("source") is not None:
        return False
    return bool(node.get("specifiers"))


def _exported_variable_declaration(node):
    if node is None or node.get("type") != "ExportNamedDeclaration":
        return None
    declaration = node.get("declaration")
    if declaration is None or declaration.get("type") != "VariableDeclaration":
        return None
    return declaration


def is_local_alias_export(node):
    """`export const x = y` or `export const x = obj.y`."""
    declaration = _exported_variable_declaration(node)
    if declaration is None:
        return False
    return any(is_alias_expression(d.get("init")) for d in declaration.get("declarations") or [])


def is_primitive_const_export(node):
    if node is None or node.get("source") is not None:
        return False

    declaration = _exported_variable_declaration(node)
    if declaration is None or declaration.get("kind") != "const":
        return False

    declarators = declaration.get("declarations") or []
    if not declarators:
        return False

    return all(_is_identifier(d.get("id")) and is_primitive_literal(d.get("init")) for d in declarators)


def is_re_export(node):
    if node is None:
        return False
    if node.get("type") == "ExportAllDeclaration":
        return True
    return node.get("type") == "ExportNamedDeclaration" and node.get("source") is not None


def is_exempt_export(node, allow_re_export=False):
    if is_type_only_export(node):
        return True
    if is_primitive_const_export(node):
        return True
    return allow_re_export and is_re_export(node)


def default_exported_name(node):
    """Name in `export default name;`, or None for any other export."""
    if node is None or node.get("type") != "ExportDefaultDeclaration":
        return None
    declaration = node.get("declaration")
    if not _is_identifier(declaration):
        return None
    return declaration["name"]


def is_exported_function(function):
    parent = function.get("parent")
    if parent is None:
        return False
    if parent.get("type") not in ("ExportNamedDeclaration", "ExportDefaultDeclaration"):
        return False
    return parent.get("declaration") is function
