import sys


PARENT_FIELD = "parent"

# Ordered child fields per ESTree kind. Kinds missing here are walked by
# enumerating the node's own fields.
VISITOR_KEYS = {
    "Program": ("body",),
    "ExpressionStatement": ("expression",),
    "BlockStatement": ("body",),
    "StaticBlock": ("body",),
    "EmptyStatement": (),
    "DebuggerStatement": (),
    "ReturnStatement": ("argument",),
    "ThrowStatement": ("argument",),
    "IfStatement": ("test", "consequent", "alternate"),
    "SwitchStatement": ("discriminant", "cases"),
    "SwitchCase": ("test", "consequent"),
    "WhileStatement": ("test", "body"),
    "DoWhileStatement": ("body", "test"),
    "ForStatement": ("init", "test", "update", "body"),
    "ForInStatement": ("left", "right", "body"),
    "ForOfStatement": ("left", "right", "body"),
    "LabeledStatement": ("label", "body"),
    "BreakStatement": ("label",),
    "ContinueStatement": ("label",),
    "TryStatement": ("block", "handler", "finalizer"),
    "CatchClause": ("param", "body"),
    "WithStatement": ("object", "body"),
    "FunctionDeclaration": ("id", "typeParameters", "params", "returnType", "body"),
    "FunctionExpression": ("id", "typeParameters", "params", "returnType", "body"),
    "ArrowFunctionExpression": ("typeParameters", "params", "returnType", "body"),
    "ClassDeclaration": (
        "decorators",
        "id",
        "typeParameters",
        "superClass",
        "superTypeArguments",
        "implements",
        "body",
    ),
    "ClassExpression": (
        "decorators",
        "id",
        "typeParameters",
        "superClass",
        "superTypeArguments",
        "implements",
        "body",
    ),
    "ClassBody": ("body",),
    "MethodDefinition": ("decorators", "key", "value"),
    "PropertyDefinition": ("decorators", "key", "typeAnnotation", "value"),
    "AccessorProperty": ("decorators", "key", "typeAnnotation", "value"),
    "VariableDeclaration": ("declarations",),
    "VariableDeclarator": ("id", "init"),
    "Identifier": ("decorators", "typeAnnotation"),
    "PrivateIdentifier": (),
    "Literal": (),
    "ThisExpression": (),
    "Super": (),
    "TemplateLiteral": ("quasis", "expressions"),
    "TemplateElement": (),
    "TaggedTemplateExpression": ("tag", "typeArguments", "quasi"),
    "ArrayExpression": ("elements",),
    "ObjectExpression": ("properties",),
    "Property": ("key", "value"),
    "SpreadElement": ("argument",),
    "UnaryExpression": ("argument",),
    "UpdateExpression": ("argument",),
    "BinaryExpression": ("left", "right"),
    "LogicalExpression": ("left", "right"),
    "AssignmentExpression": ("left", "right"),
    "ConditionalExpression": ("test", "consequent", "alternate"),
    "SequenceExpression": ("expressions",),
    "CallExpression": ("callee", "typeArguments", "arguments"),
    "NewExpression": ("callee", "typeArguments", "arguments"),
    "MemberExpression": ("object", "property"),
    "ChainExpression": ("expression",),
    "ParenthesizedExpression": ("expression",),
    "AwaitExpression": ("argument",),
    "YieldExpression": ("argument",),
    "ImportExpression": ("source", "options"),
    "MetaProperty": ("meta", "property"),
    "ObjectPattern": ("properties", "typeAnnotation"),
    "ArrayPattern": ("elements", "typeAnnotation"),
    "RestElement": ("argument", "typeAnnotation"),
    "AssignmentPattern": ("left", "right"),
    "ImportDeclaration": ("specifiers", "source", "attributes"),
    "ImportSpecifier": ("imported", "local"),
    "ImportDefaultSpecifier": ("local",),
    "ImportNamespaceSpecifier": ("local",),
    "ImportAttribute": ("key", "value"),
    "ExportNamedDeclaration": ("declaration", "specifiers", "source", "attributes"),
    "ExportDefaultDeclaration": ("declaration",),
    "ExportAllDeclaration": ("exported", "source", "attributes"),
    "ExportSpecifier": ("local", "exported"),
    "Decorator": ("expression",),
}


def is_node(value):
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def iter_child_fields(node):
    """
    Yields (field, child) for every direct child of an ESTree node, in
    source order.

    A declared field list wins when one exists for the node's kind; any
    other kind is walked by enumerating its own fields. The parent
    back-reference is never followed.
    """
    fields = VISITOR_KEYS.get(node.get("type"))
    if fields is None:
        fields = [key for key in node if key != PARENT_FIELD]

    for field in fields:
        if field == PARENT_FIELD:
            continue
        value = node.get(field)
        if isinstance(value, list):
            for item in value:
                if is_node(item):
                    yield field, item
        elif is_node(value):
            yield field, value


def iter_children(node):
    for _field, child in iter_child_fields(node):
        yield child


def walk_ast(node, nodes, *, debug=False):
    """
    Collects every node reachable from `node` into a flat, pre-order list
    for the rule engine.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        nodes.append(current)

        if debug:
            print("VISITING:", current.get("type"), file=sys.stderr)

        children = list(iter_children(current))
        stack.extend(reversed(children))

    return nodes


def node_span(node):
    """
    Returns the (start, end) source offsets of a node, or None when the
    frontend did not record them.
    """
    if node is None:
        return None
    start = node.get("start")
    end = node.get("end")
    if isinstance(start, int) and isinstance(end, int):
        return start, end
    span = node.get("range")
    if isinstance(span, (list, tuple)) and len(span) == 2:
        return span[0], span[1]
    return None
