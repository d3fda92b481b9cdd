"""
Answers "is this top-level binding referenced anywhere else in the file?"
without a scope-resolution pass.

Two interchangeable strategies share one question,
`has_external_reference(name, excluded)`:

- BindingTableUsage reads a precomputed reference table from the host.
- ScanUsage walks the whole program and classifies every occurrence of
  the name itself.

Occurrences are matched against the excluded export nodes by source span,
never by object identity, since the host table and the tree need not share
node instances.

Nested scopes are not modeled: an unrelated inner binding that happens to
share the name still counts as a use of the outer one.
"""

from ast_walker import iter_child_fields, node_span


REFERENCE = "reference"
DECLARATION = "declaration"
PATTERN = "pattern"
TYPE_ONLY = "type"

_SKIP = "skip"

_FUNCTION_KINDS = {"FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression"}
_NAMED_KINDS = _FUNCTION_KINDS | {"ClassDeclaration", "ClassExpression"}
_LABEL_KINDS = {"LabeledStatement", "BreakStatement", "ContinueStatement"}
_KEYED_KINDS = {"Property", "MethodDefinition", "PropertyDefinition", "AccessorProperty"}
_IMPORT_SPECIFIER_KINDS = {"ImportSpecifier", "ImportDefaultSpecifier", "ImportNamespaceSpecifier"}

TYPE_ONLY_FIELDS = frozenset(
    {
        "typeAnnotation",
        "returnType",
        "typeParameters",
        "typeArguments",
        "superTypeArguments",
        "implements",
    }
)

# TypeScript kinds that still carry runtime expressions, with the fields
# that hold them. Every other TS* kind is a type-only position.
TS_RUNTIME_FIELDS = {
    "TSAsExpression": ("expression",),
    "TSSatisfiesExpression": ("expression",),
    "TSNonNullExpression": ("expression",),
    "TSTypeAssertion": ("expression",),
    "TSInstantiationExpression": ("expression",),
    "TSExportAssignment": ("expression",),
    "TSParameterProperty": ("parameter",),
    "TSEnumDeclaration": ("members", "body"),
    "TSEnumBody": ("members",),
    "TSEnumMember": ("initializer",),
    "TSModuleDeclaration": ("body",),
    "TSModuleBlock": ("body",),
    "TSImportEqualsDeclaration": ("moduleReference",),
    # `import d = config.defaults` reads only the left-most name.
    "TSQualifiedName": ("left",),
}


def _is_type_only_kind(kind):
    return kind.startswith("TS") and kind not in TS_RUNTIME_FIELDS


def _child_role(parent, field, child, role):
    """
    Role of `child` reached through `parent.field`, given the parent's own
    role. _SKIP prunes the subtree.
    """
    kind = parent.get("type")

    if field in TYPE_ONLY_FIELDS or _is_type_only_kind(child.get("type", "")):
        return _SKIP

    # Ambient `declare namespace` bodies and `import type X = A.B` are type-only.
    if kind == "TSModuleDeclaration" and parent.get("declare"):
        return _SKIP
    if kind == "TSImportEqualsDeclaration" and parent.get("importKind") == "type":
        return _SKIP

    if kind in TS_RUNTIME_FIELDS:
        if field not in TS_RUNTIME_FIELDS[kind]:
            return _SKIP
        return PATTERN if kind == "TSParameterProperty" else REFERENCE

    if role == PATTERN:
        if kind == "Property" and field == "key":
            return REFERENCE if parent.get("computed") else _SKIP
        if kind == "AssignmentPattern" and field == "right":
            return REFERENCE
        if kind in ("ObjectPattern", "ArrayPattern", "RestElement", "AssignmentPattern", "Property"):
            return PATTERN

    if field == "id" and kind in _NAMED_KINDS:
        return DECLARATION
    if field == "params" and kind in _FUNCTION_KINDS:
        return PATTERN
    if field == "param" and kind == "CatchClause":
        return PATTERN
    if field == "id" and kind == "VariableDeclarator":
        return PATTERN
    if field == "label" and kind in _LABEL_KINDS:
        return _SKIP

    if kind in _IMPORT_SPECIFIER_KINDS:
        return DECLARATION
    if kind == "ExportSpecifier":
        return DECLARATION
    if kind == "ExportAllDeclaration" and field == "exported":
        return _SKIP
    if kind == "ImportAttribute" and field == "key":
        return _SKIP

    if field == "key" and kind in _KEYED_KINDS and not parent.get("computed"):
        return _SKIP
    if field == "property" and kind == "MemberExpression" and not parent.get("computed"):
        return _SKIP
    if kind == "MetaProperty":
        return _SKIP

    return REFERENCE


def _jsx_reference(parent, field, child):
    kind = parent.get("type")
    if kind in ("JSXOpeningElement", "JSXClosingElement") and field == "name":
        # Lowercase tags are intrinsic elements, not bindings.
        return child.get("name", "")[:1].isupper()
    return kind == "JSXMemberExpression" and field == "object"


def iter_occurrences(root, name):
    """
    Yields (role, node) for every identifier spelled `name` under `root`.
    Identifiers in pruned positions (property keys, labels, type-only
    positions) are not yielded at all.
    """
    stack = [(root, REFERENCE)]
    while stack:
        node, role = stack.pop()
        pending = []
        for field, child in iter_child_fields(node):
            child_role = _child_role(node, field, child, role)
            if child_role == _SKIP:
                continue

            kind = child.get("type")
            if kind == "JSXIdentifier":
                if child.get("name") == name and _jsx_reference(node, field, child):
                    yield REFERENCE, child
                continue
            if kind == "Identifier" and child.get("name") == name:
                yield child_role, child

            pending.append((child, child_role))
        stack.extend(reversed(pending))


def _inside(span, outer):
    return outer[0] <= span[0] and span[1] <= outer[1]


class UsageResolver:
    """
    Shared memo and span filtering. Subclasses supply the spans of every
    qualifying reference to a name.
    """

    def __init__(self):
        self._memo = {}

    def reference_spans(self, name):
        raise NotImplementedError("reference_spans() must be implemented")

    def has_external_reference(self, name, excluded=()):
        excluded_spans = tuple(sorted(s for s in (node_span(n) for n in excluded) if s is not None))
        key = (name, excluded_spans)
        if key not in self._memo:
            self._memo[key] = self._scan(name, excluded_spans)
        return self._memo[key]

    def _scan(self, name, excluded_spans):
        for span in self.reference_spans(name):
            # Without a span there is nothing to compare; count it as a use.
            if span is None:
                return True
            if any(_inside(span, outer) for outer in excluded_spans):
                continue
            return True
        return False


class BindingTableUsage(UsageResolver):
    """
    Host fast path. The table maps a name to its occurrences, each a dict
    with a span (`start`/`end` or `range`) and a `kind` of reference,
    declaration, pattern or type.
    """

    def __init__(self, table):
        super().__init__()
        self.table = table

    def reference_spans(self, name):
        for occurrence in self.table.get(name) or ():
            if occurrence.get("kind", REFERENCE) != REFERENCE:
                continue
            yield node_span(occurrence)


class ScanUsage(UsageResolver):
    def __init__(self, program):
        super().__init__()
        self.program = program

    def reference_spans(self, name):
        for role, node in iter_occurrences(self.program, name):
            if role == REFERENCE:
                yield node_span(node)


def build_usage_resolver(program, binding_table=None):
    if binding_table is not None:
        return BindingTableUsage(binding_table)
    return ScanUsage(program)


class Declaration:
    """A named top-level binding: function, class or variable."""

    def __init__(self, name, kind, node):
        self.name = name
        self.kind = kind
        self.node = node

    def __repr__(self):
        return f"Declaration({self.name!r}, {self.kind!r})"


def _pattern_names(pattern):
    if pattern is None:
        return
    kind = pattern.get("type")
    if kind == "Identifier":
        yield pattern.get("name")
    elif kind == "ObjectPattern":
        for prop in pattern.get("properties") or []:
            if prop.get("type") == "RestElement":
                yield from _pattern_names(prop.get("argument"))
            else:
                yield from _pattern_names(prop.get("value"))
    elif kind == "ArrayPattern":
        for element in pattern.get("elements") or []:
            yield from _pattern_names(element)
    elif kind == "RestElement":
        yield from _pattern_names(pattern.get("argument"))
    elif kind == "AssignmentPattern":
        yield from _pattern_names(pattern.get("left"))


def _declarations_of(statement):
    if statement is None:
        return
    kind = statement.get("type")

    if kind in ("FunctionDeclaration", "ClassDeclaration"):
        ident = statement.get("id")
        if ident is not None:
            binding = "function" if kind == "FunctionDeclaration" else "class"
            yield Declaration(ident.get("name"), binding, statement)
    elif kind == "VariableDeclaration":
        for declarator in statement.get("declarations") or []:
            for name in _pattern_names(declarator.get("id")):
                yield Declaration(name, "variable", declarator)
    elif kind in ("ExportNamedDeclaration", "ExportDefaultDeclaration"):
        yield from _declarations_of(statement.get("declaration"))


def collect_declarations(program):
    """
    Maps each top-level binding name to its Declarations, in source order.
    Names may repeat.
    """
    declarations = {}
    for statement in program.get("body") or []:
        for declaration in _declarations_of(statement):
            declarations.setdefault(declaration.name, []).append(declaration)
    return declarations
