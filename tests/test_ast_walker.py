import unittest

from ast_loader import link_parents
from ast_walker import iter_child_fields, iter_children, node_span, walk_ast
from estree_builders import build, call, const, expr_stmt, func_decl, ident, if_, lit, program, ret


class AstWalkerTest(unittest.TestCase):
    def test_declared_kind_children_follow_field_order(self):
        node = if_(ident("a"), ret(lit(1)), ret(lit(2)))
        fields = [field for field, _child in iter_child_fields(node)]
        self.assertEqual(fields, ["test", "consequent", "alternate"])

    def test_unknown_kind_falls_back_to_own_fields(self):
        node = {
            "type": "FancyNewExpression",
            "left": ident("a"),
            "items": [ident("b"), None, ident("c")],
            "loc": {"start": {"line": 1, "column": 0}},
            "range": [0, 5],
        }
        names = [child["name"] for child in iter_children(node)]
        self.assertEqual(names, ["a", "b", "c"])

    def test_parent_link_is_never_followed(self):
        tree = link_parents(program(expr_stmt(call("f", ident("x")))))
        statement = tree["body"][0]
        self.assertIs(statement["parent"], tree)

        unknown = {"type": "Mystery", "parent": tree, "inner": ident("y")}
        self.assertEqual([c["name"] for c in iter_children(unknown)], ["y"])

    def test_walk_visits_every_node_once_in_preorder(self):
        tree = build(program(const("a", lit(1)), func_decl("f", ["x"], ret(ident("x")))))
        nodes = walk_ast(tree, [])

        kinds = [n["type"] for n in nodes]
        self.assertEqual(kinds[0], "Program")
        self.assertEqual(kinds[1], "VariableDeclaration")
        self.assertEqual(len(nodes), len({id(n) for n in nodes}))
        self.assertEqual(kinds.count("Identifier"), 4)

    def test_node_span_reads_offsets_or_range(self):
        self.assertEqual(node_span({"type": "X", "start": 3, "end": 9}), (3, 9))
        self.assertEqual(node_span({"type": "X", "range": [1, 2]}), (1, 2))
        self.assertIsNone(node_span({"type": "X"}))


if __name__ == "__main__":
    unittest.main()
